"""FastAPI dependencies for authentication and authorization.

Dependencies:
  get_current_session     → decode JWT, re-read the profile, return Session
  require_role(...)       → restrict to specific roles (superadmin always passes)
  require_permission(...) → restrict to sessions holding ALL listed capabilities
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from freightdesk.auth.jwt import decode_token
from freightdesk.auth.permissions import has_permission
from freightdesk.auth.revocation import TokenRevocation
from freightdesk.auth.session import Session, reload_session
from freightdesk.database import get_db
from freightdesk.middleware.exceptions import PermissionDeniedError, ProfileNotFoundError
from freightdesk.models.user import UserRole

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


async def get_current_session(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> Session:
    """Decode the JWT and rebuild the session from the stored profile.

    If the profile has disappeared since login, the token is revoked so the
    session is torn down. A deactivated account is refused on every request
    but keeps its token, so reactivation restores access.
    """
    payload = decode_token(token)
    subject_id: str | None = payload.get("sub")
    if not subject_id or payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if await TokenRevocation.is_revoked(token, payload.get("sid")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has been revoked",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return await reload_session(db, subject_id, payload.get("source", ""))
    except ProfileNotFoundError:
        await TokenRevocation.revoke_token(token, float(payload.get("exp", 0)))
        raise


def require_role(*roles: UserRole):
    """Dependency factory — restrict to one or more roles.

    Superadmin passes every role gate.

    Usage:
        @router.get("/stats")
        async def stats(session: Session = Depends(require_role(UserRole.RMS))):
            ...
    """
    allowed = {r.value for r in roles} | {UserRole.SUPERADMIN.value}

    async def _check(session: Session = Depends(get_current_session)) -> Session:
        if session.role not in allowed:
            raise PermissionDeniedError(
                f"Requires role: {', '.join(r.value for r in roles)}"
            )
        return session

    return _check


def require_permission(*perms: str):
    """Dependency factory — restrict to sessions holding ALL listed capabilities.

    Checks the session's capability map only; role grants nothing here.

    Usage:
        @router.post("/jobs/")
        async def create_job(session: Session = Depends(require_permission("jobs.create"))):
            ...
    """
    async def _check(session: Session = Depends(get_current_session)) -> Session:
        missing = [p for p in perms if not has_permission(session.permissions, p)]
        if missing:
            raise PermissionDeniedError(f"Missing permissions: {', '.join(missing)}")
        return session

    return _check
