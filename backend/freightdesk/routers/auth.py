"""Auth routes: login, refresh, logout, me.

Route overview:
  POST /login    — email (account users) or login code (RMs) + password
  POST /refresh  — exchange a refresh token for new access + refresh tokens
  POST /logout   — revoke every token of the presented session
  GET  /me       — return the current session

Every token of one login carries the same ``sid`` claim. Refresh keeps it,
and logout revokes it, so neither the access nor the refresh token of a
closed session can be used again.
"""

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from freightdesk.auth.deps import get_current_session, oauth2_scheme
from freightdesk.auth.jwt import (
    create_access_token,
    create_refresh_token,
    decode_token,
    new_session_id,
)
from freightdesk.auth.revocation import TokenRevocation
from freightdesk.auth.session import Session, reload_session, resolve_session
from freightdesk.database import get_db
from freightdesk.schemas.auth import LoginRequest, RefreshRequest, SessionOut, TokenResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _build_token_response(session: Session, session_id: str) -> TokenResponse:
    access = create_access_token(
        subject_id=session.subject_id,
        role=session.role,
        source=session.source,
        permissions=session.permissions,
        session_id=session_id,
    )
    refresh = create_refresh_token(session.subject_id, session.source, session_id)
    return TokenResponse(
        access_token=access,
        refresh_token=refresh,
        session=SessionOut(**asdict(session)),
    )


# ── POST /login ──────────────────────────────────────────────

@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Authenticate and open a session.

    Failures are reported as INVALID_IDENTIFIER, INCORRECT_CREDENTIAL,
    ACCOUNT_INACTIVE or PROFILE_NOT_FOUND.
    """
    session = await resolve_session(db, body.identifier, body.password)
    return _build_token_response(session, new_session_id())


# ── POST /refresh ────────────────────────────────────────────

@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest, db: AsyncSession = Depends(get_db)):
    """Exchange a refresh token; role, permissions and account state are re-read."""
    payload = decode_token(body.refresh_token)
    if payload.get("type") != "refresh" or not payload.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    session_id = payload.get("sid") or new_session_id()
    if await TokenRevocation.is_revoked(body.refresh_token, session_id):
        raise HTTPException(status_code=401, detail="Token has been revoked")

    session = await reload_session(db, payload["sub"], payload.get("source", ""))
    return _build_token_response(session, session_id)


# ── POST /logout ─────────────────────────────────────────────

@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    token: str = Depends(oauth2_scheme),
    session: Session = Depends(get_current_session),
):
    """Tear the session down: the access token and its refresh token both stop working."""
    payload = decode_token(token)
    await TokenRevocation.revoke_token(token, float(payload.get("exp", 0)))
    if payload.get("sid"):
        await TokenRevocation.revoke_session(payload["sid"])
    logger.info("Session closed for %s", session.subject_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ── GET /me ──────────────────────────────────────────────────

@router.get("/me", response_model=SessionOut)
async def me(session: Session = Depends(get_current_session)):
    return SessionOut(**asdict(session))
