"""JWT token creation and decoding.

Token claims:
  - sub:          subject id (account id or directory entry id)
  - role:         "superadmin" | "rms"
  - source:       "account" | "directory"
  - permissions:  capability map, {"jobs.read": true, ...}
  - sid:          login session id, shared by every token of one login
  - type:         "access" | "refresh"
  - exp:          expiry timestamp
"""

import uuid
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from freightdesk.config import settings

ALGORITHM = settings.jwt_algorithm


def new_session_id() -> str:
    return uuid.uuid4().hex


def create_access_token(
    subject_id: str,
    role: str,
    source: str,
    permissions: dict[str, bool],
    session_id: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload = {
        "sub": subject_id,
        "role": role,
        "source": source,
        "permissions": permissions,
        "sid": session_id or new_session_id(),
        "type": "access",
        "exp": expire,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def create_refresh_token(subject_id: str, source: str, session_id: str | None = None) -> str:
    # Role and permissions are re-resolved on refresh, so they are not carried.
    expire = datetime.now(timezone.utc) + timedelta(days=settings.refresh_token_expire_days)
    payload = {
        "sub": subject_id,
        "source": source,
        "sid": session_id or new_session_id(),
        "type": "refresh",
        "exp": expire,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT. Returns empty dict on failure."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return {}
