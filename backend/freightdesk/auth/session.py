"""Login resolution and the immutable Session it produces.

Two identity sources exist:

  * account   — identifiers containing ``settings.superadmin_marker`` (an
                email address). Credentials live on ``UserAccount``; role and
                capabilities on the matching ``UserProfile``.
  * directory — anything else is a relationship-manager short code, matched
                case-insensitively against ``RelationshipManager.login_code``.

A session is only issued once the profile behind it has been read. If that
read fails or finds nothing, login fails with ``ProfileNotFoundError``.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from freightdesk.auth.password import verify_password
from freightdesk.auth.permissions import resolve_permissions
from freightdesk.config import settings
from freightdesk.middleware.exceptions import (
    AccountInactiveError,
    IncorrectCredentialError,
    InvalidIdentifierError,
    ProfileNotFoundError,
)
from freightdesk.models.relationship_manager import RelationshipManager
from freightdesk.models.user import UserAccount, UserProfile, UserRole

logger = logging.getLogger(__name__)

SOURCE_ACCOUNT = "account"
SOURCE_DIRECTORY = "directory"


@dataclass(frozen=True)
class Session:
    subject_id: str
    source: str
    role: str
    permissions: dict[str, bool] = field(default_factory=dict)
    display_name: str = ""
    email: str | None = None

    @property
    def is_superadmin(self) -> bool:
        return self.role == UserRole.SUPERADMIN.value

    def can(self, *capabilities: str) -> bool:
        return all(self.permissions.get(c) is True for c in capabilities)


def is_account_identifier(identifier: str) -> bool:
    return settings.superadmin_marker in identifier


def _is_active_status(status: str | None) -> bool:
    return (status or "").strip().lower() == "active"


def _session_from_profile(profile: UserProfile) -> Session:
    role = profile.role.value if isinstance(profile.role, UserRole) else str(profile.role)
    return Session(
        subject_id=profile.id,
        source=SOURCE_ACCOUNT,
        role=role,
        permissions=resolve_permissions(role, profile.permissions),
        display_name=profile.full_name,
        email=profile.email,
    )


def _session_from_directory(rm: RelationshipManager) -> Session:
    role = UserRole.RMS.value
    return Session(
        subject_id=rm.id,
        source=SOURCE_DIRECTORY,
        role=role,
        permissions=resolve_permissions(role, rm.permissions),
        display_name=rm.full_name,
        email=rm.email,
    )


async def _load_profile(db: AsyncSession, account_id: str) -> UserProfile:
    try:
        result = await db.execute(select(UserProfile).where(UserProfile.id == account_id))
        profile = result.scalar_one_or_none()
    except SQLAlchemyError:
        logger.exception("Profile lookup failed for account %s", account_id)
        raise ProfileNotFoundError()
    if profile is None:
        raise ProfileNotFoundError()
    return profile


async def _resolve_account(db: AsyncSession, email: str, password: str) -> Session:
    result = await db.execute(
        select(UserAccount).where(UserAccount.email == email.strip().lower())
    )
    account = result.scalar_one_or_none()
    if account is None:
        raise InvalidIdentifierError()
    if not verify_password(password, account.hashed_password):
        raise IncorrectCredentialError()
    if not account.is_active:
        raise AccountInactiveError()

    profile = await _load_profile(db, account.id)
    return _session_from_profile(profile)


async def _resolve_directory(db: AsyncSession, code: str, password: str) -> Session:
    result = await db.execute(
        select(RelationshipManager).where(
            RelationshipManager.login_code == code.strip().lower()
        )
    )
    rm = result.scalar_one_or_none()
    if rm is None:
        raise InvalidIdentifierError()
    if not verify_password(password, rm.hashed_password):
        raise IncorrectCredentialError()
    if not _is_active_status(rm.status):
        raise AccountInactiveError()

    rm.last_login_at = datetime.utcnow()
    await db.flush()
    return _session_from_directory(rm)


async def resolve_session(db: AsyncSession, identifier: str, password: str) -> Session:
    """Authenticate ``identifier``/``password`` and build the session.

    Raises one of InvalidIdentifierError, IncorrectCredentialError,
    AccountInactiveError or ProfileNotFoundError. Never retried.
    """
    if is_account_identifier(identifier):
        session = await _resolve_account(db, identifier, password)
    else:
        session = await _resolve_directory(db, identifier, password)
    logger.info("Session opened for %s (%s, %s)", session.subject_id, session.source, session.role)
    return session


async def reload_session(db: AsyncSession, subject_id: str, source: str) -> Session:
    """Re-read the profile behind an issued token.

    Used on every authenticated request and on refresh, so role or
    capability edits and deactivation take effect without a new login.
    """
    if source == SOURCE_DIRECTORY:
        try:
            rm = await db.get(RelationshipManager, subject_id)
        except SQLAlchemyError:
            logger.exception("Directory lookup failed for %s", subject_id)
            raise ProfileNotFoundError()
        if rm is None:
            raise ProfileNotFoundError()
        if not _is_active_status(rm.status):
            raise AccountInactiveError()
        return _session_from_directory(rm)

    try:
        account = await db.get(UserAccount, subject_id)
    except SQLAlchemyError:
        logger.exception("Account lookup failed for %s", subject_id)
        raise ProfileNotFoundError()
    if account is None:
        raise ProfileNotFoundError()
    if not account.is_active:
        raise AccountInactiveError()

    profile = await _load_profile(db, subject_id)
    return _session_from_profile(profile)
