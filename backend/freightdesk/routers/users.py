"""User management (superadmin only).

Endpoints:
    GET    /api/users/                                  List account users
    POST   /api/users/                                  Create account user
    GET    /api/users/relationship-managers             List RM directory
    POST   /api/users/relationship-managers             Create RM login code
    PATCH  /api/users/relationship-managers/{id}        Update RM (status, password, permissions)
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from freightdesk.auth.deps import require_role
from freightdesk.auth.password import hash_password
from freightdesk.auth.session import Session
from freightdesk.database import commit_or_raise, get_db
from freightdesk.middleware.exceptions import (
    DuplicateNameError,
    ResourceNotFoundError,
)
from freightdesk.models.relationship_manager import RelationshipManager
from freightdesk.models.user import UserAccount, UserProfile, UserRole
from freightdesk.schemas.user import (
    AccountUserCreate,
    AccountUserOut,
    RelationshipManagerCreate,
    RelationshipManagerOut,
    RelationshipManagerUpdate,
)
from freightdesk.utils.activity import log_activity
from freightdesk.utils.cache import invalidate_cache

logger = logging.getLogger(__name__)

router = APIRouter()

superadmin_only = require_role(UserRole.SUPERADMIN)


# ── Account users ────────────────────────────────────────────

@router.get("/", response_model=list[AccountUserOut])
async def list_users(
    role: UserRole | None = None,
    db: AsyncSession = Depends(get_db),
    _session: Session = Depends(superadmin_only),
):
    query = select(UserProfile).order_by(UserProfile.full_name)
    if role is not None:
        query = query.where(UserProfile.role == role)
    result = await db.execute(query)
    return [AccountUserOut.model_validate(p) for p in result.scalars().all()]


@router.post("/", response_model=AccountUserOut, status_code=201)
async def create_user(
    body: AccountUserCreate,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(superadmin_only),
):
    """Create an email/password account together with its profile."""
    email = body.email.lower()
    existing = await db.execute(select(UserAccount.id).where(UserAccount.email == email))
    if existing.scalar_one_or_none():
        raise DuplicateNameError("User")

    account = UserAccount(email=email, hashed_password=hash_password(body.password))
    db.add(account)
    await db.flush()

    profile = UserProfile(
        id=account.id,
        email=email,
        full_name=body.full_name,
        role=body.role,
        permissions=body.permissions or {},
        created_by=session.subject_id,
    )
    db.add(profile)
    await commit_or_raise(db, "create user")
    logger.info("Account user %s created (%s)", email, body.role.value)

    await log_activity(
        db, session,
        action="user_created",
        entity_type="user",
        entity_id=account.id,
        entity_code=email,
        summary=f"Created {body.role.value} user {body.full_name}",
    )
    return AccountUserOut.model_validate(profile)


# ── Relationship-manager directory ───────────────────────────

@router.get("/relationship-managers", response_model=list[RelationshipManagerOut])
async def list_relationship_managers(
    db: AsyncSession = Depends(get_db),
    _session: Session = Depends(superadmin_only),
):
    result = await db.execute(
        select(RelationshipManager).order_by(RelationshipManager.full_name)
    )
    return [RelationshipManagerOut.model_validate(r) for r in result.scalars().all()]


@router.post("/relationship-managers", response_model=RelationshipManagerOut, status_code=201)
async def create_relationship_manager(
    body: RelationshipManagerCreate,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(superadmin_only),
):
    existing = await db.execute(
        select(RelationshipManager.id).where(RelationshipManager.login_code == body.login_code)
    )
    if existing.scalar_one_or_none():
        raise DuplicateNameError("Login code")

    rm = RelationshipManager(
        login_code=body.login_code,
        hashed_password=hash_password(body.password),
        full_name=body.full_name,
        email=body.email,
        phone=body.phone,
        status=body.status,
        permissions=body.permissions or {},
        created_by=session.subject_id,
    )
    db.add(rm)
    await commit_or_raise(db, "create relationship manager")
    logger.info("Relationship manager %s created", rm.login_code)

    await log_activity(
        db, session,
        action="rm_created",
        entity_type="relationship_manager",
        entity_id=rm.id,
        entity_code=rm.login_code,
        summary=f"Created RM {rm.full_name} ({rm.login_code})",
    )
    await invalidate_cache("dashboard:*")
    return RelationshipManagerOut.model_validate(rm)


@router.patch("/relationship-managers/{rm_id}", response_model=RelationshipManagerOut)
async def update_relationship_manager(
    rm_id: str,
    body: RelationshipManagerUpdate,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(superadmin_only),
):
    rm = await db.get(RelationshipManager, rm_id)
    if not rm:
        raise ResourceNotFoundError("Relationship manager", rm_id)

    updates = body.model_dump(exclude_unset=True)
    password = updates.pop("password", None)
    if password:
        rm.hashed_password = hash_password(password)
    for key, value in updates.items():
        if key in ("full_name", "status", "permissions") and value is None:
            continue
        setattr(rm, key, value)
    await commit_or_raise(db, "update relationship manager")

    changed = sorted(updates) + (["password"] if password else [])
    await log_activity(
        db, session,
        action="rm_updated",
        entity_type="relationship_manager",
        entity_id=rm.id,
        entity_code=rm.login_code,
        summary=f"Updated RM {rm.full_name}",
        details={"fields": changed},
    )
    return RelationshipManagerOut.model_validate(rm)
