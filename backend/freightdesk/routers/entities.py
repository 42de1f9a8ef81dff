"""Shipper / consignee / overseas agent management.

Endpoints (``{entity_type}`` is shippers | consignees | overseas_agents):
    GET    /api/entities/{entity_type}/                 List, by name
    POST   /api/entities/{entity_type}/                 Create
    PATCH  /api/entities/{entity_type}/{id}             Update
    DELETE /api/entities/{entity_type}/{id}             Delete (and its document)
    POST   /api/entities/{entity_type}/{id}/document    Attach / replace document

Names are unique per entity type (exact, case-sensitive). The check runs
here before writing; there is no storage constraint behind it.
"""

import logging

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from freightdesk.auth.deps import require_permission
from freightdesk.auth.session import Session
from freightdesk.database import commit_or_raise, get_db
from freightdesk.middleware.exceptions import (
    BusinessLogicError,
    DuplicateNameError,
    IntegrationError,
    ResourceNotFoundError,
)
from freightdesk.models.entity import Entity, EntityType
from freightdesk.schemas.entity import EntityCreate, EntityOut, EntityUpdate
from freightdesk.utils.activity import log_activity
from freightdesk.utils.cache import invalidate_cache
from freightdesk.utils.storage import (
    DocumentStore,
    DocumentTooLargeError,
    get_document_store,
    read_upload,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ── Helpers ──────────────────────────────────────────────────

async def _get_entity(db: AsyncSession, entity_type: EntityType, entity_id: str) -> Entity:
    result = await db.execute(
        select(Entity).where(Entity.id == entity_id, Entity.entity_type == entity_type)
    )
    entity = result.scalar_one_or_none()
    if not entity:
        raise ResourceNotFoundError(entity_type.label, entity_id)
    return entity


async def _ensure_unique_name(
    db: AsyncSession,
    entity_type: EntityType,
    name: str,
    exclude_id: str | None = None,
) -> None:
    query = select(Entity.id).where(Entity.entity_type == entity_type, Entity.name == name)
    if exclude_id:
        query = query.where(Entity.id != exclude_id)
    result = await db.execute(query.limit(1))
    if result.scalar_one_or_none() is not None:
        raise DuplicateNameError(entity_type.label)


async def _discard_document(store: DocumentStore, url: str | None) -> None:
    # Runs after the owning write is committed; a leftover file is acceptable.
    if not url:
        return
    try:
        await store.delete(url)
    except OSError:
        logger.warning("Could not delete document %s", url, exc_info=True)


# ── CRUD ─────────────────────────────────────────────────────

@router.get("/{entity_type}/", response_model=list[EntityOut])
async def list_entities(
    entity_type: EntityType,
    db: AsyncSession = Depends(get_db),
    _session: Session = Depends(require_permission("entities.read")),
):
    result = await db.execute(
        select(Entity).where(Entity.entity_type == entity_type).order_by(Entity.name)
    )
    return [EntityOut.model_validate(e) for e in result.scalars().all()]


@router.post("/{entity_type}/", response_model=EntityOut, status_code=201)
async def create_entity(
    entity_type: EntityType,
    body: EntityCreate,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(require_permission("entities.write")),
):
    await _ensure_unique_name(db, entity_type, body.name)

    entity = Entity(entity_type=entity_type, **body.model_dump())
    db.add(entity)
    await commit_or_raise(db, f"create {entity_type.label.lower()}")

    await log_activity(
        db, session,
        action="created",
        entity_type=entity_type.value,
        entity_id=entity.id,
        entity_code=entity.name,
        summary=f"Added {entity_type.label} {entity.name}",
    )
    await invalidate_cache("dashboard:*")
    return EntityOut.model_validate(entity)


@router.patch("/{entity_type}/{entity_id}", response_model=EntityOut)
async def update_entity(
    entity_type: EntityType,
    entity_id: str,
    body: EntityUpdate,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(require_permission("entities.write")),
):
    entity = await _get_entity(db, entity_type, entity_id)

    updates = body.model_dump(exclude_unset=True)
    if updates.get("name") is None:
        updates.pop("name", None)
    elif updates["name"] != entity.name:
        await _ensure_unique_name(db, entity_type, updates["name"], exclude_id=entity.id)

    for key, value in updates.items():
        setattr(entity, key, value)
    await commit_or_raise(db, f"update {entity_type.label.lower()}")

    await log_activity(
        db, session,
        action="updated",
        entity_type=entity_type.value,
        entity_id=entity.id,
        entity_code=entity.name,
        summary=f"Updated {entity_type.label} {entity.name}",
        details={"fields": sorted(updates)},
    )
    return EntityOut.model_validate(entity)


@router.delete("/{entity_type}/{entity_id}", status_code=204)
async def delete_entity(
    entity_type: EntityType,
    entity_id: str,
    db: AsyncSession = Depends(get_db),
    store: DocumentStore = Depends(get_document_store),
    session: Session = Depends(require_permission("entities.delete")),
):
    """Delete the record first, then its document."""
    entity = await _get_entity(db, entity_type, entity_id)
    document_url = entity.document_url
    name = entity.name

    await db.delete(entity)
    await commit_or_raise(db, f"delete {entity_type.label.lower()}")

    await _discard_document(store, document_url)
    await log_activity(
        db, session,
        action="deleted",
        entity_type=entity_type.value,
        entity_id=entity_id,
        entity_code=name,
        summary=f"Deleted {entity_type.label} {name}",
    )
    await invalidate_cache("dashboard:*")


@router.post("/{entity_type}/{entity_id}/document", response_model=EntityOut)
async def attach_document(
    entity_type: EntityType,
    entity_id: str,
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    store: DocumentStore = Depends(get_document_store),
    session: Session = Depends(require_permission("entities.write")),
):
    """Upload a document for an entity, replacing any previous one."""
    entity = await _get_entity(db, entity_type, entity_id)
    try:
        content = await read_upload(file)
        url = await store.save(entity_type.value, file.filename or "", content)
    except DocumentTooLargeError as e:
        raise BusinessLogicError(str(e), error_code="DOCUMENT_TOO_LARGE")
    except OSError:
        logger.exception("Failed to store document for %s", entity_id)
        raise IntegrationError("Failed to upload document. Please try again.")

    previous_url = entity.document_url
    entity.document_url = url
    entity.document_name = file.filename
    await commit_or_raise(db, "attach document")

    await _discard_document(store, previous_url)
    await log_activity(
        db, session,
        action="document_attached",
        entity_type=entity_type.value,
        entity_id=entity.id,
        entity_code=entity.name,
        summary=f"Attached {file.filename} to {entity_type.label} {entity.name}",
    )
    return EntityOut.model_validate(entity)
