"""Pytest configuration and fixtures for FreightDesk tests.

Each test gets a fresh in-memory SQLite database (aiosqlite), a fakeredis
server in place of Redis, and a temporary document directory.
"""

import os
import tempfile
from datetime import datetime
from typing import AsyncGenerator

# Settings are read at import time.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="freightdesk-uploads-"))

import fakeredis
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from freightdesk.auth.jwt import create_access_token
from freightdesk.auth.password import hash_password
from freightdesk.auth.permissions import resolve_permissions
from freightdesk.database import Base, get_db
from freightdesk.main import app
from freightdesk.models.job import Job, JobStatus, ShipmentType
from freightdesk.models.relationship_manager import RelationshipManager
from freightdesk.models.user import UserAccount, UserProfile, UserRole
from freightdesk.utils import cache
from freightdesk.utils.storage import DocumentStore, get_document_store

SUPERADMIN_PASSWORD = "admin-password-1"
RM_PASSWORD = "rm-password"


# ── Database ─────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# ── Redis / storage ──────────────────────────────────────────────

@pytest_asyncio.fixture
async def fake_redis():
    """An isolated fakeredis server installed as the shared client."""
    fake = fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=True)
    cache._redis_client = fake
    yield fake
    cache._redis_client = None
    await fake.aclose()


@pytest.fixture
def document_store(tmp_path) -> DocumentStore:
    return DocumentStore(root=tmp_path / "uploads", url_prefix="/files")


# ── HTTP client ──────────────────────────────────────────────────

@pytest_asyncio.fixture
async def client(session_factory, fake_redis, document_store) -> AsyncGenerator[AsyncClient, None]:
    """Test client with the database, Redis and document store overridden."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_document_store] = lambda: document_store

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ── Identities ───────────────────────────────────────────────────

@pytest_asyncio.fixture
async def superadmin(db_session: AsyncSession) -> UserProfile:
    account = UserAccount(
        email="admin@freightdesk.test",
        hashed_password=hash_password(SUPERADMIN_PASSWORD),
        is_active=True,
    )
    db_session.add(account)
    await db_session.flush()
    profile = UserProfile(
        id=account.id,
        email=account.email,
        full_name="Admin User",
        role=UserRole.SUPERADMIN,
        permissions={},
    )
    db_session.add(profile)
    await db_session.commit()
    return profile


@pytest_asyncio.fixture
async def relationship_manager(db_session: AsyncSession) -> RelationshipManager:
    rm = RelationshipManager(
        login_code="rm01",
        hashed_password=hash_password(RM_PASSWORD),
        full_name="Ravi Menon",
        email="ravi@freightdesk.test",
        status="Active",
        permissions={},
    )
    db_session.add(rm)
    await db_session.commit()
    return rm


@pytest.fixture
def superadmin_password() -> str:
    return SUPERADMIN_PASSWORD


@pytest.fixture
def rm_password() -> str:
    return RM_PASSWORD


def _token(subject_id: str, role: str, source: str, overrides: dict | None = None) -> str:
    return create_access_token(
        subject_id=subject_id,
        role=role,
        source=source,
        permissions=resolve_permissions(role, overrides),
    )


@pytest.fixture
def superadmin_headers(superadmin: UserProfile) -> dict:
    return {"Authorization": f"Bearer {_token(superadmin.id, 'superadmin', 'account')}"}


@pytest.fixture
def rm_headers(relationship_manager: RelationshipManager) -> dict:
    return {"Authorization": f"Bearer {_token(relationship_manager.id, 'rms', 'directory')}"}


# ── Jobs ─────────────────────────────────────────────────────────

@pytest.fixture
def make_job(db_session: AsyncSession):
    """Insert a job directly; returns an async factory."""
    counter = {"n": 10000}

    async def _make(**fields) -> Job:
        counter["n"] += 1
        fields.setdefault("job_number", f"EXP-{counter['n']}/25-26")
        fields.setdefault("shipment_type", ShipmentType.EXPORT)
        fields.setdefault("status", JobStatus.ACTIVE)
        fields.setdefault("created_at", datetime(2025, 4, 15, 10, 30))
        job = Job(**fields)
        db_session.add(job)
        await db_session.commit()
        return job

    return _make


# ── Test Markers ─────────────────────────────────────────────────

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "api: HTTP API tests")
    config.addinivalue_line("markers", "auth: Authentication and authorization tests")
    config.addinivalue_line("markers", "cache: Redis caching tests")
