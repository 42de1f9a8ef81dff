import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from freightdesk.config import settings
from freightdesk.database import create_all_tables
from freightdesk.middleware.exceptions import register_exception_handlers
from freightdesk.middleware.rate_limit import RateLimitMiddleware
from freightdesk.middleware.security import SecurityHeadersMiddleware
from freightdesk.routers import auth, config, dashboard, entities, health, jobs, users
from freightdesk.utils.cache import close_redis

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("freightdesk")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.auto_create_tables:
        await create_all_tables()
        logger.info("Database tables ensured")
    try:
        yield
    finally:
        await close_redis()
        logger.info("Redis connection closed")


app = FastAPI(
    title="FreightDesk",
    description="Freight forwarding job console: jobs, counterparties, RM logins",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Exception Handlers ───────────────────────────────────────
register_exception_handlers(app)

# ── Middleware (outermost first) ─────────────────────────────
app.add_middleware(SecurityHeadersMiddleware)

if settings.rate_limit_enabled:
    app.add_middleware(
        RateLimitMiddleware,
        default_limit=100,
        default_window=60,
        exempt_paths=["/health", "/docs", "/openapi.json", settings.upload_url_prefix],
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ──────────────────────────────────────────────────
app.include_router(health.router)
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(jobs.router, prefix="/api/jobs", tags=["jobs"])
app.include_router(entities.router, prefix="/api/entities", tags=["entities"])
app.include_router(users.router, prefix="/api/users", tags=["users"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["dashboard"])
app.include_router(config.router, prefix="/api/config", tags=["config"])

# ── Entity documents ─────────────────────────────────────────
Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
app.mount(
    settings.upload_url_prefix,
    StaticFiles(directory=settings.upload_dir),
    name="files",
)
