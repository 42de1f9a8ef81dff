"""Alembic environment for the FreightDesk schema.

Usage:
  alembic upgrade head
  alembic -x db_url=sqlite:///local.db upgrade head   # any other database

The URL defaults to DATABASE_URL_SYNC. SQLite cannot ALTER most columns in
place, so migrations run in batch mode there.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from freightdesk.config import settings
from freightdesk.database import Base
import freightdesk.models  # noqa: F401  registers every table on Base.metadata

config = context.config
db_url = context.get_x_argument(as_dictionary=True).get("db_url") or settings.database_url_sync
config.set_main_option("sqlalchemy.url", db_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata
render_as_batch = db_url.startswith("sqlite")


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of running it."""
    context.configure(
        url=db_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=render_as_batch,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=render_as_batch,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
