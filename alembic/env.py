"""Alembic environment for FestHub.

The URL comes from ``festhub.config.settings`` so migrations and the app
always target the same database. SQLite runs in batch mode because it
cannot ALTER most constraints in place.
"""
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool
from alembic import context

from festhub.config import settings
from festhub.database import Base

# Register every table on Base.metadata for autogenerate
from festhub.models.user import User                    # noqa: F401
from festhub.models.event import Event                  # noqa: F401
from festhub.models.starred_event import StarredEvent   # noqa: F401
from festhub.models.update import EventUpdate, FestivalUpdate  # noqa: F401

config = context.config
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata
AS_BATCH = settings.DATABASE_URL.startswith("sqlite")


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=AS_BATCH,
        **kwargs,
    )


def run_offline() -> None:
    """Emit SQL to stdout without a live connection."""
    _configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_online() -> None:
    engine = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with engine.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_offline()
else:
    run_online()
