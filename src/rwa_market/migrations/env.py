"""Alembic environment for the marketplace store tables."""

from __future__ import annotations

import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from rwa_market.config import load_config
from rwa_market.db.base import Base
from rwa_market.db.engine import ensure_psycopg_driver

# Import all table modules so Base.metadata sees them
import rwa_market.db.tables  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def get_url() -> str:
    """Resolve DB URL from config.yaml, where MARKET_DATABASE_URL takes precedence."""
    app_config = load_config(os.environ.get("MARKET_CONFIG_PATH", "config.yaml"))
    return ensure_psycopg_driver(app_config.database.url)


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode: emit SQL without connecting."""
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = create_engine(get_url(), poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
