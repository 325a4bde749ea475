"""
alembic/env.py

Migration environment for the academic KPI schema.

The target URL is taken, first match wins, from:
  1. ``alembic -x db_url=...``
  2. ALEMBIC_DATABASE_URL
  3. ``sqlalchemy.url`` in alembic.ini
  4. the application's own resolution (DATABASE_URL and friends)
"""

from __future__ import annotations

import logging
import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

import db.models  # noqa: F401  registers every table on Base.metadata
from db.base import Base
from db.config import (
    load_env_files,
    normalize_postgres_url,
    redact_database_url,
    resolve_database_url,
)

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")

target_metadata = Base.metadata


def _explicit_url() -> str | None:
    x_args = context.get_x_argument(as_dictionary=True)
    if x_args.get("db_url"):
        return x_args["db_url"]
    if os.getenv("ALEMBIC_DATABASE_URL"):
        return os.environ["ALEMBIC_DATABASE_URL"]
    ini_url = (config.get_main_option("sqlalchemy.url") or "").strip()
    return ini_url or None


def _migration_url() -> str:
    load_env_files()
    explicit = _explicit_url()
    url = normalize_postgres_url(explicit) if explicit else resolve_database_url()
    if not url.startswith("postgresql"):
        raise RuntimeError("Alembic is configured for PostgreSQL URLs only.")
    logger.info("Migrating %s", redact_database_url(url))
    return url


def _configure(**kwargs: object) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
        **kwargs,
    )


def run_migrations_offline() -> None:
    _configure(
        url=_migration_url(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = _migration_url()
    connectable = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with connectable.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
