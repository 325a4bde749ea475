"""
app/main.py

Process entry point: ``uvicorn app.main:app``.  The server is not a
runtime import; install it with the ``serve`` extra
(``pip install .[serve]``).

Startup order: environment validation, logging, then (inside the
lifespan) database reachability, schema check and scheduler start.
"""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

_INT_SETTINGS = (
    "ANALYTICS_REFRESH_INTERVAL_MS",
    "ANALYTICS_EVENT_FEED_LIMIT",
    "REVIEWER_MIN_COMPLETED_REVIEWS",
    "REVIEWER_EFFICIENCY_LIST_SIZE",
    "REVIEWER_TOP_PERFORMERS_SIZE",
    "REVIEWER_UNDERPERFORMERS_SIZE",
    "SCHEDULER_DAILY_KPI_HOUR",
    "SCHEDULER_DAILY_KPI_MINUTE",
    "SCHEDULER_LOOKBACK_DAYS",
    "DB_POOL_SIZE",
    "DB_MAX_OVERFLOW",
    "DB_POOL_RECYCLE",
)
_FLOAT_SETTINGS = (
    "REVIEWER_MIN_RESPONSE_RATE",
    "REVIEWER_MIN_QUALITY_SCORE",
)


def _invalid_numbers() -> list[str]:
    errors: list[str] = []
    for names, parse, kind in (
        (_INT_SETTINGS, int, "an integer"),
        (_FLOAT_SETTINGS, float, "a number"),
    ):
        for name in names:
            raw = os.getenv(name)
            if raw is None:
                continue
            try:
                parse(raw.strip())
            except ValueError:
                errors.append(f"{name}={raw!r} is not {kind}.")
    return errors


def _validate_env() -> None:
    """
    Fail fast on configuration the settings loaders would otherwise
    silently replace with defaults.

    Every problem is reported in one RuntimeError so the operator can fix
    them all before the next restart.
    """
    from db.config import get_database_settings, load_env_files

    load_env_files()
    errors: list[str] = []

    try:
        get_database_settings()
    except RuntimeError as exc:
        errors.append(str(exc))

    errors.extend(_invalid_numbers())

    if errors:
        raise RuntimeError(
            "Startup validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Root logging for the API process.

    ``LOG_LEVEL`` sets the root level; APScheduler's per-tick chatter is
    held at ``SCHEDULER_LOG_LEVEL`` (WARNING by default).
    """
    def _level(name: str, default: str) -> int:
        return getattr(logging, os.getenv(name, default).strip().upper(), logging.INFO)

    logging.basicConfig(
        level=_level("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logging.getLogger("apscheduler").setLevel(_level("SCHEDULER_LOG_LEVEL", "WARNING"))


def _check_db() -> None:
    from db.session import check_connection

    check_connection()


def _check_schema() -> None:
    """
    Abort startup when an ORM table is missing from the database.

    Migrations are never run automatically; ``alembic upgrade head`` is the
    operator's job.
    """
    from sqlalchemy import inspect as sa_inspect

    import db.models  # noqa: F401  registers all ORM models on Base.metadata
    from db.base import Base
    from db.session import get_engine

    missing = sorted(set(Base.metadata.tables) - set(sa_inspect(get_engine()).get_table_names()))
    if missing:
        logging.getLogger(__name__).critical(
            "Schema mismatch: missing table(s) %s. Run 'alembic upgrade head' and restart.",
            ", ".join(missing),
        )
        raise RuntimeError(f"Schema mismatch: missing table(s) {', '.join(missing)}.")


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Check the database, start the shared scheduler; stop it and drop live subscribers on exit."""
    log = logging.getLogger(__name__)
    _check_db()
    log.info("Database connectivity confirmed")
    _check_schema()
    log.info("Database schema validated")

    refresher = application.state.refresh_scheduler
    refresher.start()
    log.info("Scheduler started with %d jobs", len(refresher.scheduler.get_jobs()))
    try:
        yield
    finally:
        refresher.shutdown(wait=True)
        application.state.event_bus.clear()
        log.info("Scheduler shut down")


def create_app() -> FastAPI:
    _validate_env()
    _configure_logging()

    from app.api.application import build_application

    return build_application(lifespan=_lifespan)


app = create_app()
