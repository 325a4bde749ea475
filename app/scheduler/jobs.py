"""
app/scheduler/jobs.py

APScheduler-based batch scheduler for periodic KPI snapshots.

Publisher discovery (no hardcoded ids)
--------------------------------------
Publishers are resolved at job runtime from two sources, merged and
deduplicated in order:

  1. ``publishers`` table: every active publisher.
  2. ``SCHEDULER_PUBLISHERS`` env var: comma-separated publisher ids,
     e.g. ``pub-1,pub-2``.  Acts as a seed for publishers not yet
     registered in the table.

Schedule (all times UTC)
--------------------------
  daily_kpi: SCHEDULER_DAILY_KPI_HOUR:SCHEDULER_DAILY_KPI_MINUTE, default 02:00

Lifecycle
----------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on app boot; shut it down gracefully on app shutdown.
The scheduler is wired into FastAPI via the ``lifespan`` context in main.py.
The same scheduler instance also carries the per-publisher live refresh
jobs registered through :class:`app.scheduler.refresh.RefreshScheduler`.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from apscheduler.schedulers.background import BackgroundScheduler
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_scheduler_settings
from app.repositories.academic_record_repository import SQLAlchemyAcademicRecordRepository
from app.services.kpi_orchestrator import AcademicKPIOrchestrator
from db.session import session_scope

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Publisher discovery
# ---------------------------------------------------------------------------


def _publishers_from_db(session: Session) -> list[str]:
    try:
        return SQLAlchemyAcademicRecordRepository(session).list_publisher_ids()
    except SQLAlchemyError as exc:
        logger.warning("Publisher discovery from DB failed: %s", exc)
        return []


def _resolve_publishers(session: Session) -> list[str]:
    """DB publishers followed by env-seeded ones, without duplicates."""
    merged: dict[str, None] = dict.fromkeys(_publishers_from_db(session))
    for publisher_id in get_scheduler_settings().seed_publishers:
        merged.setdefault(publisher_id, None)
    return list(merged)


# ---------------------------------------------------------------------------
# Job: Daily KPI snapshot
# ---------------------------------------------------------------------------


def run_daily_kpi(now: datetime | None = None) -> None:
    """
    Recompute and persist KPIs for all known publishers over the trailing
    window.  The orchestrator commits per publisher; one failing publisher
    does not stop the others.
    """
    logger.info("Scheduler: daily_kpi starting")
    settings = get_scheduler_settings()
    period_end = now or datetime.now(tz=timezone.utc)
    period_start = period_end - timedelta(days=settings.lookback_days)

    with session_scope() as db:
        publishers = _resolve_publishers(db)
        if not publishers:
            logger.warning("Scheduler: daily_kpi: no publishers found, skipping")
            return

        orchestrator = AcademicKPIOrchestrator(SQLAlchemyAcademicRecordRepository(db))
        for publisher_id in publishers:
            try:
                record = orchestrator.persist_snapshot(
                    publisher_id,
                    period_start=period_start,
                    period_end=period_end,
                    db=db,
                )
                logger.info(
                    "Scheduler: daily_kpi publisher=%r record_id=%s", publisher_id, record.id
                )
            except Exception as exc:  # noqa: BLE001
                db.rollback()
                logger.warning("Scheduler: daily_kpi failed publisher=%r: %s", publisher_id, exc)

    logger.info("Scheduler: daily_kpi complete")


# ---------------------------------------------------------------------------
# Scheduler factory
# ---------------------------------------------------------------------------


def build_scheduler() -> BackgroundScheduler:
    """
    Build and register all periodic batch jobs.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    The caller must call ``.start()`` and ``.shutdown(wait=True)`` at the
    appropriate lifecycle points.
    """
    settings = get_scheduler_settings()
    scheduler = BackgroundScheduler(timezone="UTC")

    scheduler.add_job(
        run_daily_kpi,
        trigger="cron",
        hour=settings.daily_kpi_hour,
        minute=settings.daily_kpi_minute,
        id="daily_kpi",
        name="Daily KPI snapshot",
        replace_existing=True,
        misfire_grace_time=3600,
    )

    return scheduler
