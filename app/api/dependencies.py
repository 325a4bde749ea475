"""
app/api/dependencies.py

Shared FastAPI dependencies.

Process-wide singletons (event bus, refresh scheduler, performance monitor)
live on ``app.state`` and are created by the lifespan in ``app/main.py``.
Request-scoped record sources and event stores wrap a database session.
Tests replace any of these through ``app.dependency_overrides``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import AbstractContextManager, contextmanager
from datetime import datetime

from fastapi import Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from app.config import AnalyticsSettings, get_analytics_settings
from app.domain.academic_records import DateRange
from app.realtime.event_bus import AnalyticsEventBus
from app.realtime.performance import AnalyticsPerformanceMonitor
from app.repositories.academic_record_repository import (
    AcademicRecordSource,
    SQLAlchemyAcademicRecordRepository,
)
from app.repositories.analytics_event_repository import (
    AnalyticsEventStore,
    SQLAlchemyAnalyticsEventStore,
)
from app.scheduler.refresh import RefreshScheduler
from app.services.kpi_orchestrator import AcademicKPIOrchestrator
from app.services.reviewer_service import ReviewerKPIService
from db.repositories.kpi_repository import KPIRepository
from db.session import get_db, session_scope

RecordSourceFactory = Callable[[], AbstractContextManager[AcademicRecordSource]]


# ---------------------------------------------------------------------------
# Application singletons
# ---------------------------------------------------------------------------


def get_event_bus(request: Request) -> AnalyticsEventBus:
    return request.app.state.event_bus


def get_refresh_scheduler(request: Request) -> RefreshScheduler:
    return request.app.state.refresh_scheduler


def get_performance_monitor(request: Request) -> AnalyticsPerformanceMonitor:
    return request.app.state.performance_monitor


def get_settings() -> AnalyticsSettings:
    return get_analytics_settings()


# ---------------------------------------------------------------------------
# Data access
# ---------------------------------------------------------------------------


def get_record_source(db: Session = Depends(get_db)) -> AcademicRecordSource:
    return SQLAlchemyAcademicRecordRepository(db)


def get_event_store(db: Session = Depends(get_db)) -> Iterator[AnalyticsEventStore]:
    """
    Event store bound to the request session; committed when the request
    handler returns without raising.
    """
    store = SQLAlchemyAnalyticsEventStore(db)
    try:
        yield store
        db.commit()
    except Exception:
        db.rollback()
        raise


def get_kpi_repository(db: Session = Depends(get_db)) -> KPIRepository:
    return KPIRepository(db)


@contextmanager
def _sqlalchemy_record_source() -> Iterator[AcademicRecordSource]:
    with session_scope() as session:
        yield SQLAlchemyAcademicRecordRepository(session)


def get_record_source_factory() -> RecordSourceFactory:
    """
    Factory for record sources used outside a request, by refresh jobs.

    Each refresh tick opens and closes its own session.
    """
    return _sqlalchemy_record_source


# ---------------------------------------------------------------------------
# Query parameters
# ---------------------------------------------------------------------------


def get_date_range(
    start: datetime | None = Query(default=None, description="Inclusive start (ISO 8601)."),
    end: datetime | None = Query(default=None, description="Inclusive end (ISO 8601)."),
) -> DateRange | None:
    """
    Build a :class:`DateRange` from ``start``/``end`` query parameters.

    Both must be given together; a start after the end is rejected with 400.
    """
    if start is None and end is None:
        return None
    if start is None or end is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Both 'start' and 'end' are required to filter by date.",
        )
    try:
        return DateRange(start, end)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


def get_orchestrator(
    source: AcademicRecordSource = Depends(get_record_source),
    bus: AnalyticsEventBus = Depends(get_event_bus),
    monitor: AnalyticsPerformanceMonitor = Depends(get_performance_monitor),
    settings: AnalyticsSettings = Depends(get_settings),
) -> AcademicKPIOrchestrator:
    return AcademicKPIOrchestrator(
        source,
        bus=bus,
        reviewer_service=ReviewerKPIService(settings.reviewer_ranking),
        monitor=monitor,
    )
