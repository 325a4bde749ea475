"""
app/api/routers/analytics_router.py

Live analytics endpoints: event feed, event tracking, today's activity
counters, per-publisher refresh scheduling and the timing report.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.dependencies import (
    RecordSourceFactory,
    get_event_bus,
    get_event_store,
    get_performance_monitor,
    get_record_source_factory,
    get_refresh_scheduler,
    get_settings,
)
from app.config import AnalyticsSettings
from app.realtime.event_bus import AnalyticsEventBus
from app.realtime.performance import AnalyticsPerformanceMonitor
from app.realtime.tracking import aggregate_realtime_metrics, track_submission_event
from app.repositories.analytics_event_repository import AnalyticsEventStore
from app.scheduler.refresh import RefreshCallback, RefreshScheduler
from app.schemas.kpi import (
    AnalyticsEventResponse,
    PerformanceReportResponse,
    RealTimeMetricsResponse,
    RefreshRequest,
    RefreshStatusResponse,
    TrackEventRequest,
)
from app.services.kpi_orchestrator import AcademicKPIOrchestrator
from app.services.reviewer_service import ReviewerKPIService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["analytics"])


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@router.get(
    "/publishers/{publisher_id}/events",
    response_model=list[AnalyticsEventResponse],
)
def list_recent_events(
    publisher_id: str,
    limit: int | None = Query(default=None, ge=1, le=500),
    store: AnalyticsEventStore = Depends(get_event_store),
    settings: AnalyticsSettings = Depends(get_settings),
) -> list[AnalyticsEventResponse]:
    """Most recent events first."""
    events = store.recent(publisher_id, limit or settings.event_feed_limit)
    return [AnalyticsEventResponse.model_validate(event) for event in events]


@router.post(
    "/publishers/{publisher_id}/events",
    response_model=AnalyticsEventResponse,
    status_code=status.HTTP_201_CREATED,
)
def track_event(
    publisher_id: str,
    body: TrackEventRequest,
    store: AnalyticsEventStore = Depends(get_event_store),
    bus: AnalyticsEventBus = Depends(get_event_bus),
) -> AnalyticsEventResponse:
    """
    Record an editorial event and push it to live subscribers.

    Raises HTTP 400 for an event type that cannot be tracked.
    """
    try:
        event = track_submission_event(
            store,
            bus,
            publisher_id=publisher_id,
            journal_id=body.journal_id,
            submission_id=body.submission_id,
            event_type=body.type,  # type: ignore[arg-type]
            data=body.data,
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return AnalyticsEventResponse.model_validate(event)


@router.get(
    "/publishers/{publisher_id}/realtime",
    response_model=RealTimeMetricsResponse,
)
def get_realtime_metrics(
    publisher_id: str,
    store: AnalyticsEventStore = Depends(get_event_store),
    bus: AnalyticsEventBus = Depends(get_event_bus),
) -> RealTimeMetricsResponse:
    metrics = aggregate_realtime_metrics(store, bus, publisher_id)
    return RealTimeMetricsResponse.model_validate(metrics)


# ---------------------------------------------------------------------------
# Refresh scheduling
# ---------------------------------------------------------------------------


def _build_refresh_callback(
    publisher_id: str,
    source_factory: RecordSourceFactory,
    bus: AnalyticsEventBus,
    monitor: AnalyticsPerformanceMonitor,
    settings: AnalyticsSettings,
) -> RefreshCallback:
    def refresh() -> None:
        with source_factory() as source:
            AcademicKPIOrchestrator(
                source,
                bus=bus,
                reviewer_service=ReviewerKPIService(settings.reviewer_ranking),
                monitor=monitor,
            ).refresh(publisher_id)

    return refresh


@router.post(
    "/publishers/{publisher_id}/refresh",
    response_model=RefreshStatusResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
def schedule_refresh(
    publisher_id: str,
    body: RefreshRequest | None = None,
    refresher: RefreshScheduler = Depends(get_refresh_scheduler),
    source_factory: RecordSourceFactory = Depends(get_record_source_factory),
    bus: AnalyticsEventBus = Depends(get_event_bus),
    monitor: AnalyticsPerformanceMonitor = Depends(get_performance_monitor),
    settings: AnalyticsSettings = Depends(get_settings),
) -> RefreshStatusResponse:
    """
    Start (or replace) the periodic KPI push for *publisher_id*.
    """
    interval_ms = (body.interval_ms if body else None) or settings.refresh_interval_ms
    refresher.schedule_refresh(
        publisher_id,
        interval_ms,
        _build_refresh_callback(publisher_id, source_factory, bus, monitor, settings),
    )
    return RefreshStatusResponse(
        publisher_id=publisher_id,
        scheduled=True,
        interval_ms=interval_ms,
    )


@router.delete(
    "/publishers/{publisher_id}/refresh",
    response_model=RefreshStatusResponse,
)
def cancel_refresh(
    publisher_id: str,
    refresher: RefreshScheduler = Depends(get_refresh_scheduler),
) -> RefreshStatusResponse:
    """Idempotent; cancelling an unscheduled publisher is not an error."""
    refresher.clear_refresh(publisher_id)
    return RefreshStatusResponse(publisher_id=publisher_id, scheduled=False)


# ---------------------------------------------------------------------------
# Performance
# ---------------------------------------------------------------------------


@router.get("/analytics/performance", response_model=PerformanceReportResponse)
def get_performance_report(
    monitor: AnalyticsPerformanceMonitor = Depends(get_performance_monitor),
) -> PerformanceReportResponse:
    return PerformanceReportResponse.model_validate(monitor.report())
