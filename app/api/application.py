"""
app/api/application.py

FastAPI application assembly.

One event bus, one refresh scheduler and one performance monitor are
created per application and stored on ``app.state``; routers reach them
through :mod:`app.api.dependencies`.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import FastAPI

from app.api.routers import analytics_router, kpi_router
from app.realtime.event_bus import AnalyticsEventBus
from app.realtime.performance import AnalyticsPerformanceMonitor
from app.scheduler.refresh import RefreshScheduler
from app.schemas.kpi import HealthResponse


def build_application(
    scheduler: BackgroundScheduler | None = None,
    *,
    lifespan: Callable[[FastAPI], Any] | None = None,
) -> FastAPI:
    """
    Parameters
    ----------
    scheduler:
        APScheduler instance shared by batch jobs and live refresh jobs.
        Defaults to :func:`app.scheduler.jobs.build_scheduler`.
    lifespan:
        Startup/shutdown context.  ``None`` leaves the scheduler stopped,
        which is what in-process tests want.
    """
    if scheduler is None:
        from app.scheduler.jobs import build_scheduler

        scheduler = build_scheduler()

    application = FastAPI(
        title="Academic KPI Aggregator API",
        version="1.0.0",
        lifespan=lifespan,
    )
    application.state.event_bus = AnalyticsEventBus()
    application.state.refresh_scheduler = RefreshScheduler(scheduler)
    application.state.performance_monitor = AnalyticsPerformanceMonitor()

    application.include_router(kpi_router)
    application.include_router(analytics_router)

    @application.get("/health", response_model=HealthResponse)
    def healthcheck() -> HealthResponse:
        refresher: RefreshScheduler = application.state.refresh_scheduler
        return HealthResponse(
            status="ok",
            scheduler_running=refresher.scheduler.running,
            live_publishers=len(refresher.scheduled_publishers()),
        )

    return application
