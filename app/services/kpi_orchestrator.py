"""
app/services/kpi_orchestrator.py

Academic KPI pipeline orchestrator.

Wires AcademicRecordSource → KPI services → event bus / KPIRepository.
No business logic lives here; every layer retains its own responsibility:

    AcademicRecordSource  – publisher scoping, date filtering, I/O
    KPIService            – submission-to-decision statistics and grading
    ReviewerKPIService    – reviewer aggregation and ranking
    breakdown_service     – submission volume metrics
    KPIRepository         – upsert into computed_kpis

Failure contract
----------------
- Invalid date range         → ``ValueError`` from :class:`DateRange`
- Record fetch failure       → raises KPIAggregationError (no partial writes)
- Empty input                → empty sentinel result, never an exception
- Persistence failure        → raises KPIPersistenceError after rollback
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import asdict
from datetime import datetime, timedelta, timezone
from typing import Any, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.academic_records import DateRange
from app.domain.analytics_event import AnalyticsEvent
from app.realtime.event_bus import AnalyticsEventBus
from app.realtime.performance import AnalyticsPerformanceMonitor
from app.realtime.tracking import AGGREGATE_JOURNAL_ID
from app.repositories.academic_record_repository import AcademicRecordSource
from app.services.breakdown_service import SubmissionVolume, submission_volume
from app.services.kpi_service import KPIResult, KPIService
from app.services.reviewer_service import ReviewerKPIResult, ReviewerKPIService
from db.models.computed_kpi import ComputedKPI
from db.repositories.kpi_repository import KPIRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class KPIAggregationError(RuntimeError):
    """
    Raised when the record source cannot fetch inputs.

    No partial result is produced and nothing is emitted or persisted.
    """


class KPIPersistenceError(RuntimeError):
    """
    Raised when a KPI snapshot cannot be written to ``computed_kpis``.

    The session has been rolled back before this exception is raised.
    """


# ---------------------------------------------------------------------------
# Serialisation
# ---------------------------------------------------------------------------


def kpi_result_to_payload(result: KPIResult) -> dict[str, Any]:
    """JSON-serialisable dict of *result*."""
    payload = asdict(result)
    payload["computed_at"] = result.computed_at.isoformat()
    return payload


def reviewer_result_to_payload(result: ReviewerKPIResult) -> dict[str, Any]:
    return asdict(result)


def volume_to_payload(volume: SubmissionVolume) -> dict[str, Any]:
    return asdict(volume)


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class AcademicKPIOrchestrator:
    """
    Computes KPIs for one publisher from a record source.

    The orchestrator holds no business data.  It is cheap to construct and
    is typically built per request around a request-scoped record source.

    Usage::

        orchestrator = AcademicKPIOrchestrator(source, bus=bus)
        result = orchestrator.submission_kpis("pub-1", DateRange(start, end))
    """

    def __init__(
        self,
        source: AcademicRecordSource,
        *,
        bus: AnalyticsEventBus | None = None,
        kpi_service: KPIService | None = None,
        reviewer_service: ReviewerKPIService | None = None,
        monitor: AnalyticsPerformanceMonitor | None = None,
    ) -> None:
        self._source = source
        self._bus = bus
        self._kpi_service = kpi_service or KPIService()
        self._reviewer_service = reviewer_service or ReviewerKPIService()
        self._monitor = monitor

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    def submission_kpis(
        self,
        publisher_id: str,
        date_range: DateRange | None = None,
    ) -> KPIResult:
        """
        Submission-to-decision KPIs for *publisher_id*.

        Raises
        ------
        KPIAggregationError
            If the record source fails.
        """
        run_start = time.monotonic()
        records = self._fetch(
            "decided_submissions",
            publisher_id,
            lambda: self._source.fetch_decided_submissions(publisher_id, date_range),
        )
        result = self._kpi_service.calculate_submission_to_decision(records)
        logger.info(
            "submission_kpis publisher=%r range=%s processed=%d anomalous=%d grade=%s elapsed=%.3fs",
            publisher_id,
            _describe(date_range),
            result.total_submissions_processed,
            result.anomalous_records,
            result.performance_grade,
            time.monotonic() - run_start,
        )
        return result

    def reviewer_kpis(
        self,
        publisher_id: str,
        date_range: DateRange | None = None,
    ) -> ReviewerKPIResult:
        """
        Reviewer efficiency KPIs for *publisher_id*.

        Raises
        ------
        KPIAggregationError
            If the record source fails.
        """
        run_start = time.monotonic()
        records = self._fetch(
            "reviews",
            publisher_id,
            lambda: self._source.fetch_reviews(publisher_id, date_range),
        )
        result = self._reviewer_service.calculate(records)
        logger.info(
            "reviewer_kpis publisher=%r range=%s assigned=%d ranked=%d elapsed=%.3fs",
            publisher_id,
            _describe(date_range),
            result.total_reviews_assigned,
            len(result.reviewer_efficiency),
            time.monotonic() - run_start,
        )
        return result

    def submission_volume(
        self,
        publisher_id: str,
        date_range: DateRange | None = None,
        *,
        now: datetime | None = None,
    ) -> SubmissionVolume:
        """
        Daily / weekly / monthly submission counts for *publisher_id*.

        Raises
        ------
        KPIAggregationError
            If the record source fails.
        """
        records = self._fetch(
            "submissions",
            publisher_id,
            lambda: self._source.fetch_submissions(publisher_id, date_range),
        )
        return submission_volume(records, now=now)

    def refresh(self, publisher_id: str, date_range: DateRange | None = None) -> KPIResult:
        """
        Recompute submission KPIs and push them to live subscribers.

        Used as the periodic refresh callback.  Emission is skipped when no
        bus is configured.
        """
        run_start = time.monotonic()
        result = self.submission_kpis(publisher_id, date_range)
        if self._bus is not None:
            self._bus.emit(
                publisher_id,
                AnalyticsEvent(
                    type="metrics_update",
                    journal_id=AGGREGATE_JOURNAL_ID,
                    data={"type": "metrics_update", "kpis": kpi_result_to_payload(result)},
                ),
            )
        if self._monitor is not None:
            self._monitor.record_dashboard_load_time((time.monotonic() - run_start) * 1000)
        return result

    def snapshot(
        self,
        publisher_id: str,
        date_range: DateRange | None = None,
        *,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """All KPI families for *publisher_id* as one JSON-serialisable payload."""
        return {
            "submission_to_decision": kpi_result_to_payload(
                self.submission_kpis(publisher_id, date_range)
            ),
            "reviewers": reviewer_result_to_payload(self.reviewer_kpis(publisher_id, date_range)),
            "volume": volume_to_payload(self.submission_volume(publisher_id, date_range, now=now)),
        }

    def persist_snapshot(
        self,
        publisher_id: str,
        *,
        period_start: datetime,
        period_end: datetime,
        db: Session,
    ) -> ComputedKPI:
        """
        Compute :meth:`snapshot` over the period and upsert it into
        ``computed_kpis``.  Commits on success.

        Raises
        ------
        KPIAggregationError
            If the record source fails.
        KPIPersistenceError
            If the upsert or commit fails.
        """
        date_range = DateRange(period_start, period_end)
        payload = self.snapshot(publisher_id, date_range, now=period_end)
        try:
            record = KPIRepository(db).upsert_snapshot(
                publisher_id=publisher_id,
                period_start=period_start,
                period_end=period_end,
                computed_kpis=payload,
            )
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error(
                "persist_snapshot failed publisher=%r: %s", publisher_id, exc, exc_info=True
            )
            raise KPIPersistenceError(
                f"Failed to persist KPI snapshot for publisher={publisher_id!r}: {exc}"
            ) from exc
        return record

    # ------------------------------------------------------------------
    # Internal: fetching
    # ------------------------------------------------------------------

    def _fetch(self, query_name: str, publisher_id: str, query: Callable[[], T]) -> T:
        started = time.monotonic()
        try:
            return query()
        except SQLAlchemyError as exc:
            logger.error(
                "_fetch %s failed publisher=%r: %s", query_name, publisher_id, exc, exc_info=True
            )
            raise KPIAggregationError(
                f"Failed to fetch {query_name} for publisher={publisher_id!r}: {exc}"
            ) from exc
        finally:
            if self._monitor is not None:
                self._monitor.record_query_time(query_name, (time.monotonic() - started) * 1000)


def _describe(date_range: DateRange | None) -> str:
    if date_range is None:
        return "all"
    return f"[{date_range.start.isoformat()}, {date_range.end.isoformat()}]"


def trailing_window(days: int, now: datetime | None = None) -> DateRange:
    """``DateRange`` covering the *days* days up to *now* (UTC)."""
    end = now or datetime.now(tz=timezone.utc)
    return DateRange(end - timedelta(days=days), end)
