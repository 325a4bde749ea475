"""
tests/test_api.py

HTTP-level tests for the KPI and analytics routers.

The application is assembled without a lifespan, so no database is
contacted and the scheduler is never started.  Data access is replaced
through ``app.dependency_overrides`` with in-memory fakes.
"""

from __future__ import annotations

from contextlib import nullcontext
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import SQLAlchemyError

from app.api.application import build_application
from app.api.dependencies import (
    get_event_store,
    get_kpi_repository,
    get_record_source,
    get_record_source_factory,
)
from app.domain.academic_records import Decision, ReviewRecord, SubmissionRecord
from app.domain.analytics_event import AnalyticsEvent
from app.repositories.academic_record_repository import InMemoryAcademicRecordRepository
from app.repositories.analytics_event_repository import InMemoryAnalyticsEventStore

JAN = datetime(2024, 1, 15, tzinfo=timezone.utc)
MAR = datetime(2024, 3, 15, tzinfo=timezone.utc)


def _decided(submission_id: str, submitted_at: datetime, days: int, decision: Decision) -> SubmissionRecord:
    return SubmissionRecord(
        submission_id=submission_id,
        journal_id="j-1",
        publisher_id="pub-1",
        submitted_at=submitted_at,
        decided_at=submitted_at + timedelta(days=days),
        decision=decision,
    )


@pytest.fixture()
def records() -> InMemoryAcademicRecordRepository:
    return InMemoryAcademicRecordRepository(
        submissions=[
            _decided("s-1", JAN, 30, Decision.ACCEPTED),
            _decided("s-2", MAR, 50, Decision.REJECTED),
        ],
        reviews={
            "pub-1": [
                ReviewRecord(
                    "r-1",
                    "rev-1",
                    assigned_at=JAN,
                    reviewer_name="Dr. Ada",
                    responded_at=JAN + timedelta(days=1),
                    completed_at=JAN + timedelta(days=8),
                    quality_rating=4.5,
                )
            ]
        },
    )


@pytest.fixture()
def events() -> InMemoryAnalyticsEventStore:
    return InMemoryAnalyticsEventStore()


@pytest.fixture()
def application(
    records: InMemoryAcademicRecordRepository,
    events: InMemoryAnalyticsEventStore,
) -> FastAPI:
    app = build_application(BackgroundScheduler(timezone="UTC"))
    app.dependency_overrides[get_record_source] = lambda: records
    app.dependency_overrides[get_event_store] = lambda: events
    app.dependency_overrides[get_record_source_factory] = lambda: (lambda: nullcontext(records))
    return app


@pytest.fixture()
def client(application: FastAPI) -> TestClient:
    return TestClient(application)


# ---------------------------------------------------------------------------
# KPI endpoints
# ---------------------------------------------------------------------------


class TestDecisionKPIs:
    def test_returns_computed_kpis(self, client: TestClient) -> None:
        response = client.get("/publishers/pub-1/kpis/decisions")
        assert response.status_code == 200
        body = response.json()
        assert body["total_submissions_processed"] == 2
        assert body["acceptance_rate"] == 50
        assert body["average_submission_to_decision"] == 40
        assert body["performance_grade"] in {"A", "B", "C", "D", "F"}
        assert [b["metric"] for b in body["benchmarks"]] == [
            "Submission to Decision Time",
            "Acceptance Rate",
        ]

    def test_unknown_publisher_gets_sentinel(self, client: TestClient) -> None:
        body = client.get("/publishers/nobody/kpis/decisions").json()
        assert body["performance_grade"] == "N/A"
        assert body["recommendations"] == ["No data available for analysis"]

    def test_date_range_filter(self, client: TestClient) -> None:
        response = client.get(
            "/publishers/pub-1/kpis/decisions",
            params={"start": "2024-03-01T00:00:00Z", "end": "2024-03-31T23:59:59Z"},
        )
        assert response.json()["total_submissions_processed"] == 1

    def test_inverted_date_range_is_rejected(self, client: TestClient) -> None:
        response = client.get(
            "/publishers/pub-1/kpis/decisions",
            params={"start": "2024-03-31T00:00:00Z", "end": "2024-03-01T00:00:00Z"},
        )
        assert response.status_code == 400

    def test_half_open_date_range_is_rejected(self, client: TestClient) -> None:
        response = client.get(
            "/publishers/pub-1/kpis/decisions",
            params={"start": "2024-03-01T00:00:00Z"},
        )
        assert response.status_code == 400

    def test_fetch_failure_maps_to_500(self, application: FastAPI) -> None:
        class Broken(InMemoryAcademicRecordRepository):
            def fetch_decided_submissions(self, publisher_id, date_range=None):
                raise SQLAlchemyError("connection refused")

        application.dependency_overrides[get_record_source] = lambda: Broken()
        response = TestClient(application).get("/publishers/pub-1/kpis/decisions")
        assert response.status_code == 500


class TestReviewerAndVolume:
    def test_reviewer_kpis(self, client: TestClient) -> None:
        body = client.get("/publishers/pub-1/kpis/reviewers").json()
        assert body["total_reviews_assigned"] == 1
        assert body["reviewer_efficiency"][0]["reviewer_name"] == "Dr. Ada"
        assert body["top_performers"] == []

    def test_volume(self, client: TestClient) -> None:
        body = client.get("/publishers/pub-1/kpis/volume").json()
        assert body["total_submissions"] == 2
        assert [p["date"] for p in body["monthly"]] == ["2024-01", "2024-03"]


class TestLatestSnapshot:
    class _Repository:
        def __init__(self, snapshot=None) -> None:
            self._snapshot = snapshot

        def latest_snapshot(self, publisher_id: str):
            return self._snapshot

    def test_returns_stored_snapshot(self, application: FastAPI) -> None:
        stored = SimpleNamespace(
            publisher_id="pub-1",
            period_start=JAN,
            period_end=MAR,
            computed_kpis={"volume": {"total_submissions": 2}},
            created_at=MAR,
        )
        application.dependency_overrides[get_kpi_repository] = lambda: self._Repository(stored)

        body = TestClient(application).get("/publishers/pub-1/kpis/snapshots/latest").json()

        assert body["publisher_id"] == "pub-1"
        assert body["computed_kpis"]["volume"]["total_submissions"] == 2

    def test_missing_snapshot_is_404(self, application: FastAPI) -> None:
        application.dependency_overrides[get_kpi_repository] = lambda: self._Repository()
        response = TestClient(application).get("/publishers/pub-1/kpis/snapshots/latest")
        assert response.status_code == 404


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


class TestEvents:
    def test_track_then_list(self, client: TestClient, application: FastAPI) -> None:
        pushed: list[AnalyticsEvent] = []
        application.state.event_bus.subscribe("pub-1", pushed.append)

        response = client.post(
            "/publishers/pub-1/events",
            json={"type": "submission", "journal_id": "j-1", "submission_id": "s-9"},
        )
        assert response.status_code == 201
        created = response.json()

        feed = client.get("/publishers/pub-1/events").json()
        assert [e["id"] for e in feed] == [created["id"]]
        assert [e.id for e in pushed] == [created["id"]]

    def test_untrackable_type_is_rejected(self, client: TestClient) -> None:
        response = client.post(
            "/publishers/pub-1/events",
            json={"type": "metrics_update", "journal_id": "j-1", "submission_id": "s-9"},
        )
        assert response.status_code == 400

    def test_realtime_counts(self, client: TestClient) -> None:
        client.post(
            "/publishers/pub-1/events",
            json={"type": "submission", "journal_id": "j-1", "submission_id": "s-9"},
        )
        body = client.get("/publishers/pub-1/realtime").json()
        assert body["today_submissions"] == 1
        assert body["today_decisions"] == 0


# ---------------------------------------------------------------------------
# Refresh scheduling
# ---------------------------------------------------------------------------


class TestRefresh:
    def test_schedule_run_and_cancel(self, client: TestClient, application: FastAPI) -> None:
        refresher = application.state.refresh_scheduler
        pushed: list[AnalyticsEvent] = []
        application.state.event_bus.subscribe("pub-1", pushed.append)

        response = client.post("/publishers/pub-1/refresh", json={"interval_ms": 5000})
        assert response.status_code == 202
        assert response.json() == {"publisher_id": "pub-1", "scheduled": True, "interval_ms": 5000}
        assert refresher.is_scheduled("pub-1")

        assert refresher.trigger_now("pub-1") is True
        assert [e.type for e in pushed] == ["metrics_update"]
        assert pushed[0].data["kpis"]["total_submissions_processed"] == 2

        response = client.delete("/publishers/pub-1/refresh")
        assert response.json()["scheduled"] is False
        assert not refresher.is_scheduled("pub-1")

    def test_default_interval(self, client: TestClient) -> None:
        body = client.post("/publishers/pub-1/refresh").json()
        assert body["interval_ms"] == 30_000

    def test_non_positive_interval_is_invalid(self, client: TestClient) -> None:
        response = client.post("/publishers/pub-1/refresh", json={"interval_ms": 0})
        assert response.status_code == 422

    def test_cancel_is_idempotent(self, client: TestClient) -> None:
        assert client.delete("/publishers/pub-9/refresh").status_code == 200


# ---------------------------------------------------------------------------
# Health and performance
# ---------------------------------------------------------------------------


class TestOperational:
    def test_health(self, client: TestClient) -> None:
        client.post("/publishers/pub-1/refresh")
        body = client.get("/health").json()
        assert body == {"status": "ok", "scheduler_running": False, "live_publishers": 1}

    def test_performance_report_tracks_queries(self, client: TestClient) -> None:
        client.get("/publishers/pub-1/kpis/decisions")
        body = client.get("/analytics/performance").json()
        assert body["query_performance"]["decided_submissions"]["sample_count"] == 1
