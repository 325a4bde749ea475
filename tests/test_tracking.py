"""
tests/test_tracking.py

Pytest unit tests for event tracking, same-day activity counters,
analytics event ids and the performance monitor.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.domain.analytics_event import AnalyticsEvent, generate_event_id
from app.realtime.event_bus import AnalyticsEventBus
from app.realtime.performance import AnalyticsPerformanceMonitor
from app.realtime.tracking import (
    AGGREGATE_JOURNAL_ID,
    aggregate_realtime_metrics,
    track_submission_event,
)
from app.repositories.analytics_event_repository import InMemoryAnalyticsEventStore

NOW = datetime(2024, 5, 10, 15, 0, tzinfo=timezone.utc)


@pytest.fixture()
def store() -> InMemoryAnalyticsEventStore:
    return InMemoryAnalyticsEventStore()


@pytest.fixture()
def bus() -> AnalyticsEventBus:
    return AnalyticsEventBus()


class _CommitTrackingStore(InMemoryAnalyticsEventStore):
    """Records which saved events have been committed."""

    def __init__(self, *, fail_commit: bool = False) -> None:
        super().__init__()
        self.pending: list[str] = []
        self.committed: set[str] = set()
        self._fail_commit = fail_commit

    def save(self, publisher_id: str, event: AnalyticsEvent) -> None:
        super().save(publisher_id, event)
        self.pending.append(event.id)

    def commit(self) -> None:
        if self._fail_commit:
            raise SQLAlchemyError("commit failed")
        self.committed.update(self.pending)
        self.pending.clear()


class TestAnalyticsEvent:
    def test_id_format(self) -> None:
        assert re.fullmatch(r"\d+-[0-9a-z]{9}", generate_event_id())

    def test_ids_differ(self) -> None:
        assert len({generate_event_id() for _ in range(50)}) == 50

    def test_unknown_type_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            AnalyticsEvent(type="retraction", journal_id="j-1")  # type: ignore[arg-type]


class TestTrackSubmissionEvent:
    def test_event_is_stored_before_emission(
        self, store: InMemoryAnalyticsEventStore, bus: AnalyticsEventBus
    ) -> None:
        seen_in_store: list[bool] = []
        bus.subscribe(
            "pub-1",
            lambda e: seen_in_store.append(e in store.recent("pub-1", 10)),
        )

        event = track_submission_event(
            store,
            bus,
            publisher_id="pub-1",
            journal_id="j-1",
            submission_id="s-1",
            event_type="decision",
            data={"decision": "accepted"},
        )

        assert seen_in_store == [True]
        assert event.type == "decision"
        assert event.submission_id == "s-1"
        assert event.data == {"decision": "accepted"}

    def test_metrics_update_cannot_be_tracked(
        self, store: InMemoryAnalyticsEventStore, bus: AnalyticsEventBus
    ) -> None:
        with pytest.raises(ValueError):
            track_submission_event(
                store,
                bus,
                publisher_id="pub-1",
                journal_id="j-1",
                submission_id="s-1",
                event_type="metrics_update",
            )
        assert store.recent("pub-1", 10) == []

    def test_subscriber_only_sees_committed_events(self, bus: AnalyticsEventBus) -> None:
        store = _CommitTrackingStore()
        committed_when_seen: list[bool] = []
        bus.subscribe("pub-1", lambda e: committed_when_seen.append(e.id in store.committed))

        track_submission_event(
            store,
            bus,
            publisher_id="pub-1",
            journal_id="j-1",
            submission_id="s-1",
            event_type="submission",
        )

        assert committed_when_seen == [True]

    def test_failed_commit_emits_nothing(self, bus: AnalyticsEventBus) -> None:
        store = _CommitTrackingStore(fail_commit=True)
        pushed: list[AnalyticsEvent] = []
        bus.subscribe("pub-1", pushed.append)

        with pytest.raises(SQLAlchemyError):
            track_submission_event(
                store,
                bus,
                publisher_id="pub-1",
                journal_id="j-1",
                submission_id="s-1",
                event_type="submission",
            )

        assert pushed == []
        assert store.committed == set()


class TestAggregateRealtimeMetrics:
    def _save(self, store: InMemoryAnalyticsEventStore, event_type: str, at: datetime, **data) -> None:
        store.save(
            "pub-1",
            AnalyticsEvent(type=event_type, journal_id="j-1", timestamp=at, data=data),  # type: ignore[arg-type]
        )

    def test_counts_today_only(
        self, store: InMemoryAnalyticsEventStore, bus: AnalyticsEventBus
    ) -> None:
        self._save(store, "submission", NOW - timedelta(hours=1))
        self._save(store, "submission", NOW - timedelta(hours=16))  # yesterday 23:00
        self._save(store, "decision", NOW - timedelta(hours=2))
        self._save(store, "review", NOW - timedelta(hours=3), status="started")
        self._save(store, "review", NOW - timedelta(hours=3), status="completed")

        metrics = aggregate_realtime_metrics(store, bus, "pub-1", now=NOW)

        assert metrics.today_submissions == 1
        assert metrics.today_decisions == 1
        assert metrics.active_reviews == 1
        assert metrics.last_updated == NOW

    def test_emits_metrics_update(
        self, store: InMemoryAnalyticsEventStore, bus: AnalyticsEventBus
    ) -> None:
        received: list[AnalyticsEvent] = []
        bus.subscribe("pub-1", received.append)
        self._save(store, "submission", NOW)

        aggregate_realtime_metrics(store, bus, "pub-1", now=NOW)

        [update] = received
        assert update.type == "metrics_update"
        assert update.journal_id == AGGREGATE_JOURNAL_ID
        assert update.data["type"] == "metrics_update"
        assert update.data["metrics"]["today_submissions"] == 1


class TestInMemoryEventStore:
    def test_recent_is_newest_first_and_limited(self, store: InMemoryAnalyticsEventStore) -> None:
        for hours in (3, 1, 2):
            store.save(
                "pub-1",
                AnalyticsEvent(
                    type="submission",
                    journal_id="j-1",
                    submission_id=f"s-{hours}",
                    timestamp=NOW - timedelta(hours=hours),
                ),
            )
        assert [e.submission_id for e in store.recent("pub-1", 2)] == ["s-1", "s-2"]


class TestPerformanceMonitor:
    def test_dashboard_window_keeps_last_hundred(self) -> None:
        monitor = AnalyticsPerformanceMonitor()
        for value in range(1, 102):
            monitor.record_dashboard_load_time(float(value))
        # 2..101
        assert monitor.average_dashboard_load_time() == pytest.approx(51.5)

    def test_query_report(self) -> None:
        monitor = AnalyticsPerformanceMonitor(query_window=3)
        for value in (10.0, 20.0, 30.0, 40.0):
            monitor.record_query_time("reviews", value)

        report = monitor.report()

        timing = report.query_performance["reviews"]
        assert timing.sample_count == 3
        assert timing.min_time_ms == 20.0
        assert timing.max_time_ms == 40.0
        assert timing.avg_time_ms == pytest.approx(30.0)

    def test_unknown_query_averages_zero(self) -> None:
        monitor = AnalyticsPerformanceMonitor()
        assert monitor.average_query_time("missing") == 0.0
        assert monitor.report().avg_dashboard_load_time_ms == 0.0
