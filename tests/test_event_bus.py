"""
tests/test_event_bus.py

Pytest unit tests for AnalyticsEventBus.
"""

from __future__ import annotations

import logging

import pytest

from app.domain.analytics_event import AnalyticsEvent
from app.realtime.event_bus import AnalyticsEventBus


@pytest.fixture()
def bus() -> AnalyticsEventBus:
    return AnalyticsEventBus()


@pytest.fixture()
def event() -> AnalyticsEvent:
    return AnalyticsEvent(type="submission", journal_id="j-1", submission_id="s-1")


class TestDelivery:
    def test_two_subscribers_called_once_in_order(
        self, bus: AnalyticsEventBus, event: AnalyticsEvent
    ) -> None:
        calls: list[tuple[str, str]] = []
        unsubscribe_first = bus.subscribe("pub-1", lambda e: calls.append(("first", e.id)))
        unsubscribe_second = bus.subscribe("pub-1", lambda e: calls.append(("second", e.id)))

        delivered = bus.emit("pub-1", event)

        assert calls == [("first", event.id), ("second", event.id)]
        assert delivered == 2

        unsubscribe_first()
        unsubscribe_second()
        assert bus.subscriber_count("pub-1") == 0
        assert "pub-1" not in bus.publisher_ids()
        assert bus.emit("pub-1", event) == 0
        assert len(calls) == 2

    def test_publishers_are_isolated(self, bus: AnalyticsEventBus, event: AnalyticsEvent) -> None:
        received: list[AnalyticsEvent] = []
        bus.subscribe("pub-2", received.append)
        bus.emit("pub-1", event)
        assert received == []

    def test_emit_without_subscribers_is_noop(
        self, bus: AnalyticsEventBus, event: AnalyticsEvent
    ) -> None:
        assert bus.emit("nobody", event) == 0

    def test_duplicate_subscription_delivers_once(
        self, bus: AnalyticsEventBus, event: AnalyticsEvent
    ) -> None:
        received: list[AnalyticsEvent] = []
        bus.subscribe("pub-1", received.append)
        bus.subscribe("pub-1", received.append)
        bus.emit("pub-1", event)
        assert received == [event]


class TestUnsubscribe:
    def test_unsubscribe_is_idempotent(self, bus: AnalyticsEventBus) -> None:
        unsubscribe = bus.subscribe("pub-1", lambda e: None)
        unsubscribe()
        unsubscribe()
        assert not bus.has_subscribers("pub-1")

    def test_late_subscriber_misses_earlier_events(
        self, bus: AnalyticsEventBus, event: AnalyticsEvent
    ) -> None:
        bus.emit("pub-1", event)
        received: list[AnalyticsEvent] = []
        bus.subscribe("pub-1", received.append)
        assert received == []

    def test_callback_may_unsubscribe_itself_during_emit(
        self, bus: AnalyticsEventBus, event: AnalyticsEvent
    ) -> None:
        calls: list[str] = []
        unsubscribe_holder: list = []

        def once(_: AnalyticsEvent) -> None:
            calls.append("once")
            unsubscribe_holder[0]()

        unsubscribe_holder.append(bus.subscribe("pub-1", once))
        bus.subscribe("pub-1", lambda e: calls.append("always"))

        bus.emit("pub-1", event)
        bus.emit("pub-1", event)

        assert calls == ["once", "always", "always"]
        assert bus.subscriber_count("pub-1") == 1


class TestFailureIsolation:
    def test_failing_callback_does_not_block_others(
        self,
        bus: AnalyticsEventBus,
        event: AnalyticsEvent,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        received: list[AnalyticsEvent] = []

        def broken(_: AnalyticsEvent) -> None:
            raise RuntimeError("dashboard socket closed")

        bus.subscribe("pub-1", broken)
        bus.subscribe("pub-1", received.append)

        with caplog.at_level(logging.ERROR, logger="app.realtime.event_bus"):
            delivered = bus.emit("pub-1", event)

        assert received == [event]
        assert delivered == 1
        assert "Analytics subscriber failed" in caplog.text

    def test_clear_drops_everything(self, bus: AnalyticsEventBus) -> None:
        bus.subscribe("pub-1", lambda e: None)
        bus.subscribe("pub-2", lambda e: None)
        bus.clear()
        assert bus.publisher_ids() == []
