"""
app/realtime/tracking.py

Event tracking and same-day activity counters for live dashboards.

track_submission_event      – store an editorial event and push it to the bus
aggregate_realtime_metrics  – count today's (UTC) submissions, decisions and
                              started reviews; push them as ``metrics_update``
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any

from app.domain.academic_records import as_utc
from app.domain.analytics_event import AnalyticsEvent, EventType
from app.realtime.event_bus import AnalyticsEventBus
from app.repositories.analytics_event_repository import AnalyticsEventStore

logger = logging.getLogger(__name__)

AGGREGATE_JOURNAL_ID = "aggregate"

_TRACKABLE_TYPES: frozenset[str] = frozenset({"submission", "review", "decision", "publication"})


@dataclass(frozen=True)
class RealTimeMetrics:
    today_submissions: int
    today_decisions: int
    active_reviews: int
    last_updated: datetime


def track_submission_event(
    store: AnalyticsEventStore,
    bus: AnalyticsEventBus,
    *,
    publisher_id: str,
    journal_id: str,
    submission_id: str,
    event_type: EventType,
    data: dict[str, Any] | None = None,
) -> AnalyticsEvent:
    """
    Persist and commit an editorial event, then emit it to the publisher's
    subscribers.

    Emission happens only after the commit succeeds, so a dashboard
    reloading its feed in response to the notification already sees the
    event, and a failed commit notifies nobody.
    """
    if event_type not in _TRACKABLE_TYPES:
        raise ValueError(
            f"Cannot track event type {event_type!r}. Valid types: {sorted(_TRACKABLE_TYPES)}"
        )

    event = AnalyticsEvent(
        type=event_type,
        journal_id=journal_id,
        submission_id=submission_id,
        data=dict(data or {}),
    )
    store.save(publisher_id, event)
    store.commit()
    bus.emit(publisher_id, event)
    logger.info(
        "Tracked %s event publisher=%r journal=%r submission=%r id=%s",
        event_type,
        publisher_id,
        journal_id,
        submission_id,
        event.id,
    )
    return event


def aggregate_realtime_metrics(
    store: AnalyticsEventStore,
    bus: AnalyticsEventBus,
    publisher_id: str,
    *,
    now: datetime | None = None,
) -> RealTimeMetrics:
    """
    Count today's activity from stored events and broadcast it.

    "Today" starts at 00:00 UTC.  A review counts as active when its
    event payload has ``status == "started"``.
    """
    current = as_utc(now) if now is not None else datetime.now(tz=timezone.utc)
    day_start = current.replace(hour=0, minute=0, second=0, microsecond=0)

    events = store.since(publisher_id, day_start)
    metrics = RealTimeMetrics(
        today_submissions=sum(1 for e in events if e.type == "submission"),
        today_decisions=sum(1 for e in events if e.type == "decision"),
        active_reviews=sum(
            1 for e in events if e.type == "review" and e.data.get("status") == "started"
        ),
        last_updated=current,
    )

    bus.emit(
        publisher_id,
        AnalyticsEvent(
            type="metrics_update",
            journal_id=AGGREGATE_JOURNAL_ID,
            timestamp=current,
            data={"type": "metrics_update", "metrics": asdict(metrics)},
        ),
    )
    return metrics
