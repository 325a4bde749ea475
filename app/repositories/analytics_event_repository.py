"""
app/repositories/analytics_event_repository.py

Storage for analytics events, so dashboards can load a recent feed and
the real-time aggregator can count today's activity.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.domain.academic_records import as_utc
from app.domain.analytics_event import AnalyticsEvent
from db.models.analytics_event import AnalyticsEventRecord


class AnalyticsEventStore(Protocol):
    def save(self, publisher_id: str, event: AnalyticsEvent) -> None:
        ...

    def commit(self) -> None:
        """Make saved events visible to other readers."""
        ...

    def recent(self, publisher_id: str, limit: int) -> list[AnalyticsEvent]:
        """Newest first."""
        ...

    def since(self, publisher_id: str, moment: datetime) -> list[AnalyticsEvent]:
        """Events at or after *moment*, oldest first."""
        ...


def _event_from_row(row: AnalyticsEventRecord) -> AnalyticsEvent:
    return AnalyticsEvent(
        id=row.id,
        type=row.event_type,  # type: ignore[arg-type]
        timestamp=row.timestamp,
        journal_id=row.journal_id,
        submission_id=row.submission_id,
        data=dict(row.data or {}),
    )


class SQLAlchemyAnalyticsEventStore:
    """
    Persists events in ``analytics_events``.

    Nothing is committed until :meth:`commit`; rollback on failure is left
    to the owner of the session.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def save(self, publisher_id: str, event: AnalyticsEvent) -> None:
        self._session.add(
            AnalyticsEventRecord(
                id=event.id,
                publisher_id=publisher_id,
                journal_id=event.journal_id,
                submission_id=event.submission_id,
                event_type=event.type,
                timestamp=event.timestamp,
                data=event.data,
            )
        )
        self._session.flush()

    def commit(self) -> None:
        self._session.commit()

    def recent(self, publisher_id: str, limit: int) -> list[AnalyticsEvent]:
        stmt = (
            select(AnalyticsEventRecord)
            .where(AnalyticsEventRecord.publisher_id == publisher_id)
            .order_by(AnalyticsEventRecord.timestamp.desc())
            .limit(limit)
        )
        return [_event_from_row(row) for row in self._session.scalars(stmt)]

    def since(self, publisher_id: str, moment: datetime) -> list[AnalyticsEvent]:
        stmt = (
            select(AnalyticsEventRecord)
            .where(
                AnalyticsEventRecord.publisher_id == publisher_id,
                AnalyticsEventRecord.timestamp >= moment,
            )
            .order_by(AnalyticsEventRecord.timestamp)
        )
        return [_event_from_row(row) for row in self._session.scalars(stmt)]


class InMemoryAnalyticsEventStore:
    def __init__(self) -> None:
        self._events: dict[str, list[AnalyticsEvent]] = {}

    def save(self, publisher_id: str, event: AnalyticsEvent) -> None:
        self._events.setdefault(publisher_id, []).append(event)

    def commit(self) -> None:
        # saves are visible immediately
        return None

    def recent(self, publisher_id: str, limit: int) -> list[AnalyticsEvent]:
        events = sorted(
            self._events.get(publisher_id, []),
            key=lambda event: as_utc(event.timestamp),
            reverse=True,
        )
        return events[:limit]

    def since(self, publisher_id: str, moment: datetime) -> list[AnalyticsEvent]:
        threshold = as_utc(moment)
        events = [
            event
            for event in self._events.get(publisher_id, [])
            if as_utc(event.timestamp) >= threshold
        ]
        return sorted(events, key=lambda event: as_utc(event.timestamp))
