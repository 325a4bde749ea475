"""
db/models/analytics_event.py

Persisted copy of real-time analytics events.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Index, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class AnalyticsEventRecord(Base):
    __tablename__ = "analytics_events"

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="<epoch-millis>-<base36 suffix>",
    )
    publisher_id: Mapped[str] = mapped_column(String(64), nullable=False)
    journal_id: Mapped[str] = mapped_column(String(64), nullable=False)
    submission_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    event_type: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="submission, review, decision, publication, metrics_update",
    )
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    data: Mapped[dict[str, Any]] = mapped_column(
        JSONB,
        nullable=False,
        default=dict,
    )

    __table_args__ = (
        Index("ix_analytics_events_publisher_timestamp", "publisher_id", "timestamp"),
    )
