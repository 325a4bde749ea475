"""
db/models/submission.py

Manuscript submission rows read by the KPI aggregation layer.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class Submission(Base):
    """
    One manuscript submitted to a journal.

    ``publisher_id`` is denormalized from the journal so that per-publisher
    aggregation needs no join.
    """

    __tablename__ = "submissions"

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
    )
    journal_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("journals.id", ondelete="CASCADE"),
        nullable=False,
    )
    publisher_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("publishers.id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default="pending",
        comment="accepted, rejected, pending, under_review, revision_requested, ...",
    )
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    decided_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Null while the submission is in flight",
    )

    __table_args__ = (
        Index("ix_submissions_publisher_submitted_at", "publisher_id", "submitted_at"),
        Index("ix_submissions_journal_id", "journal_id"),
    )
