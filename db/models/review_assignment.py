"""
db/models/review_assignment.py

Peer-review assignment rows read by the reviewer KPI layer.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class ReviewAssignment(Base):
    __tablename__ = "review_assignments"

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
    )
    submission_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("submissions.id", ondelete="CASCADE"),
        nullable=False,
    )
    publisher_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("publishers.id", ondelete="CASCADE"),
        nullable=False,
    )
    reviewer_id: Mapped[str] = mapped_column(String(64), nullable=False)
    reviewer_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    responded_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="When the reviewer accepted or declined the invitation",
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    quality_rating: Mapped[float | None] = mapped_column(
        Float,
        nullable=True,
        comment="Editor-assigned quality rating of the review (1-5)",
    )

    __table_args__ = (
        Index("ix_review_assignments_publisher_assigned_at", "publisher_id", "assigned_at"),
        Index("ix_review_assignments_reviewer_id", "reviewer_id"),
    )
