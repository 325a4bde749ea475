"""
db/models/computed_kpi.py

Daily KPI snapshots, one row per publisher and window.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Index, String, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base

UPSERT_CONSTRAINT = "uq_computed_kpis_publisher_period"


class ComputedKPI(Base):
    """
    ``computed_kpis`` is the payload built by ``kpi_result_to_payload``,
    with ``submission_to_decision``, ``reviewers`` and ``volume`` sections.
    """

    __tablename__ = "computed_kpis"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    publisher_id: Mapped[str] = mapped_column(String(64), nullable=False)
    period_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    period_end: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    computed_kpis: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        # upsert target; also serves lookups by publisher_id alone
        UniqueConstraint("publisher_id", "period_start", "period_end", name=UPSERT_CONSTRAINT),
        # latest_snapshot: newest period_end, then newest created_at
        Index("ix_computed_kpis_publisher_latest", "publisher_id", "period_end", "created_at"),
    )
