"""
db/repositories/kpi_repository.py

Storage for daily KPI snapshots (``computed_kpis``).

The caller owns the transaction; nothing here commits.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from db.base import utcnow
from db.models.computed_kpi import UPSERT_CONSTRAINT, ComputedKPI


class KPIRepository:
    """
    Snapshot reads and writes keyed by ``(publisher_id, period_start, period_end)``.

    Writing a window that already has a row replaces its payload and bumps
    ``created_at``, so re-running the daily job is safe.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def upsert_snapshot(
        self,
        *,
        publisher_id: str,
        period_start: datetime,
        period_end: datetime,
        computed_kpis: dict[str, Any],
    ) -> ComputedKPI:
        """
        Insert or replace one snapshot row and return it (uncommitted).

        ``computed_kpis`` must be JSON-serialisable; see
        :func:`app.services.kpi_orchestrator.kpi_result_to_payload`.
        """
        stmt = (
            insert(ComputedKPI)
            .values(
                id=uuid.uuid4(),
                publisher_id=publisher_id,
                period_start=period_start,
                period_end=period_end,
                computed_kpis=computed_kpis,
            )
            .on_conflict_do_update(
                constraint=UPSERT_CONSTRAINT,
                set_={"computed_kpis": computed_kpis, "created_at": utcnow()},
            )
            .returning(ComputedKPI)
        )
        return self._session.scalars(stmt).one()

    def latest_snapshot(self, publisher_id: str) -> ComputedKPI | None:
        stmt = (
            select(ComputedKPI)
            .where(ComputedKPI.publisher_id == publisher_id)
            .order_by(ComputedKPI.period_end.desc(), ComputedKPI.created_at.desc())
            .limit(1)
        )
        return self._session.scalars(stmt).first()
