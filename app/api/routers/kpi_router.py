"""
app/api/routers/kpi_router.py

Academic KPI read endpoints.

The decision, reviewer and volume endpoints compute on demand from the
publisher's records.  The snapshot endpoint reads what the daily job
last persisted.  Optional ``start``/``end`` query parameters restrict the
records to an inclusive date range.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import get_date_range, get_kpi_repository, get_orchestrator
from app.domain.academic_records import DateRange
from app.schemas.kpi import (
    KPISnapshotResponse,
    ReviewerKPIResponse,
    SubmissionKPIResponse,
    SubmissionVolumeResponse,
)
from app.services.kpi_orchestrator import AcademicKPIOrchestrator, KPIAggregationError
from db.repositories.kpi_repository import KPIRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/publishers/{publisher_id}/kpis", tags=["kpi"])


def _aggregation_failed(publisher_id: str, exc: KPIAggregationError) -> HTTPException:
    logger.warning("KPI request failed publisher=%r: %s", publisher_id, exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"KPI aggregation failed: {exc}",
    )


@router.get("/decisions", response_model=SubmissionKPIResponse)
def get_decision_kpis(
    publisher_id: str,
    date_range: DateRange | None = Depends(get_date_range),
    orchestrator: AcademicKPIOrchestrator = Depends(get_orchestrator),
) -> SubmissionKPIResponse:
    """
    Submission-to-decision KPIs with grade, recommendations and benchmarks.

    A publisher without decided submissions gets the empty result
    (grade ``"N/A"``), not an error.
    """
    try:
        result = orchestrator.submission_kpis(publisher_id, date_range)
    except KPIAggregationError as exc:
        raise _aggregation_failed(publisher_id, exc) from exc
    return SubmissionKPIResponse.model_validate(result)


@router.get("/reviewers", response_model=ReviewerKPIResponse)
def get_reviewer_kpis(
    publisher_id: str,
    date_range: DateRange | None = Depends(get_date_range),
    orchestrator: AcademicKPIOrchestrator = Depends(get_orchestrator),
) -> ReviewerKPIResponse:
    try:
        result = orchestrator.reviewer_kpis(publisher_id, date_range)
    except KPIAggregationError as exc:
        raise _aggregation_failed(publisher_id, exc) from exc
    return ReviewerKPIResponse.model_validate(result)


@router.get("/volume", response_model=SubmissionVolumeResponse)
def get_submission_volume(
    publisher_id: str,
    date_range: DateRange | None = Depends(get_date_range),
    orchestrator: AcademicKPIOrchestrator = Depends(get_orchestrator),
) -> SubmissionVolumeResponse:
    try:
        volume = orchestrator.submission_volume(publisher_id, date_range)
    except KPIAggregationError as exc:
        raise _aggregation_failed(publisher_id, exc) from exc
    return SubmissionVolumeResponse.model_validate(volume)


@router.get("/snapshots/latest", response_model=KPISnapshotResponse)
def get_latest_snapshot(
    publisher_id: str,
    repository: KPIRepository = Depends(get_kpi_repository),
) -> KPISnapshotResponse:
    """Raises HTTP 404 until the daily job has stored a snapshot."""
    snapshot = repository.latest_snapshot(publisher_id)
    if snapshot is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No KPI snapshot stored for publisher {publisher_id!r}.",
        )
    return KPISnapshotResponse.model_validate(snapshot)
