"""
app/services package marker.
"""

from app.services.breakdown_service import SubmissionVolume, submission_volume
from app.services.kpi_orchestrator import (
    AcademicKPIOrchestrator,
    KPIAggregationError,
    KPIPersistenceError,
)
from app.services.kpi_service import KPIResult, KPIService
from app.services.reviewer_service import ReviewerKPIResult, ReviewerKPIService

__all__ = [
    "AcademicKPIOrchestrator",
    "KPIAggregationError",
    "KPIPersistenceError",
    "KPIResult",
    "KPIService",
    "ReviewerKPIResult",
    "ReviewerKPIService",
    "SubmissionVolume",
    "submission_volume",
]
