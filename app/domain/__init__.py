"""
app/domain package marker.
"""

from app.domain.academic_records import (
    DateRange,
    Decision,
    ProcessedReview,
    ProcessedSubmission,
    ReviewerAggregate,
    ReviewRecord,
    SubmissionRecord,
)
from app.domain.analytics_event import AnalyticsEvent, generate_event_id

__all__ = [
    "AnalyticsEvent",
    "DateRange",
    "Decision",
    "ProcessedReview",
    "ProcessedSubmission",
    "ReviewRecord",
    "ReviewerAggregate",
    "SubmissionRecord",
    "generate_event_id",
]
