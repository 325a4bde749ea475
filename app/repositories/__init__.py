"""
app/repositories package marker.
"""

from app.repositories.academic_record_repository import (
    AcademicRecordSource,
    InMemoryAcademicRecordRepository,
    SQLAlchemyAcademicRecordRepository,
)
from app.repositories.analytics_event_repository import (
    AnalyticsEventStore,
    InMemoryAnalyticsEventStore,
    SQLAlchemyAnalyticsEventStore,
)

__all__ = [
    "AcademicRecordSource",
    "AnalyticsEventStore",
    "InMemoryAcademicRecordRepository",
    "InMemoryAnalyticsEventStore",
    "SQLAlchemyAcademicRecordRepository",
    "SQLAlchemyAnalyticsEventStore",
]
