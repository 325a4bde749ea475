"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.analytics_event import AnalyticsEventRecord
from db.models.computed_kpi import ComputedKPI
from db.models.journal import Journal
from db.models.publisher import Publisher
from db.models.review_assignment import ReviewAssignment
from db.models.submission import Submission

__all__ = [
    "AnalyticsEventRecord",
    "ComputedKPI",
    "Journal",
    "Publisher",
    "ReviewAssignment",
    "Submission",
]
