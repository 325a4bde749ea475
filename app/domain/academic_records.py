"""
app/domain/academic_records.py

Domain models for submission and peer-review records consumed by the
KPI calculation layer.

Source records are produced by the data-access layer and never mutated.
Derived (processed) records carry the day counts computed from their
timestamps.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone


class Decision(str, enum.Enum):
    """
    Editorial outcome of a submission.

    Raw statuses outside the known set map to ``OTHER`` (e.g.
    ``"revision_requested"``).
    """

    ACCEPTED = "accepted"
    REJECTED = "rejected"
    PENDING = "pending"
    OTHER = "other"

    @classmethod
    def from_status(cls, status: str | None) -> "Decision":
        if not status:
            return cls.PENDING
        try:
            return cls(status.strip().lower())
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class DateRange:
    """
    Inclusive time window applied to submission / assignment timestamps.
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if as_utc(self.start) > as_utc(self.end):
            raise ValueError(
                f"date range start must not be after end; "
                f"got {self.start.isoformat()} > {self.end.isoformat()}"
            )

    def contains(self, moment: datetime) -> bool:
        return as_utc(self.start) <= as_utc(moment) <= as_utc(self.end)


@dataclass(frozen=True)
class SubmissionRecord:
    """
    One manuscript submission as supplied by the data-access layer.
    """

    submission_id: str
    journal_id: str
    publisher_id: str
    submitted_at: datetime
    decided_at: datetime | None = None
    decision: Decision = Decision.PENDING


@dataclass(frozen=True)
class ReviewRecord:
    """
    One review assignment as supplied by the data-access layer.
    """

    review_id: str
    reviewer_id: str
    assigned_at: datetime
    reviewer_name: str | None = None
    responded_at: datetime | None = None
    completed_at: datetime | None = None
    quality_rating: float | None = None


@dataclass(frozen=True)
class ProcessedSubmission:
    """
    A decided submission with its submission-to-decision time in days.
    """

    record: SubmissionRecord
    processing_days: float

    @property
    def journal_id(self) -> str:
        return self.record.journal_id

    @property
    def is_accepted(self) -> bool:
        return self.record.decision is Decision.ACCEPTED

    @property
    def submission_month(self) -> str:
        """Calendar month (``YYYY-MM``, UTC) of the submission timestamp."""
        return as_utc(self.record.submitted_at).strftime("%Y-%m")


@dataclass(frozen=True)
class ProcessedReview:
    """
    A review assignment with its derived response and review durations.

    ``response_days`` = responded_at - assigned_at
    ``review_days``   = completed_at - responded_at
    Either is ``None`` when its timestamp pair is incomplete.
    """

    record: ReviewRecord
    response_days: float | None = None
    review_days: float | None = None

    @property
    def has_responded(self) -> bool:
        return self.record.responded_at is not None

    @property
    def is_completed(self) -> bool:
        return self.record.completed_at is not None


@dataclass
class ReviewerAggregate:
    """
    Per-reviewer accumulator built while folding over review records.

    Lives for the duration of a single calculation call.
    """

    reviewer_id: str
    reviewer_name: str
    total_assigned: int = 0
    total_responded: int = 0
    total_completed: int = 0
    response_times: list[float] = field(default_factory=list)
    review_times: list[float] = field(default_factory=list)
    quality_ratings: list[float] = field(default_factory=list)

    def add(self, review: ProcessedReview) -> None:
        self.total_assigned += 1
        if review.has_responded:
            self.total_responded += 1
        if review.is_completed:
            self.total_completed += 1
        if review.response_days is not None:
            self.response_times.append(review.response_days)
        if review.review_days is not None:
            self.review_times.append(review.review_days)
        if review.record.quality_rating is not None:
            self.quality_ratings.append(review.record.quality_rating)


def as_utc(moment: datetime) -> datetime:
    """Treat naive timestamps as UTC and convert aware ones to UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)
