"""
app/repositories/academic_record_repository.py

Data-access boundary for submission and review records.

The KPI layer depends on :class:`AcademicRecordSource` only.  Two
implementations are provided:

    SQLAlchemyAcademicRecordRepository  – PostgreSQL via the ORM models
    InMemoryAcademicRecordRepository    – plain lists, for tests and fakes

Publisher scoping and date-range filtering happen here; the calculation
layer assumes its inputs are already filtered.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.domain.academic_records import (
    DateRange,
    Decision,
    ReviewRecord,
    SubmissionRecord,
)
from db.models.publisher import Publisher
from db.models.review_assignment import ReviewAssignment
from db.models.submission import Submission


class AcademicRecordSource(Protocol):
    """
    Read-only access to one publisher's submission and review records.
    """

    def fetch_submissions(
        self, publisher_id: str, date_range: DateRange | None = None
    ) -> list[SubmissionRecord]:
        """All submissions, decided or not, submitted within *date_range*."""
        ...

    def fetch_decided_submissions(
        self, publisher_id: str, date_range: DateRange | None = None
    ) -> list[SubmissionRecord]:
        """Submissions with a decision timestamp, submitted within *date_range*."""
        ...

    def fetch_reviews(
        self, publisher_id: str, date_range: DateRange | None = None
    ) -> list[ReviewRecord]:
        """Review assignments made within *date_range*."""
        ...

    def list_publisher_ids(self) -> list[str]:
        """Ids of every active publisher."""
        ...


# ---------------------------------------------------------------------------
# SQLAlchemy implementation
# ---------------------------------------------------------------------------


def _submission_from_row(row: Submission) -> SubmissionRecord:
    return SubmissionRecord(
        submission_id=row.id,
        journal_id=row.journal_id,
        publisher_id=row.publisher_id,
        submitted_at=row.submitted_at,
        decided_at=row.decided_at,
        decision=Decision.from_status(row.status),
    )


def _review_from_row(row: ReviewAssignment) -> ReviewRecord:
    return ReviewRecord(
        review_id=row.id,
        reviewer_id=row.reviewer_id,
        reviewer_name=row.reviewer_name,
        assigned_at=row.assigned_at,
        responded_at=row.responded_at,
        completed_at=row.completed_at,
        quality_rating=row.quality_rating,
    )


class SQLAlchemyAcademicRecordRepository:
    """
    Reads submissions and review assignments from PostgreSQL.

    All methods are read-only and never mutate session state.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def fetch_submissions(
        self, publisher_id: str, date_range: DateRange | None = None
    ) -> list[SubmissionRecord]:
        stmt = select(Submission).where(Submission.publisher_id == publisher_id)
        if date_range is not None:
            stmt = stmt.where(
                Submission.submitted_at >= date_range.start,
                Submission.submitted_at <= date_range.end,
            )
        stmt = stmt.order_by(Submission.submitted_at)
        return [_submission_from_row(row) for row in self._session.scalars(stmt)]

    def fetch_decided_submissions(
        self, publisher_id: str, date_range: DateRange | None = None
    ) -> list[SubmissionRecord]:
        stmt = select(Submission).where(
            Submission.publisher_id == publisher_id,
            Submission.decided_at.is_not(None),
        )
        if date_range is not None:
            stmt = stmt.where(
                Submission.submitted_at >= date_range.start,
                Submission.submitted_at <= date_range.end,
            )
        stmt = stmt.order_by(Submission.submitted_at)
        return [_submission_from_row(row) for row in self._session.scalars(stmt)]

    def fetch_reviews(
        self, publisher_id: str, date_range: DateRange | None = None
    ) -> list[ReviewRecord]:
        stmt = select(ReviewAssignment).where(ReviewAssignment.publisher_id == publisher_id)
        if date_range is not None:
            stmt = stmt.where(
                ReviewAssignment.assigned_at >= date_range.start,
                ReviewAssignment.assigned_at <= date_range.end,
            )
        stmt = stmt.order_by(ReviewAssignment.assigned_at)
        return [_review_from_row(row) for row in self._session.scalars(stmt)]

    def list_publisher_ids(self) -> list[str]:
        stmt = select(Publisher.id).where(Publisher.is_active.is_(True)).order_by(Publisher.id)
        return list(self._session.scalars(stmt))


# ---------------------------------------------------------------------------
# In-memory implementation
# ---------------------------------------------------------------------------


class InMemoryAcademicRecordRepository:
    """
    List-backed record source.

    Reviews carry no publisher id of their own, so they are registered per
    publisher.
    """

    def __init__(
        self,
        submissions: Iterable[SubmissionRecord] = (),
        reviews: dict[str, list[ReviewRecord]] | None = None,
    ) -> None:
        self._submissions: list[SubmissionRecord] = list(submissions)
        self._reviews: dict[str, list[ReviewRecord]] = {
            publisher_id: list(items) for publisher_id, items in (reviews or {}).items()
        }

    def add_submission(self, record: SubmissionRecord) -> None:
        self._submissions.append(record)

    def add_review(self, publisher_id: str, record: ReviewRecord) -> None:
        self._reviews.setdefault(publisher_id, []).append(record)

    def fetch_submissions(
        self, publisher_id: str, date_range: DateRange | None = None
    ) -> list[SubmissionRecord]:
        return [
            record
            for record in self._submissions
            if record.publisher_id == publisher_id
            and (date_range is None or date_range.contains(record.submitted_at))
        ]

    def fetch_decided_submissions(
        self, publisher_id: str, date_range: DateRange | None = None
    ) -> list[SubmissionRecord]:
        return [
            record
            for record in self.fetch_submissions(publisher_id, date_range)
            if record.decided_at is not None
        ]

    def fetch_reviews(
        self, publisher_id: str, date_range: DateRange | None = None
    ) -> list[ReviewRecord]:
        return [
            record
            for record in self._reviews.get(publisher_id, [])
            if date_range is None or date_range.contains(record.assigned_at)
        ]

    def list_publisher_ids(self) -> list[str]:
        ids = {record.publisher_id for record in self._submissions} | set(self._reviews)
        return sorted(ids)
