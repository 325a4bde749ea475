"""
app/services/extraction.py

Metric extraction for submission and review records.

Projects raw records into their derived day counts:

    processing_days = (decided_at   - submitted_at) / 1 day
    response_days   = (responded_at - assigned_at)  / 1 day
    review_days     = (completed_at - responded_at) / 1 day

Values are kept as unrounded floats.  Rounding is a presentation concern
handled when results are assembled.

Anomalies
---------
A derived day count below zero means the source timestamps are out of
order.  Such values never enter the statistics: an anomalous submission
is dropped from the processed set, an anomalous review duration is
dropped from that review (the review itself is kept for counting).  The
number of anomalies is returned alongside the processed records.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from app.domain.academic_records import (
    ProcessedReview,
    ProcessedSubmission,
    ReviewRecord,
    SubmissionRecord,
    as_utc,
)

logger = logging.getLogger(__name__)

_SECONDS_PER_DAY = 60 * 60 * 24


@dataclass(frozen=True)
class SubmissionExtraction:
    """Decided submissions plus the count of records with inverted timestamps."""

    processed: list[ProcessedSubmission] = field(default_factory=list)
    anomalous_records: int = 0


@dataclass(frozen=True)
class ReviewExtraction:
    """Processed reviews plus the count of durations with inverted timestamps."""

    processed: list[ProcessedReview] = field(default_factory=list)
    anomalous_records: int = 0


def days_between(start: datetime, end: datetime) -> float:
    """Fractional number of days from *start* to *end* (negative if reversed)."""
    return (as_utc(end) - as_utc(start)).total_seconds() / _SECONDS_PER_DAY


def extract_submissions(records: Iterable[SubmissionRecord]) -> SubmissionExtraction:
    """
    Keep decided submissions and compute their processing time.

    In-flight submissions (no ``decided_at``) are skipped silently; they
    are not part of a decision-time statistic.
    """
    processed: list[ProcessedSubmission] = []
    anomalous = 0

    for record in records:
        if record.decided_at is None:
            continue
        processing_days = days_between(record.submitted_at, record.decided_at)
        if processing_days < 0:
            anomalous += 1
            logger.warning(
                "Submission %s decided before it was submitted (%.2f days); excluded",
                record.submission_id,
                processing_days,
            )
            continue
        processed.append(ProcessedSubmission(record=record, processing_days=processing_days))

    logger.debug(
        "extract_submissions processed=%d anomalous=%d", len(processed), anomalous
    )
    return SubmissionExtraction(processed=processed, anomalous_records=anomalous)


def extract_reviews(records: Iterable[ReviewRecord]) -> ReviewExtraction:
    """
    Compute response and review durations for every review assignment.
    """
    processed: list[ProcessedReview] = []
    anomalous = 0

    for record in records:
        response_days: float | None = None
        review_days: float | None = None

        if record.responded_at is not None:
            response_days = days_between(record.assigned_at, record.responded_at)
            if response_days < 0:
                anomalous += 1
                logger.warning(
                    "Review %s responded before assignment (%.2f days); duration dropped",
                    record.review_id,
                    response_days,
                )
                response_days = None

        if record.responded_at is not None and record.completed_at is not None:
            review_days = days_between(record.responded_at, record.completed_at)
            if review_days < 0:
                anomalous += 1
                logger.warning(
                    "Review %s completed before response (%.2f days); duration dropped",
                    record.review_id,
                    review_days,
                )
                review_days = None

        processed.append(
            ProcessedReview(record=record, response_days=response_days, review_days=review_days)
        )

    return ReviewExtraction(processed=processed, anomalous_records=anomalous)
