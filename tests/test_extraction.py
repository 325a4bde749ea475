"""
tests/test_extraction.py

Pytest unit tests for metric extraction from raw records.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app.domain.academic_records import Decision, ReviewRecord, SubmissionRecord
from app.services.extraction import days_between, extract_reviews, extract_submissions

T0 = datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)


class TestDaysBetween:
    def test_fractional_days(self) -> None:
        assert days_between(T0, T0 + timedelta(hours=12)) == pytest.approx(0.5)

    def test_reversed_order_is_negative(self) -> None:
        assert days_between(T0 + timedelta(days=2), T0) == pytest.approx(-2.0)

    def test_naive_timestamps_are_treated_as_utc(self) -> None:
        naive = datetime(2024, 6, 3, 9, 0)
        assert days_between(T0, naive) == pytest.approx(2.0)


class TestExtractSubmissions:
    def test_skips_undecided_without_counting_them(self) -> None:
        records = [
            SubmissionRecord("s-1", "j-1", "pub-1", T0, T0 + timedelta(days=3), Decision.ACCEPTED),
            SubmissionRecord("s-2", "j-1", "pub-1", T0),
        ]
        extraction = extract_submissions(records)
        assert [p.record.submission_id for p in extraction.processed] == ["s-1"]
        assert extraction.processed[0].processing_days == pytest.approx(3.0)
        assert extraction.anomalous_records == 0

    def test_negative_duration_is_anomalous(self) -> None:
        records = [SubmissionRecord("s-1", "j-1", "pub-1", T0, T0 - timedelta(days=1))]
        extraction = extract_submissions(records)
        assert extraction.processed == []
        assert extraction.anomalous_records == 1

    def test_same_instant_decision_is_zero_days(self) -> None:
        extraction = extract_submissions([SubmissionRecord("s-1", "j-1", "pub-1", T0, T0)])
        assert extraction.processed[0].processing_days == 0


class TestExtractReviews:
    def test_complete_review(self) -> None:
        record = ReviewRecord(
            "r-1",
            "rev-1",
            assigned_at=T0,
            responded_at=T0 + timedelta(days=2),
            completed_at=T0 + timedelta(days=12),
        )
        [processed] = extract_reviews([record]).processed
        assert processed.response_days == pytest.approx(2.0)
        assert processed.review_days == pytest.approx(10.0)

    def test_completion_without_response_has_no_review_time(self) -> None:
        record = ReviewRecord("r-1", "rev-1", assigned_at=T0, completed_at=T0 + timedelta(days=5))
        extraction = extract_reviews([record])
        assert extraction.processed[0].review_days is None
        assert extraction.processed[0].is_completed
        assert extraction.anomalous_records == 0

    def test_inverted_response_keeps_the_review(self) -> None:
        record = ReviewRecord(
            "r-1",
            "rev-1",
            assigned_at=T0,
            responded_at=T0 - timedelta(days=1),
            completed_at=T0 + timedelta(days=4),
        )
        extraction = extract_reviews([record])
        [processed] = extraction.processed
        assert processed.response_days is None
        assert processed.review_days == pytest.approx(5.0)
        assert extraction.anomalous_records == 1

    def test_pending_review_has_no_durations(self) -> None:
        [processed] = extract_reviews([ReviewRecord("r-1", "rev-1", assigned_at=T0)]).processed
        assert processed.response_days is None
        assert processed.review_days is None
        assert not processed.has_responded
