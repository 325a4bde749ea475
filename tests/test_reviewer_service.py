"""
tests/test_reviewer_service.py

Pytest unit tests for reviewer aggregation and ranking.

Coverage
--------
- Overall response / completion rates and average durations
- Per-reviewer efficiency figures
- Minimum completed-review gate for both ranked lists
- Top performer and underperformer ordering
- Policy-driven thresholds and list sizes
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from itertools import count

import pytest

from app.config import ReviewerRankingPolicy
from app.domain.academic_records import ReviewRecord
from app.services.reviewer_service import (
    UNKNOWN_REVIEWER,
    ReviewerKPIResult,
    ReviewerKPIService,
)

BASE = datetime(2024, 3, 1, tzinfo=timezone.utc)
_ids = count()


def _review(
    reviewer_id: str,
    *,
    name: str | None = "Dr. Reviewer",
    respond_days: float | None = 1.0,
    review_days: float | None = 10.0,
    rating: float | None = 4.0,
) -> ReviewRecord:
    responded = BASE + timedelta(days=respond_days) if respond_days is not None else None
    completed = (
        responded + timedelta(days=review_days)
        if responded is not None and review_days is not None
        else None
    )
    return ReviewRecord(
        review_id=f"r-{next(_ids)}",
        reviewer_id=reviewer_id,
        reviewer_name=name,
        assigned_at=BASE,
        responded_at=responded,
        completed_at=completed,
        quality_rating=rating if completed is not None else None,
    )


def _completed(reviewer_id: str, n: int, rating: float) -> list[ReviewRecord]:
    return [_review(reviewer_id, rating=rating) for _ in range(n)]


def _unanswered(reviewer_id: str, n: int) -> list[ReviewRecord]:
    return [_review(reviewer_id, respond_days=None) for _ in range(n)]


@pytest.fixture()
def svc() -> ReviewerKPIService:
    return ReviewerKPIService()


# ---------------------------------------------------------------------------
# Overall metrics
# ---------------------------------------------------------------------------


class TestOverallMetrics:
    def test_empty_input_is_all_zero(self, svc: ReviewerKPIService) -> None:
        assert svc.calculate([]) == ReviewerKPIResult()

    def test_rates_and_average_durations(self, svc: ReviewerKPIService) -> None:
        result = svc.calculate(
            [
                _review("a", respond_days=1, review_days=10),
                _review("a", respond_days=3, review_days=20),
                _review("b", respond_days=2, review_days=None),
                _review("b", respond_days=None),
            ]
        )
        assert result.total_reviews_assigned == 4
        assert result.total_reviews_completed == 2
        assert result.overall_response_rate == pytest.approx(75.0)
        assert result.overall_completion_rate == pytest.approx(50.0)
        assert result.average_response_time == 2
        assert result.average_review_time == 15


# ---------------------------------------------------------------------------
# Per-reviewer efficiency
# ---------------------------------------------------------------------------


class TestEfficiency:
    def test_per_reviewer_figures(self, svc: ReviewerKPIService) -> None:
        records = _completed("a", 2, 5.0) + [_review("a", rating=None)] + _unanswered("a", 1)
        [reviewer] = svc.calculate(records).reviewer_efficiency
        assert reviewer.response_rate == pytest.approx(75.0)
        assert reviewer.total_reviews == 3
        assert reviewer.quality_score == pytest.approx(5.0)
        assert reviewer.average_review_time == pytest.approx(10.0)

    def test_unrated_reviewer_scores_zero(self, svc: ReviewerKPIService) -> None:
        [reviewer] = svc.calculate(_unanswered("a", 2)).reviewer_efficiency
        assert reviewer.quality_score == 0
        assert reviewer.average_review_time == 0
        assert reviewer.response_rate == 0

    def test_missing_name_defaults_to_unknown(self, svc: ReviewerKPIService) -> None:
        [reviewer] = svc.calculate([_review("a", name=None)]).reviewer_efficiency
        assert reviewer.reviewer_name == UNKNOWN_REVIEWER

    def test_sorted_by_quality_descending(self, svc: ReviewerKPIService) -> None:
        records = _completed("low", 1, 2.0) + _completed("high", 1, 5.0) + _completed("mid", 1, 3.5)
        result = svc.calculate(records)
        assert [r.reviewer_id for r in result.reviewer_efficiency] == ["high", "mid", "low"]

    def test_list_size_follows_policy(self) -> None:
        svc = ReviewerKPIService(ReviewerRankingPolicy(efficiency_list_size=2))
        records = _completed("a", 1, 2.0) + _completed("b", 1, 5.0) + _completed("c", 1, 3.5)
        assert [r.reviewer_id for r in svc.calculate(records).reviewer_efficiency] == ["b", "c"]


# ---------------------------------------------------------------------------
# Ranked lists
# ---------------------------------------------------------------------------


class TestRankedLists:
    def test_two_completed_reviews_never_ranked(self, svc: ReviewerKPIService) -> None:
        poor = _completed("two", 2, 1.0) + _unanswered("two", 3)
        great = _completed("star", 2, 5.0)
        result = svc.calculate(poor + great)
        assert result.top_performers == []
        assert result.underperformers == []
        assert {r.reviewer_id for r in result.reviewer_efficiency} == {"two", "star"}

    def test_top_performers_by_composite_score(self, svc: ReviewerKPIService) -> None:
        records = (
            _completed("a", 3, 5.0)                             # 5.0 * 100 %
            + _completed("b", 3, 4.5) + _unanswered("b", 1)     # 4.5 * 75 %
            + _completed("c", 3, 4.0)                           # 4.0 * 100 %
        )
        result = svc.calculate(records)
        assert [r.reviewer_id for r in result.top_performers] == ["a", "c", "b"]
        assert result.top_performers[0].composite_score == pytest.approx(5.0)

    def test_underperformers_sorted_by_quality_then_response(
        self, svc: ReviewerKPIService
    ) -> None:
        records = (
            _completed("slow", 3, 4.0) + _unanswered("slow", 2)   # 60 % response
            + _completed("weak", 3, 2.0)                          # quality 2.0
            + _completed("worst", 3, 2.0) + _unanswered("worst", 3)
            + _completed("fine", 3, 4.5)
        )
        result = svc.calculate(records)
        assert [r.reviewer_id for r in result.underperformers] == ["worst", "weak", "slow"]

    def test_thresholds_follow_policy(self) -> None:
        policy = ReviewerRankingPolicy(min_completed_reviews=2, min_quality_score=4.5)
        result = ReviewerKPIService(policy).calculate(_completed("two", 2, 4.0))
        assert [r.reviewer_id for r in result.underperformers] == ["two"]
        assert [r.reviewer_id for r in result.top_performers] == ["two"]

    def test_top_performer_list_is_truncated(self) -> None:
        policy = ReviewerRankingPolicy(top_performers_size=2)
        records = _completed("a", 3, 5.0) + _completed("b", 3, 4.0) + _completed("c", 3, 3.0)
        result = ReviewerKPIService(policy).calculate(records)
        assert [r.reviewer_id for r in result.top_performers] == ["a", "b"]
