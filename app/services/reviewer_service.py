"""
app/services/reviewer_service.py

Reviewer efficiency aggregation and ranking.

Per-reviewer metrics
--------------------
Response Rate        = 100 * responded / assigned
Average Review Time  = mean(review_days)         (0 when no completed reviews)
Total Reviews        = completed
Quality Score        = mean(quality_ratings)     (0 when unrated)

Rankings
--------
efficiency       – every reviewer, descending quality score
top_performers   – reviewers with enough completed reviews, descending by
                   quality_score * response_rate / 100
underperformers  – reviewers with enough completed reviews whose response
                   rate or quality score falls below its threshold,
                   ascending quality score then ascending response rate

Overall metrics
---------------
Overall Response Rate    = 100 * responded / assigned        (all reviews)
Overall Completion Rate  = 100 * completed / assigned        (all reviews)
Average Response / Review Time = rounded mean of the defined durations
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from app.config import ReviewerRankingPolicy
from app.domain.academic_records import ProcessedReview, ReviewerAggregate, ReviewRecord
from app.services.extraction import extract_reviews
from kpi.statistics import mean, round_half_up

logger = logging.getLogger(__name__)

UNKNOWN_REVIEWER = "Unknown"


@dataclass(frozen=True)
class ReviewerEfficiency:
    """Derived efficiency figures for one reviewer."""

    reviewer_id: str
    reviewer_name: str
    response_rate: float
    average_review_time: float
    total_reviews: int
    quality_score: float

    @property
    def composite_score(self) -> float:
        """Quality weighted by reliability; used for top-performer ranking."""
        return self.quality_score * self.response_rate / 100


@dataclass(frozen=True)
class ReviewerKPIResult:
    """
    Reviewer KPIs for one publisher and period.
    """

    overall_response_rate: float = 0.0
    overall_completion_rate: float = 0.0
    average_response_time: int = 0
    average_review_time: int = 0
    total_reviews_assigned: int = 0
    total_reviews_completed: int = 0
    reviewer_efficiency: list[ReviewerEfficiency] = field(default_factory=list)
    top_performers: list[ReviewerEfficiency] = field(default_factory=list)
    underperformers: list[ReviewerEfficiency] = field(default_factory=list)
    anomalous_records: int = 0


def aggregate_reviewers(reviews: Iterable[ProcessedReview]) -> list[ReviewerAggregate]:
    """
    Fold reviews into one accumulator per reviewer, in first-seen order.

    The display name is taken from the first review carrying one.
    """
    aggregates: dict[str, ReviewerAggregate] = {}
    for review in reviews:
        reviewer_id = review.record.reviewer_id
        aggregate = aggregates.get(reviewer_id)
        if aggregate is None:
            aggregate = ReviewerAggregate(
                reviewer_id=reviewer_id,
                reviewer_name=review.record.reviewer_name or UNKNOWN_REVIEWER,
            )
            aggregates[reviewer_id] = aggregate
        elif aggregate.reviewer_name == UNKNOWN_REVIEWER and review.record.reviewer_name:
            aggregate.reviewer_name = review.record.reviewer_name
        aggregate.add(review)
    return list(aggregates.values())


def summarize_reviewer(aggregate: ReviewerAggregate) -> ReviewerEfficiency:
    return ReviewerEfficiency(
        reviewer_id=aggregate.reviewer_id,
        reviewer_name=aggregate.reviewer_name,
        response_rate=aggregate.total_responded / aggregate.total_assigned * 100,
        average_review_time=mean(aggregate.review_times) if aggregate.review_times else 0.0,
        total_reviews=aggregate.total_completed,
        quality_score=mean(aggregate.quality_ratings) if aggregate.quality_ratings else 0.0,
    )


class ReviewerRanker:
    """
    Ranks reviewer efficiency records according to a :class:`ReviewerRankingPolicy`.
    """

    def __init__(self, policy: ReviewerRankingPolicy | None = None) -> None:
        self._policy = policy or ReviewerRankingPolicy()

    @property
    def policy(self) -> ReviewerRankingPolicy:
        return self._policy

    def _is_eligible(self, reviewer: ReviewerEfficiency) -> bool:
        return reviewer.total_reviews >= self._policy.min_completed_reviews

    def efficiency(self, reviewers: Sequence[ReviewerEfficiency]) -> list[ReviewerEfficiency]:
        ranked = sorted(reviewers, key=lambda r: r.quality_score, reverse=True)
        return ranked[: self._policy.efficiency_list_size]

    def top_performers(self, reviewers: Sequence[ReviewerEfficiency]) -> list[ReviewerEfficiency]:
        eligible = [r for r in reviewers if self._is_eligible(r)]
        ranked = sorted(eligible, key=lambda r: r.composite_score, reverse=True)
        return ranked[: self._policy.top_performers_size]

    def underperformers(self, reviewers: Sequence[ReviewerEfficiency]) -> list[ReviewerEfficiency]:
        flagged = [
            r
            for r in reviewers
            if self._is_eligible(r)
            and (
                r.response_rate < self._policy.min_response_rate
                or r.quality_score < self._policy.min_quality_score
            )
        ]
        ranked = sorted(flagged, key=lambda r: (r.quality_score, r.response_rate))
        return ranked[: self._policy.underperformers_size]


class ReviewerKPIService:
    """
    Stateless reviewer KPI calculator.

    Usage::

        service = ReviewerKPIService()
        result = service.calculate(reviews)
        print(result.top_performers)
    """

    def __init__(self, policy: ReviewerRankingPolicy | None = None) -> None:
        self._ranker = ReviewerRanker(policy)

    def calculate(self, records: Sequence[ReviewRecord]) -> ReviewerKPIResult:
        """
        Compute overall and per-reviewer KPIs for *records*.

        Returns an all-zero result for an empty input.
        """
        if not records:
            return ReviewerKPIResult()

        extraction = extract_reviews(records)
        reviews = extraction.processed

        assigned = len(reviews)
        responded = sum(1 for review in reviews if review.has_responded)
        completed = sum(1 for review in reviews if review.is_completed)
        response_times = [r.response_days for r in reviews if r.response_days is not None]
        review_times = [r.review_days for r in reviews if r.review_days is not None]

        reviewers = [summarize_reviewer(agg) for agg in aggregate_reviewers(reviews)]

        result = ReviewerKPIResult(
            overall_response_rate=responded / assigned * 100,
            overall_completion_rate=completed / assigned * 100,
            average_response_time=round_half_up(mean(response_times)) if response_times else 0,
            average_review_time=round_half_up(mean(review_times)) if review_times else 0,
            total_reviews_assigned=assigned,
            total_reviews_completed=completed,
            reviewer_efficiency=self._ranker.efficiency(reviewers),
            top_performers=self._ranker.top_performers(reviewers),
            underperformers=self._ranker.underperformers(reviewers),
            anomalous_records=extraction.anomalous_records,
        )
        logger.debug(
            "Reviewer KPIs computed reviewers=%d assigned=%d completed=%d",
            len(reviewers),
            assigned,
            completed,
        )
        return result
