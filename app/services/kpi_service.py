"""
app/services/kpi_service.py

Deterministic submission-to-decision KPI engine.

All calculation functions operate on pre-fetched, typed records.  No
database logic lives inside the calculation layer; the caller is
responsible for fetching SubmissionRecord rows for the publisher and
period before invoking this service.

Metrics
-------
Average / Median Decision Time = mean / median(processing_days), rounded
90th Percentile                = nearest-rank percentile, rounded
Acceptance Rate                = 100 * accepted / decided       (unrounded)
Performance Grade              = kpi.grading.grade(unrounded mean, rate)

Empty data
----------
When no decided submission survives extraction the service returns
:func:`empty_kpi_result` without touching the statistics module.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone

from app.domain.academic_records import SubmissionRecord
from app.services.breakdown_service import (
    JournalBreakdown,
    TimeSeriesPoint,
    acceptance_rate,
    journal_breakdown,
    monthly_time_series,
)
from app.services.extraction import extract_submissions
from kpi.benchmarks import Benchmark, industry_benchmarks
from kpi.grading import (
    NO_DATA_GRADE,
    NO_DATA_RECOMMENDATION,
    PerformanceGrader,
    RecommendationEngine,
)
from kpi.statistics import mean, median, percentile, round_half_up

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Output dataclass
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KPIResult:
    """
    Submission-to-decision KPIs for one publisher and period.

    Built fresh per calculation; it has no identity beyond the call that
    produced it.
    """

    average_submission_to_decision: int
    """Mean days from submission to decision, rounded half up."""

    median_submission_to_decision: int
    """Median days from submission to decision, rounded half up."""

    percentile_90_processing_time: int
    """Nearest-rank 90th percentile of processing days, rounded half up."""

    acceptance_rate: float
    """Percentage of decided submissions that were accepted."""

    total_submissions_processed: int
    """Number of decided submissions that entered the statistics."""

    journal_breakdown: list[JournalBreakdown] = field(default_factory=list)
    time_series: list[TimeSeriesPoint] = field(default_factory=list)
    benchmarks: list[Benchmark] = field(default_factory=list)
    performance_grade: str = NO_DATA_GRADE
    recommendations: list[str] = field(default_factory=list)

    anomalous_records: int = 0
    """Submissions excluded because their decision precedes submission."""

    computed_at: datetime = field(
        default_factory=lambda: datetime.now(tz=timezone.utc)
    )
    """UTC timestamp of when the result was produced."""

    @property
    def has_data(self) -> bool:
        return self.total_submissions_processed > 0


def empty_kpi_result(anomalous_records: int = 0) -> KPIResult:
    """
    Sentinel result for a publisher with no decided submissions.
    """
    return KPIResult(
        average_submission_to_decision=0,
        median_submission_to_decision=0,
        percentile_90_processing_time=0,
        acceptance_rate=0.0,
        total_submissions_processed=0,
        journal_breakdown=[],
        time_series=[],
        benchmarks=industry_benchmarks(),
        performance_grade=NO_DATA_GRADE,
        recommendations=[NO_DATA_RECOMMENDATION],
        anomalous_records=anomalous_records,
    )


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class KPIService:
    """
    Stateless, deterministic submission KPI calculation engine.

    No I/O is performed inside this class; it contains only pure
    arithmetic business logic over pre-fetched records.

    Usage::

        service = KPIService()
        result = service.calculate_submission_to_decision(records)
        print(result.performance_grade)
    """

    def __init__(
        self,
        grader: PerformanceGrader | None = None,
        recommender: RecommendationEngine | None = None,
    ) -> None:
        self._grader = grader or PerformanceGrader()
        self._recommender = recommender or RecommendationEngine()

    def calculate_submission_to_decision(
        self,
        records: Sequence[SubmissionRecord],
    ) -> KPIResult:
        """
        Calculate decision-time KPIs for *records*.

        Parameters
        ----------
        records:
            Submissions already filtered to one publisher and period.
            Undecided submissions are ignored.

        Returns
        -------
        KPIResult
            The empty sentinel when no decided submission is available.
            Never raises for empty input.
        """
        extraction = extract_submissions(records)
        processed = extraction.processed

        if not processed:
            logger.debug(
                "No decided submissions in %d records; returning empty KPIs", len(records)
            )
            return empty_kpi_result(extraction.anomalous_records)

        processing_times = [submission.processing_days for submission in processed]
        avg_days = mean(processing_times)
        rate = acceptance_rate(processed)

        result = KPIResult(
            average_submission_to_decision=round_half_up(avg_days),
            median_submission_to_decision=round_half_up(median(processing_times)),
            percentile_90_processing_time=round_half_up(percentile(processing_times, 90)),
            acceptance_rate=rate,
            total_submissions_processed=len(processed),
            journal_breakdown=journal_breakdown(processed),
            time_series=monthly_time_series(processed),
            benchmarks=industry_benchmarks(round_half_up(avg_days), rate),
            performance_grade=self._grader.grade(avg_days, rate),
            recommendations=self._recommender.recommend(avg_days, rate, processing_times),
            anomalous_records=extraction.anomalous_records,
        )
        logger.debug(
            "Submission KPIs computed processed=%d avg=%.2f grade=%s",
            len(processed),
            avg_days,
            result.performance_grade,
        )
        return result
