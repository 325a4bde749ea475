"""
kpi/benchmarks.py

Industry reference values for academic publishing KPIs.

Decision time figures are in days; acceptance figures are percentages.
"""

from __future__ import annotations

from dataclasses import dataclass

METRIC_DECISION_TIME = "Submission to Decision Time"
METRIC_ACCEPTANCE_RATE = "Acceptance Rate"


@dataclass(frozen=True)
class Benchmark:
    """One KPI compared against its industry reference points."""

    metric: str
    current_value: float
    industry_average: float
    top_quartile: float
    target_value: float


def industry_benchmarks(
    avg_processing_days: float = 0.0,
    acceptance_rate: float = 0.0,
) -> list[Benchmark]:
    """
    Return the benchmark table with *current_value* filled from the caller's
    computed metrics.
    """
    return [
        Benchmark(
            metric=METRIC_DECISION_TIME,
            current_value=avg_processing_days,
            industry_average=120,
            top_quartile=90,
            target_value=90,
        ),
        Benchmark(
            metric=METRIC_ACCEPTANCE_RATE,
            current_value=acceptance_rate,
            industry_average=25,
            top_quartile=30,
            target_value=25,
        ),
    ]
