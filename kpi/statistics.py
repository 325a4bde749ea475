"""
kpi/statistics.py

Descriptive statistics over numeric series.

Formulas
--------
Mean        = sum(xs) / n
Median      = middle element of the sorted series; the average of the two
              middle elements when n is even
Percentile  = nearest-rank: sorted(xs)[ceil(p / 100 * n) - 1], index
              clamped to [0, n - 1] (no interpolation)
Variance    = population variance, sum((x - mean)^2) / n

Every function requires a non-empty series and raises EmptySeriesError
otherwise.  Callers are expected to short-circuit the empty case before
invoking them.
"""

from __future__ import annotations

import math
from collections.abc import Sequence


class EmptySeriesError(ValueError):
    """Raised when a statistic is requested for an empty series."""


def _require_values(values: Sequence[float], statistic: str) -> None:
    if len(values) == 0:
        raise EmptySeriesError(f"{statistic} is undefined for an empty series")


def mean(values: Sequence[float]) -> float:
    """Arithmetic average of *values*."""
    _require_values(values, "mean")
    return sum(values) / len(values)


def median(values: Sequence[float]) -> float:
    """
    Median of *values*.

    The input is not mutated; a sorted copy is used.
    """
    _require_values(values, "median")
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2 == 0:
        return (ordered[mid - 1] + ordered[mid]) / 2
    return ordered[mid]


def percentile(values: Sequence[float], p: float) -> float:
    """
    Nearest-rank percentile of *values*.

    Always returns an observed value from the series.
    """
    _require_values(values, "percentile")
    ordered = sorted(values)
    index = math.ceil((p / 100) * len(ordered)) - 1
    index = max(0, min(index, len(ordered) - 1))
    return ordered[index]


def variance(values: Sequence[float]) -> float:
    """Population variance of *values* (divisor n, not n - 1)."""
    _require_values(values, "variance")
    avg = mean(values)
    return sum((value - avg) ** 2 for value in values) / len(values)


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, with .5 rounding towards positive infinity.

    Python's built-in ``round`` uses banker's rounding, which would report
    e.g. 42.5 days as 42; dashboard figures round half up instead.
    """
    return math.floor(value + 0.5)
