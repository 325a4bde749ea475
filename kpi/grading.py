"""
kpi/grading.py

Performance grading and rule-based recommendations for a publisher's
editorial pipeline.

Grade score (0-100)
-------------------
Processing time   (max 40): <= 60 days -> 40, <= 90 -> 30, <= 120 -> 20, else 10
Acceptance rate   (max 30): 20-30 %   -> 30, 15-35 %  -> 25, else 15
Baseline                  : +30 unconditionally

Letter: >= 90 A, >= 80 B, >= 70 C, >= 60 D, else F.

Recommendations
---------------
Rules are independent and additive; one publisher can trigger several.
"""

from __future__ import annotations

from collections.abc import Sequence

from kpi.statistics import variance

NO_DATA_GRADE = "N/A"
NO_DATA_RECOMMENDATION = "No data available for analysis"

RECOMMEND_STREAMLINE = "Consider streamlining the review process to reduce processing time"
RECOMMEND_AUTO_ASSIGN = "Implement automated reviewer assignment to reduce delays"
RECOMMEND_GUIDELINES = "Review submission guidelines to ensure quality submissions"
RECOMMEND_STANDARDS = "Consider raising editorial standards to maintain journal quality"
RECOMMEND_STANDARDIZE = "Work on standardizing review timelines across submissions"


class PerformanceGrader:
    """
    Maps average processing time and acceptance rate to a letter grade.

    The baseline component stands in for factors the score does not model
    (consistency, reviewer quality, ...).
    """

    PROCESSING_TIME_BANDS: tuple[tuple[float, int], ...] = ((60, 40), (90, 30), (120, 20))
    PROCESSING_TIME_FLOOR: int = 10

    ACCEPTANCE_BANDS: tuple[tuple[float, float, int], ...] = ((20, 30, 30), (15, 35, 25))
    ACCEPTANCE_FLOOR: int = 15

    BASELINE: int = 30

    LETTER_THRESHOLDS: tuple[tuple[int, str], ...] = ((90, "A"), (80, "B"), (70, "C"), (60, "D"))
    LOWEST_LETTER: str = "F"

    def score(self, avg_processing_days: float, acceptance_rate: float) -> int:
        """Return the 0-100 score behind the letter grade."""
        return (
            self._processing_component(avg_processing_days)
            + self._acceptance_component(acceptance_rate)
            + self.BASELINE
        )

    def grade(self, avg_processing_days: float, acceptance_rate: float) -> str:
        """
        Return the letter grade for the given averages.

        Args:
            avg_processing_days: Unrounded mean submission-to-decision time.
            acceptance_rate: Acceptance rate as a percentage (0-100).
        """
        total = self.score(avg_processing_days, acceptance_rate)
        for threshold, letter in self.LETTER_THRESHOLDS:
            if total >= threshold:
                return letter
        return self.LOWEST_LETTER

    def _processing_component(self, avg_processing_days: float) -> int:
        for upper_bound, points in self.PROCESSING_TIME_BANDS:
            if avg_processing_days <= upper_bound:
                return points
        return self.PROCESSING_TIME_FLOOR

    def _acceptance_component(self, acceptance_rate: float) -> int:
        for low, high, points in self.ACCEPTANCE_BANDS:
            if low <= acceptance_rate <= high:
                return points
        return self.ACCEPTANCE_FLOOR


class RecommendationEngine:
    """Threshold rules that turn aggregate metrics into editorial advice."""

    SLOW_PROCESSING_DAYS: float = 90
    LOW_ACCEPTANCE_RATE: float = 15
    HIGH_ACCEPTANCE_RATE: float = 40
    # days squared; a standard deviation of roughly 31.6 days
    MAX_PROCESSING_VARIANCE: float = 1000

    def recommend(
        self,
        avg_processing_days: float,
        acceptance_rate: float,
        processing_times: Sequence[float],
    ) -> list[str]:
        """
        Generate recommendations for a non-empty set of processing times.

        Raises:
            EmptySeriesError: If *processing_times* is empty.
        """
        recommendations: list[str] = []

        if avg_processing_days > self.SLOW_PROCESSING_DAYS:
            recommendations.append(RECOMMEND_STREAMLINE)
            recommendations.append(RECOMMEND_AUTO_ASSIGN)

        if acceptance_rate < self.LOW_ACCEPTANCE_RATE:
            recommendations.append(RECOMMEND_GUIDELINES)
        elif acceptance_rate > self.HIGH_ACCEPTANCE_RATE:
            recommendations.append(RECOMMEND_STANDARDS)

        if variance(processing_times) > self.MAX_PROCESSING_VARIANCE:
            recommendations.append(RECOMMEND_STANDARDIZE)

        return recommendations


_GRADER = PerformanceGrader()
_RECOMMENDER = RecommendationEngine()


def grade(avg_processing_days: float, acceptance_rate: float) -> str:
    """Module-level shortcut for :meth:`PerformanceGrader.grade`."""
    return _GRADER.grade(avg_processing_days, acceptance_rate)


def recommend(
    avg_processing_days: float,
    acceptance_rate: float,
    processing_times: Sequence[float],
) -> list[str]:
    """Module-level shortcut for :meth:`RecommendationEngine.recommend`."""
    return _RECOMMENDER.recommend(avg_processing_days, acceptance_rate, processing_times)
