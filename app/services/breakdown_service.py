"""
app/services/breakdown_service.py

Grouping and time-series breakdowns of submission records.

Breakdowns
----------
journal_breakdown     – per journal: count, mean / median processing time
                        (rounded to whole days), acceptance rate (%)
monthly_time_series   – per submission month (YYYY-MM, UTC): rounded mean
                        processing time, labelled "<count> submissions"
submission_volume     – daily / ISO-weekly / monthly submission counts,
                        30-day growth rate and peak submission days

Journal groups keep the order in which journals first appear in the input;
time series are always ascending by bucket key.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from app.domain.academic_records import ProcessedSubmission, SubmissionRecord, as_utc
from kpi.statistics import mean, median, round_half_up

DAILY_BUCKETS = 30
WEEKLY_BUCKETS = 12
MONTHLY_BUCKETS = 12
PEAK_DAYS = 3
GROWTH_WINDOW_DAYS = 30


@dataclass(frozen=True)
class JournalBreakdown:
    """Decision-time summary for one journal."""

    journal_id: str
    submission_count: int
    average_processing_time: int
    median_processing_time: int
    acceptance_rate: float


@dataclass(frozen=True)
class TimeSeriesPoint:
    """One bucket of a time series."""

    date: str
    value: float
    label: str | None = None


@dataclass(frozen=True)
class SubmissionVolume:
    """Submission counts over several bucket sizes."""

    daily: list[TimeSeriesPoint] = field(default_factory=list)
    weekly: list[TimeSeriesPoint] = field(default_factory=list)
    monthly: list[TimeSeriesPoint] = field(default_factory=list)
    total_submissions: int = 0
    growth_rate: float = 0.0
    peak_submission_days: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Decision-time breakdowns
# ---------------------------------------------------------------------------


def acceptance_rate(submissions: Sequence[ProcessedSubmission]) -> float:
    """Percentage of *submissions* whose decision is ``accepted``; 0 when empty."""
    if not submissions:
        return 0.0
    accepted = sum(1 for submission in submissions if submission.is_accepted)
    return accepted / len(submissions) * 100


def journal_breakdown(submissions: Iterable[ProcessedSubmission]) -> list[JournalBreakdown]:
    groups: dict[str, list[ProcessedSubmission]] = defaultdict(list)
    for submission in submissions:
        groups[submission.journal_id].append(submission)

    breakdown: list[JournalBreakdown] = []
    for journal_id, members in groups.items():
        times = [member.processing_days for member in members]
        breakdown.append(
            JournalBreakdown(
                journal_id=journal_id,
                submission_count=len(members),
                average_processing_time=round_half_up(mean(times)),
                median_processing_time=round_half_up(median(times)),
                acceptance_rate=acceptance_rate(members),
            )
        )
    return breakdown


def monthly_time_series(submissions: Iterable[ProcessedSubmission]) -> list[TimeSeriesPoint]:
    """
    Mean processing time per month of *submission* (not of decision).
    """
    totals: dict[str, float] = defaultdict(float)
    counts: Counter[str] = Counter()
    for submission in submissions:
        month = submission.submission_month
        totals[month] += submission.processing_days
        counts[month] += 1

    return [
        TimeSeriesPoint(
            date=month,
            value=round_half_up(totals[month] / counts[month]),
            label=f"{counts[month]} submissions",
        )
        for month in sorted(counts)
    ]


# ---------------------------------------------------------------------------
# Submission volume
# ---------------------------------------------------------------------------


def _day_key(moment: datetime) -> str:
    return as_utc(moment).strftime("%Y-%m-%d")


def _week_key(moment: datetime) -> str:
    iso_year, iso_week, _ = as_utc(moment).isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def _month_key(moment: datetime) -> str:
    return as_utc(moment).strftime("%Y-%m")


def _count_series(counts: Counter[str], limit: int) -> list[TimeSeriesPoint]:
    """Most recent *limit* buckets, ascending by key."""
    keys = sorted(counts)[-limit:]
    return [TimeSeriesPoint(date=key, value=counts[key]) for key in keys]


def growth_rate(submissions: Sequence[SubmissionRecord], now: datetime) -> float:
    """
    Percentage change between the trailing 30 days and the 30 days before.

    Returns 0 when the earlier window holds no submissions.
    """
    now = as_utc(now)
    recent_start = now - timedelta(days=GROWTH_WINDOW_DAYS)
    previous_start = now - timedelta(days=2 * GROWTH_WINDOW_DAYS)

    recent = 0
    previous = 0
    for submission in submissions:
        submitted = as_utc(submission.submitted_at)
        if recent_start <= submitted <= now:
            recent += 1
        elif previous_start <= submitted < recent_start:
            previous += 1

    if previous == 0:
        return 0.0
    return (recent - previous) / previous * 100


def submission_volume(
    submissions: Sequence[SubmissionRecord],
    *,
    now: datetime | None = None,
) -> SubmissionVolume:
    """
    Count submissions per day, ISO week and month.

    All submissions count regardless of decision state.
    """
    now = now or datetime.now(tz=timezone.utc)

    daily = Counter(_day_key(s.submitted_at) for s in submissions)
    weekly = Counter(_week_key(s.submitted_at) for s in submissions)
    monthly = Counter(_month_key(s.submitted_at) for s in submissions)

    # Busiest first; earlier date wins a tie.
    peaks = sorted(daily.items(), key=lambda item: (-item[1], item[0]))[:PEAK_DAYS]

    return SubmissionVolume(
        daily=_count_series(daily, DAILY_BUCKETS),
        weekly=_count_series(weekly, WEEKLY_BUCKETS),
        monthly=_count_series(monthly, MONTHLY_BUCKETS),
        total_submissions=len(submissions),
        growth_rate=growth_rate(submissions, now),
        peak_submission_days=[day for day, _ in peaks],
    )
