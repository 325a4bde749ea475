"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class ReviewerRankingPolicy:
    """
    Thresholds and list sizes for reviewer efficiency rankings.

    ``min_completed_reviews`` keeps reviewers with too few observations out
    of the top-performer and underperformer lists.
    """

    min_completed_reviews: int = 3
    efficiency_list_size: int = 20
    top_performers_size: int = 5
    underperformers_size: int = 5
    min_response_rate: float = 70.0
    min_quality_score: float = 3.0


@dataclass(frozen=True)
class AnalyticsSettings:
    """
    Runtime settings for KPI calculation and live dashboard refresh.
    """

    reviewer_ranking: ReviewerRankingPolicy = ReviewerRankingPolicy()
    refresh_interval_ms: int = 30_000
    event_feed_limit: int = 50


@dataclass(frozen=True)
class SchedulerSettings:
    """
    Settings for the daily KPI snapshot job.
    """

    daily_kpi_hour: int = 2
    daily_kpi_minute: int = 0
    lookback_days: int = 90
    seed_publishers: tuple[str, ...] = ()


@lru_cache(maxsize=1)
def get_analytics_settings() -> AnalyticsSettings:
    """
    Return cached analytics settings from environment variables.
    """

    policy = ReviewerRankingPolicy(
        min_completed_reviews=max(1, _get_int_env("REVIEWER_MIN_COMPLETED_REVIEWS", 3)),
        efficiency_list_size=max(1, _get_int_env("REVIEWER_EFFICIENCY_LIST_SIZE", 20)),
        top_performers_size=max(1, _get_int_env("REVIEWER_TOP_PERFORMERS_SIZE", 5)),
        underperformers_size=max(1, _get_int_env("REVIEWER_UNDERPERFORMERS_SIZE", 5)),
        min_response_rate=_get_float_env("REVIEWER_MIN_RESPONSE_RATE", 70.0),
        min_quality_score=_get_float_env("REVIEWER_MIN_QUALITY_SCORE", 3.0),
    )
    return AnalyticsSettings(
        reviewer_ranking=policy,
        refresh_interval_ms=max(1000, _get_int_env("ANALYTICS_REFRESH_INTERVAL_MS", 30_000)),
        event_feed_limit=max(1, _get_int_env("ANALYTICS_EVENT_FEED_LIMIT", 50)),
    )


@lru_cache(maxsize=1)
def get_scheduler_settings() -> SchedulerSettings:
    """
    Return cached scheduler settings from environment variables.

    ``SCHEDULER_PUBLISHERS`` is a comma-separated list of publisher ids that
    are always included in the daily job, in addition to those discovered
    in the database.
    """

    raw_publishers = _get_str_env("SCHEDULER_PUBLISHERS", "")
    seeds = tuple(token.strip() for token in raw_publishers.split(",") if token.strip())
    return SchedulerSettings(
        daily_kpi_hour=min(23, max(0, _get_int_env("SCHEDULER_DAILY_KPI_HOUR", 2))),
        daily_kpi_minute=min(59, max(0, _get_int_env("SCHEDULER_DAILY_KPI_MINUTE", 0))),
        lookback_days=max(1, _get_int_env("SCHEDULER_LOOKBACK_DAYS", 90)),
        seed_publishers=seeds,
    )
