"""
app/schemas/kpi.py

Response schemas for academic KPI endpoints.

Every model reads attributes from the matching service dataclass, so
routers build responses with ``Model.model_validate(result)``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class _FromAttributes(BaseModel):
    model_config = {"from_attributes": True}


class JournalBreakdownResponse(_FromAttributes):
    journal_id: str
    submission_count: int = Field(..., ge=0)
    average_processing_time: int
    median_processing_time: int
    acceptance_rate: float = Field(..., ge=0, le=100)


class TimeSeriesPointResponse(_FromAttributes):
    date: str
    value: float
    label: str | None = None


class BenchmarkResponse(_FromAttributes):
    metric: str
    current_value: float
    industry_average: float
    top_quartile: float
    target_value: float


class SubmissionKPIResponse(_FromAttributes):
    """
    Submission-to-decision KPIs for one publisher and period.
    """

    average_submission_to_decision: int
    median_submission_to_decision: int
    percentile_90_processing_time: int
    acceptance_rate: float = Field(..., ge=0, le=100)
    total_submissions_processed: int = Field(..., ge=0)
    journal_breakdown: list[JournalBreakdownResponse]
    time_series: list[TimeSeriesPointResponse]
    benchmarks: list[BenchmarkResponse]
    performance_grade: str
    recommendations: list[str]
    anomalous_records: int = Field(..., ge=0)
    computed_at: datetime


class ReviewerEfficiencyResponse(_FromAttributes):
    reviewer_id: str
    reviewer_name: str
    response_rate: float
    average_review_time: float
    total_reviews: int
    quality_score: float


class ReviewerKPIResponse(_FromAttributes):
    overall_response_rate: float
    overall_completion_rate: float
    average_response_time: int
    average_review_time: int
    total_reviews_assigned: int = Field(..., ge=0)
    total_reviews_completed: int = Field(..., ge=0)
    reviewer_efficiency: list[ReviewerEfficiencyResponse]
    top_performers: list[ReviewerEfficiencyResponse]
    underperformers: list[ReviewerEfficiencyResponse]
    anomalous_records: int = Field(..., ge=0)


class SubmissionVolumeResponse(_FromAttributes):
    daily: list[TimeSeriesPointResponse]
    weekly: list[TimeSeriesPointResponse]
    monthly: list[TimeSeriesPointResponse]
    total_submissions: int = Field(..., ge=0)
    growth_rate: float
    peak_submission_days: list[str]


class AnalyticsEventResponse(_FromAttributes):
    id: str
    type: str
    timestamp: datetime
    journal_id: str
    submission_id: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)


class TrackEventRequest(BaseModel):
    """
    Body of ``POST /publishers/{publisher_id}/events``.
    """

    type: str
    journal_id: str = Field(..., min_length=1)
    submission_id: str = Field(..., min_length=1)
    data: dict[str, Any] = Field(default_factory=dict)


class RealTimeMetricsResponse(_FromAttributes):
    today_submissions: int = Field(..., ge=0)
    today_decisions: int = Field(..., ge=0)
    active_reviews: int = Field(..., ge=0)
    last_updated: datetime


class RefreshRequest(BaseModel):
    interval_ms: int | None = Field(default=None, gt=0)


class RefreshStatusResponse(BaseModel):
    publisher_id: str
    scheduled: bool
    interval_ms: int | None = None


class QueryTimingResponse(_FromAttributes):
    avg_time_ms: float
    min_time_ms: float
    max_time_ms: float
    sample_count: int


class PerformanceReportResponse(_FromAttributes):
    avg_dashboard_load_time_ms: float
    query_performance: dict[str, QueryTimingResponse]


class HealthResponse(BaseModel):
    status: str
    scheduler_running: bool
    live_publishers: int


class KPISnapshotResponse(_FromAttributes):
    """
    Persisted output of the daily KPI job for one period window.
    """

    publisher_id: str
    period_start: datetime
    period_end: datetime
    computed_kpis: dict[str, Any]
    created_at: datetime
