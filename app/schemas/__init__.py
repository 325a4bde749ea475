"""
app/schemas package marker.
"""

from app.schemas.kpi import (
    AnalyticsEventResponse,
    BenchmarkResponse,
    HealthResponse,
    JournalBreakdownResponse,
    KPISnapshotResponse,
    PerformanceReportResponse,
    RealTimeMetricsResponse,
    RefreshRequest,
    RefreshStatusResponse,
    ReviewerEfficiencyResponse,
    ReviewerKPIResponse,
    SubmissionKPIResponse,
    SubmissionVolumeResponse,
    TimeSeriesPointResponse,
    TrackEventRequest,
)

__all__ = [
    "AnalyticsEventResponse",
    "BenchmarkResponse",
    "HealthResponse",
    "JournalBreakdownResponse",
    "KPISnapshotResponse",
    "PerformanceReportResponse",
    "RealTimeMetricsResponse",
    "RefreshRequest",
    "RefreshStatusResponse",
    "ReviewerEfficiencyResponse",
    "ReviewerKPIResponse",
    "SubmissionKPIResponse",
    "SubmissionVolumeResponse",
    "TimeSeriesPointResponse",
    "TrackEventRequest",
]
