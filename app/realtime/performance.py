"""
app/realtime/performance.py

Rolling timing statistics for the analytics dashboard.

Keeps the last 100 dashboard load times and the last 50 timings per named
query.  Intended for an operator-facing performance report, not for
alerting.
"""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, field

DASHBOARD_WINDOW = 100
QUERY_WINDOW = 50


@dataclass(frozen=True)
class QueryTiming:
    avg_time_ms: float
    min_time_ms: float
    max_time_ms: float
    sample_count: int


@dataclass(frozen=True)
class PerformanceReport:
    avg_dashboard_load_time_ms: float
    query_performance: dict[str, QueryTiming] = field(default_factory=dict)


class AnalyticsPerformanceMonitor:
    def __init__(
        self,
        dashboard_window: int = DASHBOARD_WINDOW,
        query_window: int = QUERY_WINDOW,
    ) -> None:
        self._dashboard_loads: deque[float] = deque(maxlen=dashboard_window)
        self._query_window = query_window
        self._query_times: dict[str, deque[float]] = {}
        self._lock = threading.Lock()

    def record_dashboard_load_time(self, time_ms: float) -> None:
        with self._lock:
            self._dashboard_loads.append(time_ms)

    def record_query_time(self, query_name: str, time_ms: float) -> None:
        with self._lock:
            window = self._query_times.setdefault(query_name, deque(maxlen=self._query_window))
            window.append(time_ms)

    def average_dashboard_load_time(self) -> float:
        with self._lock:
            loads = list(self._dashboard_loads)
        return sum(loads) / len(loads) if loads else 0.0

    def average_query_time(self, query_name: str) -> float:
        with self._lock:
            times = list(self._query_times.get(query_name, ()))
        return sum(times) / len(times) if times else 0.0

    def report(self) -> PerformanceReport:
        with self._lock:
            snapshot = {name: list(times) for name, times in self._query_times.items()}
        return PerformanceReport(
            avg_dashboard_load_time_ms=self.average_dashboard_load_time(),
            query_performance={
                name: QueryTiming(
                    avg_time_ms=sum(times) / len(times),
                    min_time_ms=min(times),
                    max_time_ms=max(times),
                    sample_count=len(times),
                )
                for name, times in snapshot.items()
                if times
            },
        )
