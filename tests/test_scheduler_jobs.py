"""
tests/test_scheduler_jobs.py

Publisher discovery and per-publisher failure isolation for the daily
KPI snapshot job.  The database session is mocked.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from app.config import SchedulerSettings
from app.scheduler import jobs
from app.services.kpi_orchestrator import KPIPersistenceError

NOW = datetime(2024, 6, 1, 2, 0, tzinfo=timezone.utc)


@pytest.fixture()
def seeds(monkeypatch: pytest.MonkeyPatch):
    def _set(*publisher_ids: str) -> None:
        monkeypatch.setattr(
            jobs,
            "get_scheduler_settings",
            lambda: SchedulerSettings(lookback_days=30, seed_publishers=publisher_ids),
        )

    return _set


class TestResolvePublishers:
    def test_db_first_then_seeds_without_duplicates(self, monkeypatch, seeds) -> None:
        monkeypatch.setattr(jobs, "_publishers_from_db", lambda session: ["pub-1", "pub-2"])
        seeds("pub-2", "pub-3")
        assert jobs._resolve_publishers(MagicMock()) == ["pub-1", "pub-2", "pub-3"]

    def test_db_failure_falls_back_to_seeds(self, seeds) -> None:
        session = MagicMock()
        session.scalars.side_effect = OperationalError("SELECT", {}, Exception("down"))
        seeds("pub-9")
        assert jobs._resolve_publishers(session) == ["pub-9"]


class TestRunDailyKPI:
    def _install(self, monkeypatch, publishers, failing=()):
        session = MagicMock()
        attempts: list[tuple[str, datetime, datetime]] = []

        @contextmanager
        def fake_scope():
            yield session

        class FakeOrchestrator:
            def __init__(self, source) -> None:
                pass

            def persist_snapshot(self, publisher_id, *, period_start, period_end, db):
                attempts.append((publisher_id, period_start, period_end))
                if publisher_id in failing:
                    raise KPIPersistenceError("disk full")
                return SimpleNamespace(id=f"row-{publisher_id}")

        monkeypatch.setattr(jobs, "session_scope", fake_scope)
        monkeypatch.setattr(jobs, "_resolve_publishers", lambda db: list(publishers))
        monkeypatch.setattr(jobs, "AcademicKPIOrchestrator", FakeOrchestrator)
        return session, attempts

    def test_one_failure_does_not_stop_the_rest(self, monkeypatch, seeds) -> None:
        seeds()
        session, attempts = self._install(monkeypatch, ["pub-1", "pub-2"], failing={"pub-1"})

        jobs.run_daily_kpi(now=NOW)

        assert [a[0] for a in attempts] == ["pub-1", "pub-2"]
        session.rollback.assert_called_once()

    def test_window_uses_lookback(self, monkeypatch, seeds) -> None:
        seeds()
        _, attempts = self._install(monkeypatch, ["pub-1"])

        jobs.run_daily_kpi(now=NOW)

        [(_, start, end)] = attempts
        assert end == NOW
        assert (end - start).days == 30

    def test_no_publishers_is_a_noop(self, monkeypatch, seeds) -> None:
        seeds()
        _, attempts = self._install(monkeypatch, [])
        jobs.run_daily_kpi(now=NOW)
        assert attempts == []


class TestBuildScheduler:
    def test_daily_job_registered_but_not_started(self, seeds) -> None:
        seeds()
        scheduler = jobs.build_scheduler()
        assert not scheduler.running
        assert [job.id for job in scheduler.get_jobs()] == ["daily_kpi"]
