"""
app/scheduler/refresh.py

Per-publisher recurring refresh of live dashboard metrics.

Each publisher has at most one interval job.  Scheduling a publisher that
already has a job cancels the old one before the new one is installed.

Failure policy
--------------
Exceptions raised by a refresh callback are logged and swallowed; the job
stays scheduled and runs again on the next tick.

Overlap policy
--------------
A tick that fires while the previous tick for the same publisher is still
running is skipped.  APScheduler's ``max_instances=1`` only covers one Job
object, so every registration for a publisher shares one guard lock kept
for the lifetime of the scheduler.  A job installed while its predecessor
is mid-tick therefore skips until that tick finishes.  The guard also
covers manual runs through :meth:`RefreshScheduler.trigger_now`.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler

logger = logging.getLogger(__name__)

RefreshCallback = Callable[[], None]

_JOB_PREFIX = "analytics_refresh:"


def refresh_job_id(publisher_id: str) -> str:
    return f"{_JOB_PREFIX}{publisher_id}"


def _run_refresh(
    publisher_id: str,
    refresh_callback: RefreshCallback,
    guard: threading.Lock,
) -> bool:
    """
    Job body.  Returns ``True`` when the callback completed successfully.
    """
    if not guard.acquire(blocking=False):
        logger.info(
            "Scheduler: analytics_refresh skipped publisher=%r, previous run still in progress",
            publisher_id,
        )
        return False

    started = time.monotonic()
    try:
        refresh_callback()
    except Exception:  # noqa: BLE001
        logger.exception("Scheduler: analytics_refresh failed publisher=%r", publisher_id)
        return False
    finally:
        guard.release()

    logger.debug(
        "Scheduler: analytics_refresh publisher=%r duration_ms=%.1f",
        publisher_id,
        (time.monotonic() - started) * 1000,
    )
    return True


class RefreshScheduler:
    """
    Usage::

        refresher = RefreshScheduler()
        refresher.start()
        refresher.schedule_refresh("pub-1", 30_000, push_metrics)
        ...
        refresher.shutdown()

    Parameters
    ----------
    scheduler:
        APScheduler instance to register jobs on.  Defaults to a private
        ``BackgroundScheduler``; the caller owns start/shutdown either way.
    """

    def __init__(self, scheduler: BaseScheduler | None = None) -> None:
        self._scheduler = scheduler or BackgroundScheduler(timezone="UTC")
        self._registry_lock = threading.Lock()
        # Outlives individual jobs so a replaced job and its successor share it.
        self._run_guards: dict[str, threading.Lock] = {}

    @property
    def scheduler(self) -> BaseScheduler:
        return self._scheduler

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        if not self._scheduler.running:
            self._scheduler.start()

    def shutdown(self, wait: bool = True) -> None:
        self.clear_all_refreshes()
        if self._scheduler.running:
            self._scheduler.shutdown(wait=wait)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def schedule_refresh(
        self,
        publisher_id: str,
        interval_ms: int,
        refresh_callback: RefreshCallback,
    ) -> None:
        """
        Run *refresh_callback* every *interval_ms* milliseconds.

        Raises
        ------
        ValueError
            If *interval_ms* is not positive.
        """
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive; got {interval_ms}")

        with self._registry_lock:
            self._remove_job(publisher_id)
            self._scheduler.add_job(
                _run_refresh,
                trigger="interval",
                seconds=interval_ms / 1000,
                args=[publisher_id, refresh_callback, self._run_guard(publisher_id)],
                id=refresh_job_id(publisher_id),
                name=f"Analytics refresh for {publisher_id}",
                replace_existing=True,
                max_instances=1,
                coalesce=True,
            )
        logger.info(
            "Scheduler: analytics_refresh scheduled publisher=%r interval_ms=%d",
            publisher_id,
            interval_ms,
        )

    def clear_refresh(self, publisher_id: str) -> bool:
        """
        Cancel the refresh job of *publisher_id*.

        Returns ``True`` when a job was removed.
        """
        with self._registry_lock:
            removed = self._remove_job(publisher_id)
        if removed:
            logger.info("Scheduler: analytics_refresh cleared publisher=%r", publisher_id)
        return removed

    def clear_all_refreshes(self) -> None:
        with self._registry_lock:
            for job in self._scheduler.get_jobs():
                if job.id.startswith(_JOB_PREFIX):
                    self._scheduler.remove_job(job.id)

    def _run_guard(self, publisher_id: str) -> threading.Lock:
        # caller holds _registry_lock
        guard = self._run_guards.get(publisher_id)
        if guard is None:
            guard = self._run_guards[publisher_id] = threading.Lock()
        return guard

    def _remove_job(self, publisher_id: str) -> bool:
        try:
            self._scheduler.remove_job(refresh_job_id(publisher_id))
        except JobLookupError:
            return False
        return True

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def is_scheduled(self, publisher_id: str) -> bool:
        return self._scheduler.get_job(refresh_job_id(publisher_id)) is not None

    def scheduled_publishers(self) -> list[str]:
        return [
            job.id[len(_JOB_PREFIX):]
            for job in self._scheduler.get_jobs()
            if job.id.startswith(_JOB_PREFIX)
        ]

    def trigger_now(self, publisher_id: str) -> bool:
        """
        Run the publisher's refresh synchronously on the calling thread.

        Honours the same overlap guard and failure policy as scheduled ticks.
        Returns ``False`` when no job is registered, the run was skipped, or
        the callback raised.
        """
        job = self._scheduler.get_job(refresh_job_id(publisher_id))
        if job is None:
            return False
        return job.func(*job.args)
