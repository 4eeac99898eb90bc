from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta, timezone
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError

from inventory_ledger.core.errors import InventoryError

logger = logging.getLogger(__name__)

_SCHEDULED_JOB_EXCEPTIONS = (OSError, RuntimeError, ValueError, SQLAlchemyError, InventoryError)


def parse_run_time(value: str) -> time:
    parts = value.strip().split(":")
    if len(parts) < 2:
        raise ValueError("Run time must be in HH:MM format, got {!r}".format(value))
    hour = int(parts[0])
    minute = int(parts[1])
    second = int(parts[2]) if len(parts) > 2 else 0
    return time(hour=hour, minute=minute, second=second)


def next_daily_run(run_time: time, now: datetime) -> datetime:
    candidate = now.replace(
        hour=run_time.hour,
        minute=run_time.minute,
        second=run_time.second,
        microsecond=0,
    )
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate


@dataclass
class DailyJob:
    name: str
    run_time: time
    func: Callable[[], object]
    next_run: Optional[datetime] = None
    last_error: Optional[str] = field(default=None, repr=False)


class Scheduler:
    """Runs registered jobs once a day from a background thread.

    Jobs execute on the scheduler thread one after another; a failing job is
    logged and rescheduled for the next day.
    """

    def __init__(self, *, timezone_mode: str = "local", poll_seconds: int = 30):
        self._jobs: list[DailyJob] = []
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._poll_seconds = max(1, int(poll_seconds))
        self._tz = timezone.utc if timezone_mode.lower() == "utc" else None

    def _now(self) -> datetime:
        return datetime.now(tz=self._tz)

    @property
    def jobs(self) -> list[DailyJob]:
        with self._lock:
            return list(self._jobs)

    def add_daily_job(self, name: str, run_time: str, func: Callable[[], object]) -> DailyJob:
        run_at = parse_run_time(run_time)
        job = DailyJob(name=name, run_time=run_at, func=func)
        job.next_run = next_daily_run(run_at, self._now())
        with self._lock:
            self._jobs.append(job)
        logger.info("Scheduled %s daily at %s (next %s)", name, run_at, job.next_run)
        return job

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="snapshot-scheduler", daemon=True)
        self._thread.start()
        logger.info("Scheduler started with %d job(s).", len(self.jobs))

    def stop(self) -> None:
        if not self._thread:
            return
        self._stop_event.set()
        self._thread.join(timeout=self._poll_seconds + 1)
        self._thread = None
        logger.info("Scheduler stopped.")

    def run_pending(self) -> int:
        now = self._now()
        ran = 0
        for job in self.jobs:
            if job.next_run is None or now < job.next_run:
                continue
            self._run_job(job)
            job.next_run = next_daily_run(job.run_time, now)
            ran += 1
        return ran

    @staticmethod
    def _run_job(job: DailyJob) -> None:
        logger.info("Running scheduled job: %s", job.name)
        try:
            job.func()
            job.last_error = None
        except _SCHEDULED_JOB_EXCEPTIONS as exc:
            job.last_error = str(exc)
            logger.exception("Scheduled job failed: %s", job.name)

    def _run(self) -> None:
        while not self._stop_event.is_set():
            self.run_pending()
            self._stop_event.wait(self._poll_seconds)


__all__ = ["DailyJob", "Scheduler", "next_daily_run", "parse_run_time"]
