import logging
from datetime import datetime
from typing import Optional

from inventory_ledger.config import Settings, get_settings
from inventory_ledger.core.dates import zoned_now
from inventory_ledger.core.scheduler import Scheduler
from inventory_ledger.database import SessionLocal
from inventory_ledger.services.stats_service import record_snapshot

logger = logging.getLogger(__name__)

SNAPSHOT_JOB_NAME = "inventory-stats-snapshot"


def run_snapshot_job(
    session_factory=SessionLocal,
    *,
    now: Optional[datetime] = None,
    timezone_mode: Optional[str] = None,
):
    """Record the snapshot for the current day in the scheduler's timezone."""
    if now is None:
        now = zoned_now(timezone_mode or get_settings().SNAPSHOT_TZ)
    db = session_factory()
    try:
        snapshot = record_snapshot(db, now=now)
    finally:
        db.close()
    return snapshot.snapshot_date


def build_snapshot_scheduler(settings: Settings = None, session_factory=SessionLocal) -> Scheduler:
    settings = settings or get_settings()
    scheduler = Scheduler(
        timezone_mode=settings.SNAPSHOT_TZ,
        poll_seconds=settings.SNAPSHOT_POLL_SECONDS,
    )
    scheduler.add_daily_job(
        SNAPSHOT_JOB_NAME,
        settings.SNAPSHOT_RUN_TIME,
        lambda: run_snapshot_job(session_factory, timezone_mode=settings.SNAPSHOT_TZ),
    )
    return scheduler


__all__ = ["SNAPSHOT_JOB_NAME", "build_snapshot_scheduler", "run_snapshot_job"]
