import unittest
from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy import select

from inventory_ledger.config import Settings
from inventory_ledger.core.scheduler import Scheduler, next_daily_run, parse_run_time
from inventory_ledger.models import InventorySnapshot
from inventory_ledger.scheduler.snapshot_job import (
    SNAPSHOT_JOB_NAME,
    build_snapshot_scheduler,
    run_snapshot_job,
)

from tests.db_utils import add_product, make_session_factory


class SchedulerTest(unittest.TestCase):
    def test_run_pending_executes_job(self):
        hits = {"count": 0}

        def job():
            hits["count"] += 1

        scheduler = Scheduler()
        scheduled = scheduler.add_daily_job("test", "00:00", job)
        scheduled.next_run = datetime.now()
        self.assertEqual(scheduler.run_pending(), 1)

        self.assertEqual(hits["count"], 1)
        self.assertGreater(scheduled.next_run, datetime.now())
        self.assertEqual(scheduler.run_pending(), 0)

    def test_failing_job_is_recorded_and_rescheduled(self):
        def job():
            raise RuntimeError("database unavailable")

        scheduler = Scheduler()
        scheduled = scheduler.add_daily_job("broken", "00:00", job)
        scheduled.next_run = datetime.now()
        with self.assertLogs("inventory_ledger.core.scheduler", level="ERROR"):
            scheduler.run_pending()
        self.assertEqual(scheduled.last_error, "database unavailable")
        self.assertIsNotNone(scheduled.next_run)

    def test_next_daily_run(self):
        now = datetime(2024, 6, 1, 12, 0)
        self.assertEqual(next_daily_run(time(23, 55), now), datetime(2024, 6, 1, 23, 55))
        self.assertEqual(next_daily_run(time(8, 0), now), datetime(2024, 6, 2, 8, 0))
        self.assertEqual(next_daily_run(time(12, 0), now), datetime(2024, 6, 2, 12, 0))

    def test_parse_run_time(self):
        self.assertEqual(parse_run_time("23:55"), time(23, 55))
        self.assertEqual(parse_run_time(" 06:30:15 "), time(6, 30, 15))
        with self.assertRaises(ValueError):
            parse_run_time("noon")


class SnapshotJobTest(unittest.TestCase):
    def setUp(self):
        self.engine, self.Session = make_session_factory()

    def tearDown(self):
        self.engine.dispose()

    def test_job_records_todays_snapshot(self):
        with self.Session() as db:
            add_product(db, stock=3)

        snapshot_date = run_snapshot_job(self.Session)

        with self.Session() as db:
            snapshot = db.execute(select(InventorySnapshot)).scalar_one()
        self.assertIsInstance(snapshot_date, date)
        self.assertEqual(snapshot.snapshot_date, snapshot_date)
        self.assertEqual(snapshot.total_products, 1)
        self.assertEqual(snapshot.low_stock_products, 1)

    def test_job_uses_the_scheduler_day(self):
        with self.Session() as db:
            add_product(db, stock=3)

        local_run = datetime(2024, 6, 1, 23, 55, tzinfo=timezone(timedelta(hours=-5)))
        self.assertEqual(run_snapshot_job(self.Session, now=local_run), date(2024, 6, 1))

    def test_scheduler_is_built_from_settings(self):
        settings = Settings(SNAPSHOT_RUN_TIME="01:15", SNAPSHOT_POLL_SECONDS=5, SNAPSHOT_TZ="utc")
        scheduler = build_snapshot_scheduler(settings, session_factory=self.Session)

        [job] = scheduler.jobs
        self.assertEqual(job.name, SNAPSHOT_JOB_NAME)
        self.assertEqual(job.run_time, time(1, 15))
        self.assertEqual(job.next_run.tzinfo.utcoffset(job.next_run).total_seconds(), 0)


if __name__ == "__main__":
    unittest.main()
