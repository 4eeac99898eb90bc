import argparse
import logging
import time

from inventory_ledger.config import get_settings
from inventory_ledger.core.logging import setup_logging
from inventory_ledger.database import Base, engine
from inventory_ledger.models import import_all_models
from inventory_ledger.scheduler.snapshot_job import build_snapshot_scheduler, run_snapshot_job

logger = logging.getLogger(__name__)


def parse_args():
    parser = argparse.ArgumentParser(description="Record daily inventory stats snapshots.")
    parser.add_argument(
        "--run-once",
        action="store_true",
        help="Record today's snapshot and exit.",
    )
    return parser.parse_args()


def main():
    setup_logging()
    args = parse_args()
    settings = get_settings()

    import_all_models()
    Base.metadata.create_all(bind=engine)

    if args.run_once:
        snapshot_date = run_snapshot_job()
        logger.info("Snapshot recorded for %s", snapshot_date)
        return

    if not settings.SNAPSHOT_SCHEDULER_ENABLED:
        logger.info("Snapshot scheduler disabled by SNAPSHOT_SCHEDULER_ENABLED.")
        return

    scheduler = build_snapshot_scheduler(settings)
    scheduler.start()
    try:
        while True:
            time.sleep(settings.SNAPSHOT_POLL_SECONDS)
    except KeyboardInterrupt:
        logger.info("Interrupted; shutting down.")
    finally:
        scheduler.stop()


if __name__ == "__main__":
    main()
