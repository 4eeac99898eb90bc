from contextlib import asynccontextmanager

from fastapi import FastAPI

from inventory_ledger.config import Settings, get_settings
from inventory_ledger.core.logging import setup_logging
from inventory_ledger.database import Base, engine
from inventory_ledger.models import import_all_models
from inventory_ledger.routers import (
    alerts_router,
    health_router,
    movements_router,
    products_router,
    stats_router,
)
from inventory_ledger.scheduler.snapshot_job import build_snapshot_scheduler


setup_logging()
settings: Settings = get_settings()

import_all_models()
Base.metadata.create_all(bind=engine)

snapshot_scheduler = build_snapshot_scheduler(settings)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    if settings.SNAPSHOT_SCHEDULER_ENABLED:
        snapshot_scheduler.start()
    try:
        yield
    finally:
        snapshot_scheduler.stop()


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

app.include_router(health_router)
app.include_router(products_router)
app.include_router(movements_router)
app.include_router(alerts_router)
app.include_router(stats_router)


__all__ = ["app"]
