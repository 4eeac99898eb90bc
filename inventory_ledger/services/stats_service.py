import logging
from datetime import datetime, timedelta
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from inventory_ledger.config import get_settings
from inventory_ledger.core.dates import ensure_aware, ensure_utc, utc_now, zoned_now
from inventory_ledger.models.inventory_snapshot import InventorySnapshot
from inventory_ledger.schemas.stats import InventoryStats, InventoryStatsWithTrend, TrendEntry
from inventory_ledger.services.inventory_queries import (
    count_active_categories,
    list_all_products,
    list_recent_movements,
)

logger = logging.getLogger(__name__)

RECENT_WINDOW = timedelta(hours=24)


def compute_stats(
    products: Iterable,
    movements: Iterable,
    *,
    now: Optional[datetime] = None,
    total_categories: int = 0,
    recent_window: timedelta = RECENT_WINDOW,
) -> InventoryStats:
    now = ensure_utc(now) or utc_now()
    since = now - recent_window

    total_products = 0
    active_products = 0
    total_value = 0.0
    total_retail_value = 0.0
    low_stock = 0
    out_of_stock = 0
    for product in products:
        total_products += 1
        if not getattr(product, "is_active", True):
            continue
        active_products += 1
        total_value += float(product.cost) * product.stock
        total_retail_value += float(product.price) * product.stock
        if product.stock <= product.min_stock:
            low_stock += 1
        if product.stock == 0:
            out_of_stock += 1

    recent = 0
    for movement in movements:
        created_at = ensure_utc(movement.created_at)
        if created_at is not None and since <= created_at <= now:
            recent += 1

    return InventoryStats(
        total_products=total_products,
        active_products=active_products,
        total_categories=total_categories,
        total_value=total_value,
        total_retail_value=total_retail_value,
        low_stock_products=low_stock,
        out_of_stock_products=out_of_stock,
        recent_movements=recent,
    )


def compute_trend(current: InventoryStats, previous: InventoryStats) -> dict[str, TrendEntry]:
    trends = {}
    for field in InventoryStats.model_fields:
        value = getattr(current, field)
        prior = getattr(previous, field)
        change = value - prior
        change_percent = round(change / prior * 100, 2) if prior > 0 else 0
        trends[field] = TrendEntry(value=value, change=change, change_percent=change_percent)
    return trends


def _current_stats(db: Session, now: datetime) -> InventoryStats:
    settings = get_settings()
    window = timedelta(hours=settings.STATS_RECENT_HOURS)
    return compute_stats(
        list_all_products(db),
        list_recent_movements(db, since=now - window),
        now=now,
        total_categories=count_active_categories(db),
        recent_window=window,
    )


def previous_snapshot(db: Session, before: datetime) -> Optional[InventoryStats]:
    """Latest snapshot dated before the calendar day of ``before``, in its own zone."""
    snapshot = db.execute(
        select(InventorySnapshot)
        .where(InventorySnapshot.snapshot_date < before.date())
        .order_by(InventorySnapshot.snapshot_date.desc())
        .limit(1)
    ).scalar_one_or_none()
    if snapshot is None:
        return None
    return InventoryStats.model_validate(snapshot)


def load_inventory_stats(
    db: Session,
    *,
    include_trend: bool = False,
    now: Optional[datetime] = None,
) -> InventoryStatsWithTrend:
    now = ensure_aware(now) or zoned_now(get_settings().SNAPSHOT_TZ)
    current = _current_stats(db, ensure_utc(now))
    trends = {}
    if include_trend:
        previous = previous_snapshot(db, now)
        if previous is not None:
            trends = compute_trend(current, previous)
    return InventoryStatsWithTrend(**current.model_dump(), trends=trends)


def record_snapshot(db: Session, *, now: Optional[datetime] = None) -> InventorySnapshot:
    """Persist today's stats; re-running on the same date overwrites that row.

    The row is dated by the calendar day of ``now`` in its own zone, so a
    local 23:55 run is filed under the local day.
    """
    now = ensure_aware(now) or zoned_now(get_settings().SNAPSHOT_TZ)
    snapshot_date = now.date()
    stats = _current_stats(db, ensure_utc(now))
    try:
        snapshot = db.execute(
            select(InventorySnapshot).where(InventorySnapshot.snapshot_date == snapshot_date)
        ).scalar_one_or_none()
        if snapshot is None:
            snapshot = InventorySnapshot(snapshot_date=snapshot_date)
            db.add(snapshot)
        for field, value in stats.model_dump().items():
            setattr(snapshot, field, value)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    logger.info(
        "Recorded inventory snapshot for %s",
        snapshot.snapshot_date,
        extra={"active_products": stats.active_products},
    )
    return snapshot


__all__ = [
    "compute_stats",
    "compute_trend",
    "load_inventory_stats",
    "previous_snapshot",
    "record_snapshot",
]
