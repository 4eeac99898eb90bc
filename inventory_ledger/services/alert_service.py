from datetime import datetime
from typing import Iterable, Mapping, Optional

from sqlalchemy.orm import Session

from inventory_ledger.config import get_settings
from inventory_ledger.core.constants import (
    CRITICAL_STOCK,
    CRITICAL_STOCK_THRESHOLD,
    IN_STOCK,
    LOW_STOCK,
    OUT_OF_STOCK,
    PRIORITY_HIGH,
    PRIORITY_LABELS,
    PRIORITY_LOW,
    PRIORITY_MEDIUM,
    UNCATEGORIZED_LABEL,
)
from inventory_ledger.core.dates import days_between, ensure_utc, utc_now
from inventory_ledger.core.stock_rules import classify_stock
from inventory_ledger.schemas.alert import StockAlert
from inventory_ledger.services.inventory_queries import (
    last_movement_times,
    list_active_products,
)

_BASE_URGENCY = {
    OUT_OF_STOCK: 10,
    CRITICAL_STOCK: 8,
    LOW_STOCK: 5,
}

_STATUS_PRIORITY = {
    OUT_OF_STOCK: PRIORITY_HIGH,
    CRITICAL_STOCK: PRIORITY_HIGH,
    LOW_STOCK: PRIORITY_MEDIUM,
}

STALE_BONUS = 2
VERY_STALE_BONUS = 3


def _latest_timestamp(entries) -> Optional[datetime]:
    latest = None
    for entry in entries or ():
        value = entry if isinstance(entry, datetime) else getattr(entry, "created_at", None)
        value = ensure_utc(value)
        if value is not None and (latest is None or value > latest):
            latest = value
    return latest


def urgency_score(status, last_movement, now, stale_days=7, very_stale_days=30):
    score = _BASE_URGENCY.get(status, 0)
    if last_movement is None:
        return score
    idle_days = days_between(last_movement, now)
    if idle_days > stale_days:
        score += STALE_BONUS
    if idle_days > very_stale_days:
        score += VERY_STALE_BONUS
    return score


def alert_priority(status) -> int:
    return _STATUS_PRIORITY.get(status, PRIORITY_LOW)


def build_alerts(
    products: Iterable,
    movements_by_product: Mapping,
    *,
    now: Optional[datetime] = None,
    critical_threshold: int = CRITICAL_STOCK_THRESHOLD,
    stale_days: int = 7,
    very_stale_days: int = 30,
) -> list[StockAlert]:
    """Restock alerts for active products, most urgent first.

    ``movements_by_product`` maps a product id to its movements (or bare
    timestamps); only the latest one matters. Ties on urgency go to the
    product with less stock, and otherwise keep input order.
    """
    now = ensure_utc(now) or utc_now()
    movements_by_product = movements_by_product or {}
    alerts = []
    for product in products:
        if not getattr(product, "is_active", True):
            continue
        status = classify_stock(product.stock, product.min_stock, critical_threshold)
        if status == IN_STOCK:
            continue

        last_movement = _latest_timestamp(movements_by_product.get(product.id))
        priority = alert_priority(status)
        alerts.append(
            StockAlert(
                product_id=product.id,
                product_name=product.name,
                product_sku=product.sku,
                current_stock=product.stock,
                min_stock=product.min_stock,
                status=status,
                category=getattr(product, "category_name", None) or UNCATEGORIZED_LABEL,
                last_movement=last_movement,
                urgency_score=urgency_score(
                    status, last_movement, now, stale_days, very_stale_days
                ),
                priority=priority,
                priority_label=PRIORITY_LABELS[priority],
            )
        )

    # sorted() is stable, so equal keys keep input order.
    return sorted(alerts, key=lambda alert: (-alert.urgency_score, alert.current_stock))


def load_stock_alerts(db: Session, *, now: Optional[datetime] = None) -> list[StockAlert]:
    settings = get_settings()
    threshold = settings.INVENTORY_CRITICAL_STOCK_THRESHOLD
    products = list_active_products(db, low_stock_only=True, critical_threshold=threshold)
    last_moves = last_movement_times(db, (product.id for product in products))
    return build_alerts(
        products,
        {product_id: [created_at] for product_id, created_at in last_moves.items()},
        now=now,
        critical_threshold=threshold,
        stale_days=settings.ALERT_STALE_DAYS,
        very_stale_days=settings.ALERT_VERY_STALE_DAYS,
    )


__all__ = ["alert_priority", "build_alerts", "load_stock_alerts", "urgency_score"]
