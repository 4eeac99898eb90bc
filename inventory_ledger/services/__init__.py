from inventory_ledger.services.alert_service import build_alerts, load_stock_alerts
from inventory_ledger.services.ledger_service import apply_movement, record_stock_correction
from inventory_ledger.services.stats_service import (
    compute_stats,
    compute_trend,
    load_inventory_stats,
    record_snapshot,
)

__all__ = [
    "apply_movement",
    "build_alerts",
    "compute_stats",
    "compute_trend",
    "load_inventory_stats",
    "load_stock_alerts",
    "record_snapshot",
    "record_stock_correction",
]
