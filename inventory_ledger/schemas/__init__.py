from inventory_ledger.schemas.alert import StockAlert
from inventory_ledger.schemas.movement import CreateStockMovementInput, StockMovementRead
from inventory_ledger.schemas.product import (
    ProductCreate,
    ProductRead,
    ProductStockView,
    ProductUpdate,
)
from inventory_ledger.schemas.result import ActionResult
from inventory_ledger.schemas.stats import InventoryStats, InventoryStatsWithTrend, TrendEntry

__all__ = [
    "ActionResult",
    "CreateStockMovementInput",
    "InventoryStats",
    "InventoryStatsWithTrend",
    "ProductCreate",
    "ProductRead",
    "ProductStockView",
    "ProductUpdate",
    "StockAlert",
    "StockMovementRead",
    "TrendEntry",
]
