from inventory_ledger.routers.alerts import router as alerts_router
from inventory_ledger.routers.health import router as health_router
from inventory_ledger.routers.movements import router as movements_router
from inventory_ledger.routers.products import router as products_router
from inventory_ledger.routers.stats import router as stats_router

__all__ = [
    "alerts_router",
    "health_router",
    "movements_router",
    "products_router",
    "stats_router",
]
