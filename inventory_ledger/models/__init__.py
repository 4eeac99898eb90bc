import importlib

from inventory_ledger.models.category import Category
from inventory_ledger.models.immutability import register_immutability_listeners
from inventory_ledger.models.inventory_snapshot import InventorySnapshot
from inventory_ledger.models.product import Product
from inventory_ledger.models.stock_movement import StockMovement


def import_all_models() -> None:
    for module_name in (
        "inventory_ledger.models.category",
        "inventory_ledger.models.inventory_snapshot",
        "inventory_ledger.models.product",
        "inventory_ledger.models.stock_movement",
    ):
        importlib.import_module(module_name)


register_immutability_listeners()


__all__ = [
    "Category",
    "InventorySnapshot",
    "Product",
    "StockMovement",
    "import_all_models",
    "register_immutability_listeners",
]
