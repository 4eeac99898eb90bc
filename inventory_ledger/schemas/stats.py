from typing import Dict

from pydantic import BaseModel, ConfigDict


class InventoryStats(BaseModel):
    total_products: int = 0
    active_products: int = 0
    total_categories: int = 0
    total_value: float = 0.0
    total_retail_value: float = 0.0
    low_stock_products: int = 0
    out_of_stock_products: int = 0
    recent_movements: int = 0

    model_config = ConfigDict(from_attributes=True)


class TrendEntry(BaseModel):
    value: float
    change: float
    change_percent: float


class InventoryStatsWithTrend(InventoryStats):
    trends: Dict[str, TrendEntry] = {}
