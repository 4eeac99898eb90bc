from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class StockAlert(BaseModel):
    product_id: int
    product_name: str
    product_sku: str
    current_stock: int
    min_stock: int
    status: str
    category: str
    last_movement: Optional[datetime] = None
    urgency_score: int
    priority: int
    priority_label: str
