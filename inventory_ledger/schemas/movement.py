from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from inventory_ledger.core.constants import MAX_MOVEMENT_QUANTITY

MovementType = Literal["IN", "OUT", "ADJUSTMENT", "TRANSFER"]


class CreateStockMovementInput(BaseModel):
    """The only accepted write shape for stock changes."""

    product_id: int
    type: MovementType
    # Signed for ADJUSTMENT; sign rules are business rules, not shape rules.
    quantity: int = Field(ge=-MAX_MOVEMENT_QUANTITY, le=MAX_MOVEMENT_QUANTITY)
    reason: str = Field(min_length=3, max_length=255)
    reference: Optional[str] = Field(default=None, max_length=100)

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")


class StockMovementRead(BaseModel):
    id: int
    product_id: int
    type: str
    quantity: int
    previous_stock: int
    new_stock: int
    reason: str
    reference: Optional[str]
    user_id: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
