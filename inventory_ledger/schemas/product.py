from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from inventory_ledger.config import get_settings


class ProductBase(BaseModel):
    sku: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    category_id: Optional[int] = None
    price: float
    cost: float
    min_stock: int = Field(default_factory=lambda: get_settings().INVENTORY_DEFAULT_MIN_STOCK, ge=0)
    max_stock: Optional[int] = Field(default=None, ge=0)
    images: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)

    model_config = ConfigDict(str_strip_whitespace=True)


class ProductCreate(ProductBase):
    # Opening balance; recorded as an IN movement when positive.
    stock: int = 0


_NON_NULLABLE_UPDATE_FIELDS = ("sku", "name", "price", "cost", "min_stock", "images", "tags")


class ProductUpdate(BaseModel):
    sku: Optional[str] = Field(default=None, min_length=1, max_length=64)
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    category_id: Optional[int] = None
    price: Optional[float] = None
    cost: Optional[float] = None
    stock: Optional[int] = None
    min_stock: Optional[int] = Field(default=None, ge=0)
    max_stock: Optional[int] = Field(default=None, ge=0)
    images: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    # Reason written on the corrective movement when ``stock`` changes.
    stock_reason: Optional[str] = Field(default=None, min_length=10, max_length=255)

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    @model_validator(mode="after")
    def reject_null_required_fields(self):
        # Omitted fields stay unchanged; explicit null is only valid for
        # nullable columns.
        nulls = [
            field
            for field in _NON_NULLABLE_UPDATE_FIELDS
            if field in self.model_fields_set and getattr(self, field) is None
        ]
        if nulls:
            raise ValueError("{} cannot be null".format(", ".join(nulls)))
        return self


class ProductRead(ProductBase):
    id: int
    stock: int
    is_active: bool
    category_name: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductStockView(BaseModel):
    product_id: int
    stock: int
    min_stock: int
    max_stock: Optional[int] = None
    is_active: bool
    stock_status: str
    stock_percentage: float
