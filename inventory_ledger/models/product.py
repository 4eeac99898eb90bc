from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import relationship

from inventory_ledger.core.constants import DEFAULT_MIN_STOCK, UNCATEGORIZED_LABEL
from inventory_ledger.database.base import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    sku = Column(String(64), nullable=False, unique=True)
    name = Column(String(200), nullable=False)
    description = Column(String)
    category_id = Column(Integer, ForeignKey("categories.id"))

    price = Column(Float, nullable=False)
    cost = Column(Float, nullable=False)

    # Materialized result of the stock_movements ledger; written by the ledger only.
    stock = Column(Integer, nullable=False, default=0)
    min_stock = Column(Integer, nullable=False, default=DEFAULT_MIN_STOCK)
    max_stock = Column(Integer)

    is_active = Column(Boolean, nullable=False, default=True)
    images = Column(JSON, nullable=False, default=list)
    tags = Column(JSON, nullable=False, default=list)

    version = Column(Integer, nullable=False)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    category = relationship("Category", lazy="joined")
    movements = relationship(
        "StockMovement",
        back_populates="product",
        order_by="StockMovement.id",
        passive_deletes="all",
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        Index("idx_products_active_stock", "is_active", "stock"),
    )

    @property
    def category_name(self) -> str:
        if self.category is not None and self.category.name:
            return self.category.name
        return UNCATEGORIZED_LABEL


__all__ = ["Product"]
