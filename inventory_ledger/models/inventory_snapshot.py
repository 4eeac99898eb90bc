from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, Float, Integer

from inventory_ledger.database.base import Base


class InventorySnapshot(Base):
    __tablename__ = "inventory_snapshots"

    id = Column(Integer, primary_key=True)
    snapshot_date = Column(Date, nullable=False, unique=True)

    total_products = Column(Integer, nullable=False, default=0)
    active_products = Column(Integer, nullable=False, default=0)
    total_categories = Column(Integer, nullable=False, default=0)
    total_value = Column(Float, nullable=False, default=0.0)
    total_retail_value = Column(Float, nullable=False, default=0.0)
    low_stock_products = Column(Integer, nullable=False, default=0)
    out_of_stock_products = Column(Integer, nullable=False, default=0)
    recent_movements = Column(Integer, nullable=False, default=0)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )


__all__ = ["InventorySnapshot"]
