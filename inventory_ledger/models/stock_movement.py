from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from inventory_ledger.database.base import Base


class StockMovement(Base):
    """Append-only ledger row; see ``models.immutability`` for enforcement."""

    __tablename__ = "stock_movements"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)

    type = Column(String(20), nullable=False)
    # Positive magnitude for IN/OUT, signed delta for ADJUSTMENT.
    quantity = Column(Integer, nullable=False)
    previous_stock = Column(Integer, nullable=False)
    new_stock = Column(Integer, nullable=False)

    reason = Column(String(255), nullable=False)
    reference = Column(String(100))
    user_id = Column(String(120), nullable=False)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    product = relationship("Product", back_populates="movements")

    __table_args__ = (
        Index("idx_movements_product_created", "product_id", "created_at"),
        Index("idx_movements_created", "created_at"),
    )


__all__ = ["StockMovement"]
