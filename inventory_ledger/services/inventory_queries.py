from datetime import datetime
from typing import Iterable, Optional, cast

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from inventory_ledger.core.errors import ProductNotFoundError
from inventory_ledger.models.category import Category
from inventory_ledger.models.product import Product
from inventory_ledger.models.stock_movement import StockMovement


def get_product(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return product


def get_product_stock(db: Session, product_id: int) -> dict:
    row = db.execute(
        select(
            Product.stock,
            Product.min_stock,
            Product.max_stock,
            Product.is_active,
        ).where(Product.id == product_id)
    ).first()
    if row is None:
        raise ProductNotFoundError(product_id)
    return {
        "stock": row.stock,
        "min_stock": row.min_stock,
        "max_stock": row.max_stock,
        "is_active": row.is_active,
    }


def lock_product(db: Session, product_id: int) -> Product:
    """Load the product row for a read-modify-write, holding a row lock where supported."""
    product = db.execute(
        select(Product)
        .where(Product.id == product_id)
        .with_for_update(of=Product)
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()
    if product is None:
        raise ProductNotFoundError(product_id)
    return product


def append_movement_and_update_stock(
    db: Session,
    product: Product,
    movement: StockMovement,
) -> StockMovement:
    """Stage the movement row and the stock update as one unit of work.

    The caller owns the transaction; nothing is committed here. The
    product's version column turns the UPDATE into a compare-and-set, so a
    concurrent writer surfaces as ``StaleDataError`` on flush.
    """
    db.add(movement)
    product.stock = movement.new_stock
    db.flush()
    return movement


def list_recent_movements(
    db: Session,
    product_id: Optional[int] = None,
    since: Optional[datetime] = None,
    limit: Optional[int] = None,
) -> list[StockMovement]:
    stmt = select(StockMovement)
    if product_id is not None:
        stmt = stmt.where(StockMovement.product_id == product_id)
    if since is not None:
        stmt = stmt.where(StockMovement.created_at >= since)
    stmt = stmt.order_by(StockMovement.created_at.desc(), StockMovement.id.desc())
    if limit is not None:
        stmt = stmt.limit(limit)
    return cast(list[StockMovement], list(db.execute(stmt).scalars().all()))


def list_active_products(
    db: Session,
    category_id: Optional[int] = None,
    low_stock_only: bool = False,
    critical_threshold: int = 0,
) -> list[Product]:
    stmt = select(Product).where(Product.is_active.is_(True))
    if category_id is not None:
        stmt = stmt.where(Product.category_id == category_id)
    if low_stock_only:
        stmt = stmt.where(
            (Product.stock <= Product.min_stock) | (Product.stock <= critical_threshold)
        )
    stmt = stmt.order_by(Product.id)
    return cast(list[Product], list(db.execute(stmt).unique().scalars().all()))


def list_all_products(db: Session) -> list[Product]:
    stmt = select(Product).order_by(Product.id)
    return cast(list[Product], list(db.execute(stmt).unique().scalars().all()))


def last_movement_times(db: Session, product_ids: Iterable[int]) -> dict[int, datetime]:
    product_ids = list(product_ids)
    if not product_ids:
        return {}
    rows = db.execute(
        select(StockMovement.product_id, func.max(StockMovement.created_at))
        .where(StockMovement.product_id.in_(product_ids))
        .group_by(StockMovement.product_id)
    ).all()
    return {product_id: created_at for product_id, created_at in rows}


def count_active_categories(db: Session) -> int:
    return db.execute(
        select(func.count(Category.id)).where(Category.is_active.is_(True))
    ).scalar_one()


__all__ = [
    "append_movement_and_update_stock",
    "count_active_categories",
    "get_product",
    "get_product_stock",
    "last_movement_times",
    "list_active_products",
    "list_all_products",
    "lock_product",
    "list_recent_movements",
]
