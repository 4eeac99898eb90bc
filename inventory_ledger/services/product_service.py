import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from inventory_ledger.config import get_settings
from inventory_ledger.core.business_rules import (
    validate_product_rules,
    validate_product_update_rules,
)
from inventory_ledger.core.constants import MOVEMENT_IN
from inventory_ledger.core.dates import utc_now
from inventory_ledger.core.errors import (
    BusinessRuleError,
    ConcurrencyConflictError,
    InventoryError,
    NotFoundError,
    PersistenceError,
)
from inventory_ledger.core.stock_rules import classify_stock, stock_percentage
from inventory_ledger.models.category import Category
from inventory_ledger.models.product import Product
from inventory_ledger.models.stock_movement import StockMovement
from inventory_ledger.schemas.product import ProductCreate, ProductStockView, ProductUpdate
from inventory_ledger.services.inventory_queries import get_product_stock, lock_product
from inventory_ledger.services.ledger_service import record_stock_correction

logger = logging.getLogger(__name__)

OPENING_STOCK_REASON = "Opening stock recorded at product creation"
STOCK_EDIT_REASON = "Stock corrected through product edit"


def _ensure_category(db: Session, category_id: Optional[int]) -> None:
    if category_id is None:
        return
    if db.get(Category, category_id) is None:
        raise NotFoundError("Category {} not found".format(category_id))


def _ensure_unique_sku(db: Session, sku: str, product_id: Optional[int] = None) -> None:
    stmt = select(Product.id).where(Product.sku == sku)
    if product_id is not None:
        stmt = stmt.where(Product.id != product_id)
    if db.execute(stmt.limit(1)).first() is not None:
        raise BusinessRuleError("SKU {} is already in use".format(sku), "DUPLICATE_SKU")


def _commit(db: Session, product_id=None) -> None:
    try:
        db.commit()
    except StaleDataError as exc:
        db.rollback()
        raise ConcurrencyConflictError(product_id, 1) from exc
    except IntegrityError as exc:
        db.rollback()
        raise BusinessRuleError("Product violates a uniqueness or integrity constraint", "INTEGRITY_VIOLATION") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Product write failed", extra={"product_id": product_id})
        raise PersistenceError("Product write failed") from exc


def create_product(
    db: Session,
    payload: ProductCreate,
    actor_id: str,
    *,
    now: Optional[datetime] = None,
    metrics=None,
) -> Product:
    """Create a product; a positive opening stock is booked as an IN movement."""
    validate_product_rules(payload, metrics=metrics)
    try:
        _ensure_category(db, payload.category_id)
        _ensure_unique_sku(db, payload.sku)

        values = payload.model_dump(exclude={"stock"})
        product = Product(**values, stock=payload.stock)
        db.add(product)
        db.flush()

        if payload.stock > 0:
            db.add(
                StockMovement(
                    product_id=product.id,
                    type=MOVEMENT_IN,
                    quantity=payload.stock,
                    previous_stock=0,
                    new_stock=payload.stock,
                    reason=OPENING_STOCK_REASON,
                    user_id=actor_id,
                    created_at=now or utc_now(),
                )
            )
    except InventoryError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Product write failed", extra={"sku": payload.sku})
        raise PersistenceError("Product write failed") from exc

    _commit(db, product.id)
    logger.info(
        "Created product %s (%s) with opening stock %s",
        product.id,
        product.sku,
        product.stock,
        extra={"product_id": product.id, "actor_id": actor_id},
    )
    return product


def update_product(
    db: Session,
    product_id: int,
    payload: ProductUpdate,
    actor_id: str,
    *,
    now: Optional[datetime] = None,
    metrics=None,
) -> Product:
    """Apply a partial update.

    A changed ``stock`` is never written directly: it becomes a corrective
    ADJUSTMENT movement in the same transaction.
    """
    changes = payload.model_dump(exclude_unset=True)
    stock_reason = changes.pop("stock_reason", None) or STOCK_EDIT_REASON
    new_stock = changes.pop("stock", None)

    try:
        product = lock_product(db, product_id)
        validate_product_update_rules(
            dict(changes, stock=new_stock if new_stock is not None else product.stock),
            product,
            metrics=metrics,
        )
        if "category_id" in changes:
            _ensure_category(db, changes["category_id"])
        if "sku" in changes:
            _ensure_unique_sku(db, changes["sku"], product.id)

        for field, value in changes.items():
            setattr(product, field, value)

        if new_stock is not None:
            record_stock_correction(db, product, new_stock, actor_id, stock_reason, now=now)
        else:
            db.flush()
    except InventoryError:
        db.rollback()
        raise
    except StaleDataError as exc:
        db.rollback()
        raise ConcurrencyConflictError(product_id, 1) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Product write failed", extra={"product_id": product_id})
        raise PersistenceError("Product write failed") from exc

    _commit(db, product_id)
    logger.info(
        "Updated product %s fields=%s",
        product_id,
        ",".join(sorted(changes)) or "-",
        extra={"product_id": product_id, "actor_id": actor_id},
    )
    return product


def deactivate_product(db: Session, product_id: int, actor_id: str) -> Product:
    try:
        product = lock_product(db, product_id)
        product.is_active = False
        db.flush()
    except InventoryError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Product write failed", extra={"product_id": product_id})
        raise PersistenceError("Product write failed") from exc
    _commit(db, product_id)
    logger.info(
        "Deactivated product %s",
        product_id,
        extra={"product_id": product_id, "actor_id": actor_id},
    )
    return product


def product_stock_view(db: Session, product_id: int) -> ProductStockView:
    levels = get_product_stock(db, product_id)
    threshold = get_settings().INVENTORY_CRITICAL_STOCK_THRESHOLD
    return ProductStockView(
        product_id=product_id,
        stock_status=classify_stock(levels["stock"], levels["min_stock"], threshold),
        stock_percentage=stock_percentage(levels["stock"], levels["min_stock"], levels["max_stock"]),
        **levels,
    )


__all__ = ["create_product", "deactivate_product", "product_stock_view", "update_product"]
