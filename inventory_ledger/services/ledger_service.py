"""The stock ledger: the only code path that changes ``Product.stock``.

Each call appends one immutable ``StockMovement`` and moves the product's
materialized stock to the movement's ``new_stock`` in a single transaction.
Writers to the same product are serialized twice over: a ``FOR UPDATE`` row
lock where the engine supports one, and the product's ORM version column,
which turns the stock UPDATE into a compare-and-set. A lost race shows up as
``StaleDataError`` and the whole read-validate-write cycle is retried.
"""

import logging
import time
from datetime import datetime
from typing import Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from inventory_ledger.config import get_settings
from inventory_ledger.core.business_rules import validate_movement
from inventory_ledger.core.constants import (
    MOVEMENT_ADJUSTMENT,
    MOVEMENT_IN,
    MOVEMENT_OUT,
    MOVEMENT_TRANSFER,
)
from inventory_ledger.core.dates import utc_now
from inventory_ledger.core.errors import (
    BusinessRuleError,
    ConcurrencyConflictError,
    InventoryError,
    PersistenceError,
    TransactionTimeoutError,
)
from inventory_ledger.models.product import Product
from inventory_ledger.models.stock_movement import StockMovement
from inventory_ledger.schemas.movement import CreateStockMovementInput
from inventory_ledger.services.inventory_queries import (
    append_movement_and_update_stock,
    lock_product,
)

logger = logging.getLogger(__name__)


def compute_new_stock(movement_type: str, previous_stock: int, quantity: int) -> int:
    if movement_type == MOVEMENT_IN:
        return previous_stock + quantity
    if movement_type == MOVEMENT_OUT:
        return previous_stock - quantity
    if movement_type == MOVEMENT_ADJUSTMENT:
        return previous_stock + quantity
    if movement_type == MOVEMENT_TRANSFER:
        # Reserved: there is no location model to transfer between.
        raise BusinessRuleError(
            "TRANSFER movements are reserved and have no stock effect yet",
            "TRANSFER_NOT_SUPPORTED",
        )
    raise BusinessRuleError(
        "Unknown movement type: {}".format(movement_type),
        "INVALID_MOVEMENT_TYPE",
    )


def _set_statement_timeout(db: Session, timeout_seconds: float) -> None:
    if db.get_bind().dialect.name != "postgresql":
        return
    # SET LOCAL does not accept bind parameters; the value is an int we built.
    db.execute(text("SET LOCAL statement_timeout = {}".format(int(timeout_seconds * 1000))))


def _is_statement_timeout(exc: SQLAlchemyError) -> bool:
    orig = getattr(exc, "orig", None)
    # 57014 is PostgreSQL's query_canceled (psycopg2: pgcode, psycopg 3: sqlstate).
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    return code == "57014"


def _apply_once(
    db: Session,
    payload: CreateStockMovementInput,
    actor_id: str,
    now: Optional[datetime],
    deadline: float,
    timeout_seconds: float,
    metrics,
) -> StockMovement:
    _set_statement_timeout(db, timeout_seconds)
    product = lock_product(db, payload.product_id)
    if not product.is_active:
        raise BusinessRuleError(
            "Product {} is inactive".format(product.id),
            "INACTIVE_PRODUCT",
        )

    previous_stock = product.stock
    validate_movement(payload, previous_stock, metrics=metrics)
    new_stock = compute_new_stock(payload.type, previous_stock, payload.quantity)

    movement = StockMovement(
        product_id=product.id,
        type=payload.type,
        quantity=payload.quantity,
        previous_stock=previous_stock,
        new_stock=new_stock,
        reason=payload.reason,
        reference=payload.reference,
        user_id=actor_id,
        created_at=now or utc_now(),
    )
    append_movement_and_update_stock(db, product, movement)

    if time.monotonic() > deadline:
        raise TransactionTimeoutError(timeout_seconds)
    return movement


def apply_movement(
    db: Session,
    payload: CreateStockMovementInput,
    actor_id: str,
    *,
    now: Optional[datetime] = None,
    max_retries: Optional[int] = None,
    timeout_seconds: Optional[float] = None,
    metrics=None,
) -> StockMovement:
    """Validate and commit one movement; on any failure nothing is persisted."""
    settings = get_settings()
    if max_retries is None:
        max_retries = settings.LEDGER_MAX_RETRIES
    if timeout_seconds is None:
        timeout_seconds = settings.LEDGER_TRANSACTION_TIMEOUT_SECONDS
    attempts = max(1, int(max_retries))

    log_context = {"product_id": payload.product_id, "actor_id": actor_id}
    for attempt in range(1, attempts + 1):
        deadline = time.monotonic() + timeout_seconds
        try:
            movement = _apply_once(
                db, payload, actor_id, now, deadline, timeout_seconds, metrics
            )
            db.commit()
        except StaleDataError:
            db.rollback()
            logger.warning(
                "Concurrent stock update on product %s; retrying (attempt %d/%d)",
                payload.product_id,
                attempt,
                attempts,
                extra=dict(log_context, attempt=attempt),
            )
            continue
        except BusinessRuleError as exc:
            db.rollback()
            logger.info(
                "Rejected %s movement on product %s: %s",
                payload.type,
                payload.product_id,
                exc.code,
                extra=dict(log_context, code=exc.code),
            )
            raise
        except InventoryError:
            db.rollback()
            raise
        except SQLAlchemyError as exc:
            db.rollback()
            if _is_statement_timeout(exc):
                logger.error(
                    "Stock transaction for product %s hit the statement timeout",
                    payload.product_id,
                    extra=log_context,
                )
                raise TransactionTimeoutError(timeout_seconds) from exc
            logger.exception(
                "Stock transaction failed for product %s",
                payload.product_id,
                extra=log_context,
            )
            raise PersistenceError("Stock transaction failed") from exc

        logger.info(
            "Recorded %s movement %s on product %s: %s -> %s",
            movement.type,
            movement.id,
            movement.product_id,
            movement.previous_stock,
            movement.new_stock,
            extra=dict(log_context, movement_id=movement.id),
        )
        return movement

    raise ConcurrencyConflictError(payload.product_id, attempts)


def record_stock_correction(
    db: Session,
    product: Product,
    new_stock: int,
    actor_id: str,
    reason: str,
    *,
    reference: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Optional[StockMovement]:
    """Stage a corrective ADJUSTMENT for an edit that sets stock directly.

    Joins the caller's transaction; returns ``None`` when stock is unchanged.
    """
    previous_stock = product.stock or 0
    delta = new_stock - previous_stock
    if delta == 0:
        return None
    payload = CreateStockMovementInput(
        product_id=product.id,
        type=MOVEMENT_ADJUSTMENT,
        quantity=delta,
        reason=reason,
        reference=reference,
    )
    validate_movement(payload, previous_stock)
    movement = StockMovement(
        product_id=product.id,
        type=MOVEMENT_ADJUSTMENT,
        quantity=delta,
        previous_stock=previous_stock,
        new_stock=new_stock,
        reason=payload.reason,
        reference=payload.reference,
        user_id=actor_id,
        created_at=now or utc_now(),
    )
    return append_movement_and_update_stock(db, product, movement)


__all__ = ["apply_movement", "compute_new_stock", "record_stock_correction"]
