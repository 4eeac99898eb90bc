"""Module boundary for inventory operations.

Every function here authorizes the actor, validates the input shape, calls
into the core and returns an ``ActionResult``. No exception escapes: typed
inventory errors keep their code, anything else is logged and reported as
``INTERNAL_ERROR``.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from inventory_ledger.core.constants import (
    ADD_STOCK_MOVEMENT,
    CREATE_PRODUCT,
    DEACTIVATE_PRODUCT,
    RECORD_SNAPSHOT,
    UPDATE_PRODUCT,
    VIEW_INVENTORY,
)
from inventory_ledger.core.errors import InventoryError, ValidationError
from inventory_ledger.core.security import Actor, authorize
from inventory_ledger.schemas.movement import CreateStockMovementInput, StockMovementRead
from inventory_ledger.schemas.product import ProductCreate, ProductRead, ProductUpdate
from inventory_ledger.schemas.result import ActionResult
from inventory_ledger.schemas.stats import InventoryStats
from inventory_ledger.services import product_service
from inventory_ledger.services.alert_service import load_stock_alerts
from inventory_ledger.services.inventory_queries import list_recent_movements
from inventory_ledger.services.ledger_service import apply_movement
from inventory_ledger.services.stats_service import load_inventory_stats, record_snapshot

logger = logging.getLogger(__name__)


def _error_details(exc: PydanticValidationError) -> list[dict]:
    return [
        {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]


def parse_input(model_cls, raw):
    if isinstance(raw, model_cls):
        return raw
    try:
        return model_cls.model_validate(raw)
    except PydanticValidationError as exc:
        raise ValidationError(
            "{} validation failed".format(model_cls.__name__),
            _error_details(exc),
        ) from exc


def run_action(action: str, actor: Optional[Actor], func: Callable[[], object]) -> ActionResult:
    try:
        authorize(actor, action)
        return ActionResult.ok(func())
    except ValidationError as exc:
        return ActionResult.fail(exc.message, exc.code, exc.details)
    except InventoryError as exc:
        return ActionResult.fail(exc.message, exc.code)
    except SQLAlchemyError:
        logger.exception("Persistence failure during %s", action)
        return ActionResult.fail("Storage failure, please retry", "PERSISTENCE_ERROR")
    except Exception:
        logger.exception("Unexpected failure during %s", action)
        return ActionResult.fail("Unexpected error", "INTERNAL_ERROR")


def add_stock_movement(db: Session, raw_input, actor: Optional[Actor], *, metrics=None) -> ActionResult:
    def _apply():
        payload = parse_input(CreateStockMovementInput, raw_input)
        movement = apply_movement(db, payload, actor.id, metrics=metrics)
        return StockMovementRead.model_validate(movement)

    return run_action(ADD_STOCK_MOVEMENT, actor, _apply)


def list_movements(
    db: Session,
    actor: Optional[Actor],
    *,
    product_id: Optional[int] = None,
    since: Optional[datetime] = None,
    limit: int = 100,
) -> ActionResult:
    def _list():
        movements = list_recent_movements(db, product_id=product_id, since=since, limit=limit)
        return [StockMovementRead.model_validate(movement) for movement in movements]

    return run_action(VIEW_INVENTORY, actor, _list)


def get_stock_alerts(db: Session, actor: Optional[Actor]) -> ActionResult:
    return run_action(VIEW_INVENTORY, actor, lambda: load_stock_alerts(db))


def get_inventory_stats(db: Session, actor: Optional[Actor], *, include_trend: bool = False) -> ActionResult:
    return run_action(
        VIEW_INVENTORY,
        actor,
        lambda: load_inventory_stats(db, include_trend=include_trend),
    )


def take_stats_snapshot(db: Session, actor: Optional[Actor]) -> ActionResult:
    return run_action(
        RECORD_SNAPSHOT,
        actor,
        lambda: InventoryStats.model_validate(record_snapshot(db)),
    )


def create_product(db: Session, raw_input, actor: Optional[Actor], *, metrics=None) -> ActionResult:
    def _create():
        payload = parse_input(ProductCreate, raw_input)
        product = product_service.create_product(db, payload, actor.id, metrics=metrics)
        return ProductRead.model_validate(product)

    return run_action(CREATE_PRODUCT, actor, _create)


def update_product(db: Session, product_id: int, raw_input, actor: Optional[Actor], *, metrics=None) -> ActionResult:
    def _update():
        payload = parse_input(ProductUpdate, raw_input)
        product = product_service.update_product(db, product_id, payload, actor.id, metrics=metrics)
        return ProductRead.model_validate(product)

    return run_action(UPDATE_PRODUCT, actor, _update)


def deactivate_product(db: Session, product_id: int, actor: Optional[Actor]) -> ActionResult:
    return run_action(
        DEACTIVATE_PRODUCT,
        actor,
        lambda: ProductRead.model_validate(
            product_service.deactivate_product(db, product_id, actor.id)
        ),
    )


def get_product_stock(db: Session, product_id: int, actor: Optional[Actor]) -> ActionResult:
    return run_action(
        VIEW_INVENTORY,
        actor,
        lambda: product_service.product_stock_view(db, product_id),
    )


__all__ = [
    "add_stock_movement",
    "create_product",
    "deactivate_product",
    "get_inventory_stats",
    "get_product_stock",
    "get_stock_alerts",
    "list_movements",
    "parse_input",
    "run_action",
    "take_stats_snapshot",
    "update_product",
]
