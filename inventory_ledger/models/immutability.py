"""ORM guards that keep the movement ledger append-only.

A persisted ``StockMovement`` is the audit trail for the product's stock, so
any UPDATE or DELETE issued through the ORM is refused before SQL is sent.
Corrections are recorded as new ADJUSTMENT movements instead.
"""

import logging

from sqlalchemy import event

from inventory_ledger.core.errors import ImmutabilityViolationError
from inventory_ledger.models.stock_movement import StockMovement

logger = logging.getLogger(__name__)


def _block(operation: str, target) -> None:
    logger.error(
        "Blocked %s of stock movement %s",
        operation,
        target.id,
        extra={"movement_id": target.id, "product_id": target.product_id},
    )
    raise ImmutabilityViolationError(
        entity_type="StockMovement",
        entity_id=target.id,
        reason="stock movements are immutable ({} refused)".format(operation),
    )


def _check_movement_update(_mapper, _connection, target):
    _block("UPDATE", target)


def _check_movement_delete(_mapper, _connection, target):
    _block("DELETE", target)


def register_immutability_listeners() -> None:
    if not event.contains(StockMovement, "before_update", _check_movement_update):
        event.listen(StockMovement, "before_update", _check_movement_update)
    if not event.contains(StockMovement, "before_delete", _check_movement_delete):
        event.listen(StockMovement, "before_delete", _check_movement_delete)


__all__ = ["register_immutability_listeners"]
