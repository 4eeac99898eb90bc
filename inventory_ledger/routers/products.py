from typing import Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from inventory_ledger.core.metrics import ValidationMetrics
from inventory_ledger.core.security import Actor
from inventory_ledger.dependencies import get_actor, get_db, get_validation_metrics
from inventory_ledger.routers.responses import to_response
from inventory_ledger.services import inventory_actions

router = APIRouter(prefix="/products", tags=["Products"])


@router.post("")
def create_product(
    payload: dict = Body(...),
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(get_actor),
    metrics: ValidationMetrics = Depends(get_validation_metrics),
):
    result = inventory_actions.create_product(db, payload, actor, metrics=metrics)
    return to_response(result, success_status=201)


@router.patch("/{product_id}")
def update_product(
    product_id: int,
    payload: dict = Body(...),
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(get_actor),
    metrics: ValidationMetrics = Depends(get_validation_metrics),
):
    result = inventory_actions.update_product(db, product_id, payload, actor, metrics=metrics)
    return to_response(result)


@router.delete("/{product_id}")
def deactivate_product(
    product_id: int,
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(get_actor),
):
    return to_response(inventory_actions.deactivate_product(db, product_id, actor))


@router.get("/{product_id}/stock")
def product_stock(
    product_id: int,
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(get_actor),
):
    return to_response(inventory_actions.get_product_stock(db, product_id, actor))


__all__ = ["router"]
