from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from inventory_ledger.core.metrics import ValidationMetrics
from inventory_ledger.core.security import Actor
from inventory_ledger.dependencies import get_actor, get_db, get_validation_metrics
from inventory_ledger.routers.responses import to_response
from inventory_ledger.services import inventory_actions

router = APIRouter(prefix="/inventory/movements", tags=["Stock Movements"])


@router.post("")
def create_movement(
    payload: dict = Body(...),
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(get_actor),
    metrics: ValidationMetrics = Depends(get_validation_metrics),
):
    result = inventory_actions.add_stock_movement(db, payload, actor, metrics=metrics)
    return to_response(result, success_status=201)


@router.get("")
def list_movements(
    product_id: Optional[int] = Query(None, description="Only movements of this product"),
    since: Optional[datetime] = Query(None, description="Only movements at or after this time"),
    limit: int = Query(100, ge=1, le=1000, description="Max records to return"),
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(get_actor),
):
    result = inventory_actions.list_movements(
        db,
        actor,
        product_id=product_id,
        since=since,
        limit=limit,
    )
    return to_response(result)


__all__ = ["router"]
