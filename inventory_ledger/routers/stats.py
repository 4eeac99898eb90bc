from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from inventory_ledger.core.security import Actor
from inventory_ledger.dependencies import get_actor, get_db
from inventory_ledger.routers.responses import to_response
from inventory_ledger.services import inventory_actions

router = APIRouter(prefix="/inventory/stats", tags=["Stats"])


@router.get("")
def inventory_stats(
    trend: bool = Query(False, description="Include deltas against the last snapshot"),
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(get_actor),
):
    return to_response(inventory_actions.get_inventory_stats(db, actor, include_trend=trend))


@router.post("/snapshot")
def record_stats_snapshot(
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(get_actor),
):
    return to_response(inventory_actions.take_stats_snapshot(db, actor), success_status=201)


__all__ = ["router"]
