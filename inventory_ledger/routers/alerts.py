from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from inventory_ledger.core.security import Actor
from inventory_ledger.dependencies import get_actor, get_db
from inventory_ledger.routers.responses import to_response
from inventory_ledger.services import inventory_actions

router = APIRouter(prefix="/inventory/alerts", tags=["Alerts"])


@router.get("")
def stock_alerts(
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(get_actor),
):
    return to_response(inventory_actions.get_stock_alerts(db, actor))


__all__ = ["router"]
