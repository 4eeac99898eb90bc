import logging
from typing import Optional

from fastapi import Header, HTTPException, status

from inventory_ledger.config import get_settings
from inventory_ledger.core.errors import AuthorizationError
from inventory_ledger.core.metrics import ValidationMetrics
from inventory_ledger.core.security import Actor, authenticate_request
from inventory_ledger.database.session import get_db

logger = logging.getLogger(__name__)

_API_KEY_HEADER = get_settings().API_KEY_HEADER


def get_actor(
    api_key: Optional[str] = Header(None, alias=_API_KEY_HEADER),
    api_key_alt: Optional[str] = Header(None, alias="api-key"),
    authorization: Optional[str] = Header(None),
) -> Optional[Actor]:
    api_key_value = api_key or api_key_alt
    try:
        return authenticate_request(api_key=api_key_value, authorization=authorization)
    except AuthorizationError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=exc.message) from exc


def get_validation_metrics():
    """Per-request validation counters, logged once the request is done."""
    metrics = ValidationMetrics()
    yield metrics
    snapshot = metrics.snapshot()
    if snapshot["validations"]:
        logger.info(
            "Validation metrics: %d check(s), %d failure(s)",
            sum(snapshot["validations"].values()),
            sum(snapshot["errors"].values()),
            extra=snapshot,
        )


__all__ = ["get_actor", "get_db", "get_validation_metrics"]
