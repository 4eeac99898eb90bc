from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from inventory_ledger.schemas.result import ActionResult

_STATUS_BY_CODE = {
    "VALIDATION_ERROR": 422,
    "FORBIDDEN": 403,
    "NOT_FOUND": 404,
    "PRODUCT_NOT_FOUND": 404,
    "CONCURRENCY_CONFLICT": 409,
    "TRANSACTION_TIMEOUT": 503,
    "PERSISTENCE_ERROR": 503,
    "IMMUTABLE_RECORD": 409,
    "INTERNAL_ERROR": 500,
}


def status_for(result: ActionResult, success_status: int = 200) -> int:
    if result.success:
        return success_status
    # Anything else is a business-rule rejection.
    return _STATUS_BY_CODE.get(result.code, 400)


def to_response(result: ActionResult, success_status: int = 200) -> JSONResponse:
    return JSONResponse(
        status_code=status_for(result, success_status),
        content=jsonable_encoder(result.model_dump(exclude_none=True)),
    )
