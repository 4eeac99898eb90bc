"""Typed errors raised by the inventory core.

Every error carries a stable ``code`` so callers branch on the code rather
than on message text:

    InventoryError
    +-- ValidationError             VALIDATION_ERROR
    +-- BusinessRuleError           per-rule code (INSUFFICIENT_STOCK, ...)
    +-- AuthorizationError          FORBIDDEN
    +-- NotFoundError               NOT_FOUND
    |   +-- ProductNotFoundError    PRODUCT_NOT_FOUND
    +-- ImmutabilityViolationError  IMMUTABLE_RECORD
    +-- PersistenceError            PERSISTENCE_ERROR
        +-- ConcurrencyConflictError  CONCURRENCY_CONFLICT
        +-- TransactionTimeoutError   TRANSACTION_TIMEOUT
"""

from typing import Any, Optional


class InventoryError(Exception):
    code = "INVENTORY_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def __str__(self) -> str:
        return self.message


class ValidationError(InventoryError):
    """Malformed input shape, rejected before any business check."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: Optional[list[dict[str, Any]]] = None):
        super().__init__(message)
        self.details = details or []


class BusinessRuleError(InventoryError):
    """A domain invariant would be violated."""

    def __init__(self, message: str, code: str):
        super().__init__(message, code)


class AuthorizationError(InventoryError):
    code = "FORBIDDEN"


class NotFoundError(InventoryError):
    code = "NOT_FOUND"


class ProductNotFoundError(NotFoundError):
    code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id):
        super().__init__("Product {} not found".format(product_id))
        self.product_id = product_id


class ImmutabilityViolationError(InventoryError):
    code = "IMMUTABLE_RECORD"

    def __init__(self, entity_type: str, entity_id, reason: str):
        super().__init__("{} {}: {}".format(entity_type, entity_id, reason))
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason


class PersistenceError(InventoryError):
    code = "PERSISTENCE_ERROR"


class ConcurrencyConflictError(PersistenceError):
    code = "CONCURRENCY_CONFLICT"

    def __init__(self, product_id, attempts: int):
        super().__init__(
            "Stock for product {} changed concurrently; gave up after {} attempt(s)".format(
                product_id, attempts
            )
        )
        self.product_id = product_id
        self.attempts = attempts


class TransactionTimeoutError(PersistenceError):
    code = "TRANSACTION_TIMEOUT"

    def __init__(self, timeout_seconds: float):
        super().__init__(
            "Stock transaction exceeded {:.1f}s and was rolled back".format(timeout_seconds)
        )
        self.timeout_seconds = timeout_seconds


__all__ = [
    "AuthorizationError",
    "BusinessRuleError",
    "ConcurrencyConflictError",
    "ImmutabilityViolationError",
    "InventoryError",
    "NotFoundError",
    "PersistenceError",
    "ProductNotFoundError",
    "TransactionTimeoutError",
    "ValidationError",
]
