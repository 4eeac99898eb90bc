import re
from types import SimpleNamespace

from inventory_ledger.core.constants import (
    MAX_IMAGES_PER_PRODUCT,
    MAX_TAGS_PER_PRODUCT,
    MIN_ADJUSTMENT_REASON_LENGTH,
    MOVEMENT_ADJUSTMENT,
    MOVEMENT_IN,
    MOVEMENT_OUT,
    SKU_PATTERN,
)
from inventory_ledger.core.errors import BusinessRuleError

_SKU_RE = re.compile(SKU_PATTERN)

_PRODUCT_RULE_FIELDS = ("sku", "price", "cost", "stock", "min_stock", "max_stock", "images", "tags")


def _check_movement(payload, current_stock):
    movement_type = payload.type
    quantity = payload.quantity

    if movement_type in (MOVEMENT_IN, MOVEMENT_OUT) and quantity <= 0:
        raise BusinessRuleError("Movement quantity must be positive", "INVALID_QUANTITY")
    if movement_type == MOVEMENT_ADJUSTMENT and quantity == 0:
        raise BusinessRuleError("Adjustment quantity cannot be zero", "INVALID_QUANTITY")

    if movement_type == MOVEMENT_OUT and quantity > current_stock:
        raise BusinessRuleError(
            "Cannot remove {} unit(s); only {} in stock".format(quantity, current_stock),
            "INSUFFICIENT_STOCK",
        )

    if movement_type == MOVEMENT_ADJUSTMENT:
        reason = (payload.reason or "").strip()
        if len(reason) < MIN_ADJUSTMENT_REASON_LENGTH:
            raise BusinessRuleError(
                "Adjustment movements require a detailed reason (min {} characters)".format(
                    MIN_ADJUSTMENT_REASON_LENGTH
                ),
                "INSUFFICIENT_ADJUSTMENT_REASON",
            )
        if current_stock + quantity < 0:
            raise BusinessRuleError(
                "Adjustment of {} would leave stock at {}".format(quantity, current_stock + quantity),
                "NEGATIVE_ADJUSTMENT",
            )


def _check_product(values):
    if values.price <= values.cost:
        raise BusinessRuleError("Price must be greater than cost", "PRICE_COST_VALIDATION")

    if values.stock is not None and values.stock < 0:
        raise BusinessRuleError("Stock cannot be negative", "NEGATIVE_STOCK")

    if values.max_stock is not None and values.min_stock > values.max_stock:
        raise BusinessRuleError(
            "Minimum stock cannot be greater than maximum stock",
            "MIN_MAX_STOCK_VALIDATION",
        )

    if not _SKU_RE.fullmatch(values.sku or ""):
        raise BusinessRuleError(
            "SKU must be at least 3 characters of letters, numbers, hyphens or underscores",
            "INVALID_SKU_FORMAT",
        )

    if values.images and len(values.images) > MAX_IMAGES_PER_PRODUCT:
        raise BusinessRuleError(
            "Maximum {} images allowed per product".format(MAX_IMAGES_PER_PRODUCT),
            "IMAGE_LIMIT_EXCEEDED",
        )

    if values.tags and len(values.tags) > MAX_TAGS_PER_PRODUCT:
        raise BusinessRuleError(
            "Maximum {} tags allowed per product".format(MAX_TAGS_PER_PRODUCT),
            "TAG_LIMIT_EXCEEDED",
        )


def _run(validator, check, metrics, *args):
    if metrics is not None:
        metrics.record_validation(validator)
    try:
        check(*args)
    except BusinessRuleError as exc:
        if metrics is not None:
            metrics.record_error(validator, exc.code)
        raise


def validate_movement(payload, current_stock, *, metrics=None):
    """Check a proposed movement against the product's current stock.

    Raises ``BusinessRuleError`` on the first violated rule. TRANSFER has no
    rule here; the ledger refuses it separately.
    """
    _run("stock_movement", _check_movement, metrics, payload, current_stock)


def validate_product_rules(payload, *, metrics=None):
    values = SimpleNamespace(**{field: getattr(payload, field, None) for field in _PRODUCT_RULE_FIELDS})
    _run("product", _check_product, metrics, values)


def validate_product_update_rules(changes, existing, *, metrics=None):
    """Re-check product rules on the existing product with ``changes`` applied."""
    merged = {field: getattr(existing, field, None) for field in _PRODUCT_RULE_FIELDS}
    merged.update({key: value for key, value in changes.items() if key in merged})
    _run("product_update", _check_product, metrics, SimpleNamespace(**merged))


__all__ = ["validate_movement", "validate_product_rules", "validate_product_update_rules"]
