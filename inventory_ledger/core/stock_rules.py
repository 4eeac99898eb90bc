from inventory_ledger.core.constants import (
    CRITICAL_STOCK,
    CRITICAL_STOCK_THRESHOLD,
    IN_STOCK,
    LOW_STOCK,
    OUT_OF_STOCK,
)


def classify_stock(stock, min_stock, critical_threshold=CRITICAL_STOCK_THRESHOLD):
    if stock <= 0:
        return OUT_OF_STOCK
    if stock <= critical_threshold:
        return CRITICAL_STOCK
    if stock <= min_stock:
        return LOW_STOCK
    return IN_STOCK


def stock_percentage(stock, min_stock, max_stock=None):
    # Without an explicit maximum, four times the minimum is the reference ceiling.
    ceiling = max_stock if max_stock else (min_stock or 0) * 4
    if ceiling <= 0:
        return 100.0 if stock > 0 else 0.0
    return round(min(100.0, stock / ceiling * 100), 2)


__all__ = ["classify_stock", "stock_percentage"]
