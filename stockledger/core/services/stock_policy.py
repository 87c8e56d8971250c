"""Negative-stock rule and projected-quantity warnings shared by the workflows."""

from decimal import Decimal
from enum import Enum

from stockledger.core.entities.inventory import StockStatus
from stockledger.core.exceptions import InsufficientStockError
from stockledger.core.services.stock_status import classify


class StockWarning(str, Enum):
    """Conditions the caller should surface before or after a write."""

    NEGATIVE_STOCK = "negative_stock"
    OUT_OF_STOCK = "out_of_stock"
    LOW_STOCK = "low_stock"


class StockPolicy:
    """Decides whether a deduction may take on-hand quantity below zero."""

    def __init__(self, allow_negative_stock: bool = True) -> None:
        self.allow_negative_stock = allow_negative_stock

    def check(
        self,
        product_id: int,
        current: Decimal,
        delta: Decimal,
        location_id: int | None = None,
    ) -> None:
        """Raise InsufficientStockError for a deduction that ends below zero."""
        if self.allow_negative_stock or delta >= 0:
            return
        if current + delta < 0:
            raise InsufficientStockError(
                product_id=product_id,
                requested=-delta,
                available=current,
                location_id=location_id,
            )

    @staticmethod
    def warnings_for(quantity: Decimal, reorder_level: Decimal) -> list[StockWarning]:
        if quantity < 0:
            return [StockWarning.NEGATIVE_STOCK]
        status = classify(quantity, reorder_level)
        if status is StockStatus.OUT_OF_STOCK:
            return [StockWarning.OUT_OF_STOCK]
        if status is StockStatus.LOW_STOCK:
            return [StockWarning.LOW_STOCK]
        return []
