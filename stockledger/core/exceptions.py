"""
Domain exceptions for the stock ledger.

Four families matter to callers:
- ValidationError: malformed input, never retried
- NotFoundError: a referenced product, location, transfer or order is missing
- ConflictError: illegal state transition or a concurrent write on a snapshot row
- PersistenceError: storage failure, the transaction was rolled back in full
"""

from decimal import Decimal
from typing import Any


class LedgerError(Exception):
    """Base exception for all ledger errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Validation Exceptions
class ValidationError(LedgerError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class InsufficientStockError(ValidationError):
    """A deduction would take on-hand quantity below zero."""

    def __init__(
        self,
        product_id: int,
        requested: Decimal,
        available: Decimal,
        location_id: int | None = None,
    ):
        super().__init__(
            field="quantity",
            message=(
                f"Insufficient stock for product {product_id}. "
                f"Available: {available}, requested: {requested}"
            ),
            value=requested,
        )
        self.code = "INSUFFICIENT_STOCK"
        self.details.update(
            {
                "product_id": product_id,
                "location_id": location_id,
                "requested": str(requested),
                "available": str(available),
            }
        )


# Not Found Exceptions
class NotFoundError(LedgerError):
    """Referenced entity does not exist."""

    pass


class ProductNotFoundError(NotFoundError):
    """Product not found in the catalog."""

    def __init__(self, product_id: int):
        super().__init__(
            f"Product not found: {product_id}",
            code="PRODUCT_NOT_FOUND",
            details={"product_id": product_id},
        )


class LocationNotFoundError(NotFoundError):
    """Location not found."""

    def __init__(self, location_id: int):
        super().__init__(
            f"Location not found: {location_id}",
            code="LOCATION_NOT_FOUND",
            details={"location_id": location_id},
        )


class TransferNotFoundError(NotFoundError):
    """Stock transfer not found."""

    def __init__(self, transfer_id: int):
        super().__init__(
            f"Stock transfer not found: {transfer_id}",
            code="TRANSFER_NOT_FOUND",
            details={"transfer_id": transfer_id},
        )


class TransferItemNotFoundError(NotFoundError):
    """Item does not belong to the transfer."""

    def __init__(self, transfer_id: int, item_id: int):
        super().__init__(
            f"Transfer item {item_id} not found on transfer {transfer_id}",
            code="TRANSFER_ITEM_NOT_FOUND",
            details={"transfer_id": transfer_id, "item_id": item_id},
        )


class PurchaseOrderNotFoundError(NotFoundError):
    """Purchase order not found."""

    def __init__(self, purchase_order_id: int):
        super().__init__(
            f"Purchase order not found: {purchase_order_id}",
            code="PURCHASE_ORDER_NOT_FOUND",
            details={"purchase_order_id": purchase_order_id},
        )


class PurchaseOrderItemNotFoundError(NotFoundError):
    """Item does not belong to the purchase order."""

    def __init__(self, purchase_order_id: int, item_id: int):
        super().__init__(
            f"Purchase order item {item_id} not found on order {purchase_order_id}",
            code="PURCHASE_ORDER_ITEM_NOT_FOUND",
            details={"purchase_order_id": purchase_order_id, "item_id": item_id},
        )


# Conflict Exceptions
class ConflictError(LedgerError):
    """Operation conflicts with the current state."""

    pass


class InvalidTransitionError(ConflictError):
    """State transition is not allowed from the current status."""

    def __init__(self, entity: str, entity_id: int | None, status: str, action: str):
        super().__init__(
            f"Cannot {action} {entity} {entity_id}: status is '{status}'",
            code="INVALID_TRANSITION",
            details={
                "entity": entity,
                "entity_id": entity_id,
                "status": status,
                "action": action,
            },
        )


class WriteConflictError(ConflictError):
    """Another writer held the snapshot row for longer than the busy timeout."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Concurrent write conflict during {operation}: {error}",
            code="WRITE_CONFLICT",
            details={"operation": operation, "error": error},
        )


# Persistence Exceptions
class PersistenceError(LedgerError):
    """Base exception for storage failures."""

    pass


class DatabaseError(PersistenceError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


class MigrationError(PersistenceError):
    """A schema migration could not be applied; the database was left at the prior version."""

    def __init__(self, version: str, reason: str):
        super().__init__(
            f"Migration v{version} failed: {reason}",
            code="MIGRATION_FAILED",
            details={"version": version, "reason": reason},
        )


class ConfigurationError(LedgerError):
    """Configuration error."""

    pass
