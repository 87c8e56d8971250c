"""Tests for the domain exception hierarchy."""

from decimal import Decimal

from stockledger.core.exceptions import (
    ConflictError,
    DatabaseError,
    InsufficientStockError,
    InvalidTransitionError,
    LedgerError,
    MigrationError,
    NotFoundError,
    PersistenceError,
    ProductNotFoundError,
    PurchaseOrderItemNotFoundError,
    TransferItemNotFoundError,
    ValidationError,
    WriteConflictError,
)


class TestLedgerError:
    def test_code_defaults_to_class_name(self):
        error = LedgerError("boom")
        assert error.code == "LedgerError"
        assert error.details == {}
        assert str(error) == "boom"

    def test_to_dict(self):
        error = LedgerError("boom", code="X", details={"a": 1})
        assert error.to_dict() == {"error": "X", "message": "boom", "details": {"a": 1}}


class TestValidationErrors:
    def test_validation_error_details(self):
        error = ValidationError("quantity", "Quantity must be non-zero", Decimal("0"))
        assert error.code == "VALIDATION_ERROR"
        assert error.details["field"] == "quantity"
        assert error.details["value"] == "0"

    def test_value_truncated(self):
        error = ValidationError("notes", "too long", "x" * 500)
        assert len(error.details["value"]) == 100

    def test_insufficient_stock_is_validation_error(self):
        error = InsufficientStockError(1, Decimal("5"), Decimal("2"), location_id=3)
        assert isinstance(error, ValidationError)
        assert error.code == "INSUFFICIENT_STOCK"
        assert error.details["available"] == "2"
        assert error.details["requested"] == "5"
        assert error.details["location_id"] == 3


class TestFamilies:
    def test_not_found_family(self):
        assert isinstance(ProductNotFoundError(1), NotFoundError)
        assert isinstance(TransferItemNotFoundError(1, 2), NotFoundError)
        assert PurchaseOrderItemNotFoundError(4, 9).details == {
            "purchase_order_id": 4,
            "item_id": 9,
        }

    def test_conflict_family(self):
        error = InvalidTransitionError("transfer", 5, "cancelled", "complete")
        assert isinstance(error, ConflictError)
        assert error.code == "INVALID_TRANSITION"
        assert "Cannot complete transfer 5" in error.message
        assert isinstance(WriteConflictError("adjust", "database is locked"), ConflictError)

    def test_persistence_family(self):
        error = DatabaseError("insert", "disk I/O error")
        assert isinstance(error, PersistenceError)
        assert error.code == "DATABASE_ERROR"

    def test_migration_error_is_persistence(self):
        error = MigrationError("002", "no such table: bins")
        assert isinstance(error, PersistenceError)
        assert error.code == "MIGRATION_FAILED"
        assert error.details == {"version": "002", "reason": "no such table: bins"}
