"""Result objects returned across the in-process boundary."""

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from stockledger.core.exceptions import LedgerError

T = TypeVar("T")

INTERNAL_ERROR = "INTERNAL_ERROR"


@dataclass
class OperationResult(Generic[T]):
    """Outcome of a ledger operation; never raises for domain errors."""

    success: bool
    message: str
    data: T | None = None
    error_code: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, data: T | None = None, message: str = "OK") -> "OperationResult[T]":
        return cls(success=True, message=message, data=data)

    @classmethod
    def from_error(cls, error: LedgerError) -> "OperationResult[T]":
        return cls(
            success=False,
            message=error.message,
            error_code=error.code,
            details=dict(error.details),
        )

    @classmethod
    def internal_error(cls, error: Exception) -> "OperationResult[T]":
        return cls(
            success=False,
            message="An unexpected error occurred",
            error_code=INTERNAL_ERROR,
            details={"error": str(error)},
        )
