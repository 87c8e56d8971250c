"""
Application layer - Use cases, DTOs, and service factories.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Implementing use cases that coordinate core services
3. Providing factory functions for dependency injection

Use cases are the only entry point for API handlers.
"""

from stockledger.application.ledger_service import (
    InventoryLedgerService,
    get_inventory_ledger_service,
)
from stockledger.application.results import OperationResult
from stockledger.application.services import (
    get_stock_ledger,
    get_stock_policy,
    get_stock_status_service,
    reset_services,
)
from stockledger.application.use_cases import (
    AdjustStockUseCase,
    CancelTransferUseCase,
    CompleteTransferUseCase,
    CreateTransferUseCase,
    DispatchTransferUseCase,
    ReceiveGoodsUseCase,
)

__all__ = [
    # Boundary
    "InventoryLedgerService",
    "OperationResult",
    "get_inventory_ledger_service",
    # Use Cases
    "AdjustStockUseCase",
    "ReceiveGoodsUseCase",
    "CreateTransferUseCase",
    "DispatchTransferUseCase",
    "CompleteTransferUseCase",
    "CancelTransferUseCase",
    # Service factories
    "get_stock_ledger",
    "get_stock_policy",
    "get_stock_status_service",
    "reset_services",
]
