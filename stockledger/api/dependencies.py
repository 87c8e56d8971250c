"""
Dependency injection container for FastAPI.

Provides service instances to route handlers. Tests swap any of these
through ``app.dependency_overrides``.
"""

from functools import lru_cache

from stockledger.application.services import get_stock_ledger, get_stock_status_service
from stockledger.application.use_cases import (
    AdjustStockUseCase,
    CancelTransferUseCase,
    CompleteTransferUseCase,
    CreateTransferUseCase,
    DispatchTransferUseCase,
    ReceiveGoodsUseCase,
)
from stockledger.config import Settings, get_settings
from stockledger.core.services import StockLedger, StockStatusService
from stockledger.infrastructure.storage.sqlite import (
    SQLiteInventoryStore,
    SQLiteTransferStore,
    get_inventory_store,
    get_transfer_store,
)


@lru_cache
def get_app_settings() -> Settings:
    """Get cached application settings."""
    return get_settings()


# Service dependencies
async def get_ledger() -> StockLedger:
    """Get the stock ledger."""
    return await get_stock_ledger()


async def get_status_service() -> StockStatusService:
    """Get the stock status service."""
    return await get_stock_status_service()


# Store dependencies
async def get_inv_store() -> SQLiteInventoryStore:
    """Get inventory store for movement reads."""
    return await get_inventory_store()


async def get_xfer_store() -> SQLiteTransferStore:
    """Get transfer store for transfer reads."""
    return await get_transfer_store()


# Use case dependencies
def get_adjust_stock_use_case() -> AdjustStockUseCase:
    """Get adjust stock use case."""
    return AdjustStockUseCase()


def get_receive_goods_use_case() -> ReceiveGoodsUseCase:
    """Get receive goods use case."""
    return ReceiveGoodsUseCase()


def get_create_transfer_use_case() -> CreateTransferUseCase:
    """Get create transfer use case."""
    return CreateTransferUseCase()


def get_dispatch_transfer_use_case() -> DispatchTransferUseCase:
    """Get dispatch transfer use case."""
    return DispatchTransferUseCase()


def get_complete_transfer_use_case() -> CompleteTransferUseCase:
    """Get complete transfer use case."""
    return CompleteTransferUseCase()


def get_cancel_transfer_use_case() -> CancelTransferUseCase:
    """Get cancel transfer use case."""
    return CancelTransferUseCase()
