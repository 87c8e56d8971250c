"""
Service factory functions for dependency injection.

Wires the SQLite stores to the core services. Use cases import from here
when they are constructed without explicit collaborators.
"""

from typing import TYPE_CHECKING

from stockledger.config import get_settings
from stockledger.core.services import StockLedger, StockPolicy, StockStatusService

if TYPE_CHECKING:
    from stockledger.core.interfaces import ICatalogStore, IInventoryStore


# Singleton service instances
_stock_ledger: StockLedger | None = None
_stock_status_service: StockStatusService | None = None


async def get_stock_ledger(
    inventory_store: "IInventoryStore | None" = None,
    catalog_store: "ICatalogStore | None" = None,
) -> StockLedger:
    """
    Get or create the StockLedger.

    Explicit stores bypass the singleton and return a fresh instance.
    """
    global _stock_ledger

    if _stock_ledger is not None and inventory_store is None and catalog_store is None:
        return _stock_ledger

    # Lazy import infrastructure to avoid circular imports
    from stockledger.infrastructure.storage.sqlite import (
        get_catalog_store,
        get_inventory_store,
    )

    ledger = StockLedger(
        inventory_store=inventory_store or await get_inventory_store(),
        catalog_store=catalog_store or await get_catalog_store(),
        default_reorder_level=get_settings().ledger.default_reorder_level,
    )

    if inventory_store is None and catalog_store is None:
        _stock_ledger = ledger
    return ledger


async def get_stock_status_service(
    inventory_store: "IInventoryStore | None" = None,
) -> StockStatusService:
    """Get or create the StockStatusService."""
    global _stock_status_service

    if _stock_status_service is not None and inventory_store is None:
        return _stock_status_service

    from stockledger.infrastructure.storage.sqlite import get_inventory_store

    service = StockStatusService(inventory_store or await get_inventory_store())
    if inventory_store is None:
        _stock_status_service = service
    return service


def get_stock_policy() -> StockPolicy:
    """Negative-stock policy from current settings."""
    return StockPolicy(allow_negative_stock=get_settings().ledger.allow_negative_stock)


def reset_services() -> None:
    """Reset all singleton services (for testing)."""
    global _stock_ledger, _stock_status_service
    _stock_ledger = None
    _stock_status_service = None
