"""SQLite storage implementations."""

from stockledger.infrastructure.storage.sqlite.catalog_store import SQLiteCatalogStore
from stockledger.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from stockledger.infrastructure.storage.sqlite.inventory_store import SQLiteInventoryStore
from stockledger.infrastructure.storage.sqlite.purchase_order_store import (
    SQLitePurchaseOrderStore,
)
from stockledger.infrastructure.storage.sqlite.transfer_store import SQLiteTransferStore

# Singleton instances
_inventory_store: SQLiteInventoryStore | None = None
_catalog_store: SQLiteCatalogStore | None = None
_transfer_store: SQLiteTransferStore | None = None
_purchase_order_store: SQLitePurchaseOrderStore | None = None


async def get_inventory_store() -> SQLiteInventoryStore:
    """Get singleton inventory store instance."""
    global _inventory_store
    if _inventory_store is None:
        _inventory_store = SQLiteInventoryStore()
    return _inventory_store


async def get_catalog_store() -> SQLiteCatalogStore:
    """Get singleton catalog store instance."""
    global _catalog_store
    if _catalog_store is None:
        _catalog_store = SQLiteCatalogStore()
    return _catalog_store


async def get_transfer_store() -> SQLiteTransferStore:
    """Get singleton transfer store instance."""
    global _transfer_store
    if _transfer_store is None:
        _transfer_store = SQLiteTransferStore()
    return _transfer_store


async def get_purchase_order_store() -> SQLitePurchaseOrderStore:
    """Get singleton purchase order store instance."""
    global _purchase_order_store
    if _purchase_order_store is None:
        _purchase_order_store = SQLitePurchaseOrderStore()
    return _purchase_order_store


def reset_stores() -> None:
    """Drop store singletons (for testing and pool restarts)."""
    global _inventory_store, _catalog_store, _transfer_store, _purchase_order_store
    _inventory_store = None
    _catalog_store = None
    _transfer_store = None
    _purchase_order_store = None


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    # Store classes
    "SQLiteInventoryStore",
    "SQLiteCatalogStore",
    "SQLiteTransferStore",
    "SQLitePurchaseOrderStore",
    # Factory functions
    "get_inventory_store",
    "get_catalog_store",
    "get_transfer_store",
    "get_purchase_order_store",
    "reset_stores",
]
