"""Core interfaces (ports) for dependency injection."""

from stockledger.core.interfaces.catalog_store import ICatalogStore
from stockledger.core.interfaces.inventory_store import IInventoryStore
from stockledger.core.interfaces.purchase_order_store import IPurchaseOrderStore
from stockledger.core.interfaces.transfer_store import ITransferStore

__all__ = [
    "ICatalogStore",
    "IInventoryStore",
    "IPurchaseOrderStore",
    "ITransferStore",
]
