"""Core domain entities."""

from stockledger.core.entities.catalog import Location, Product
from stockledger.core.entities.inventory import (
    BalanceDrift,
    InventorySnapshot,
    LedgerEntry,
    MovementType,
    SignRule,
    StockMovement,
    StockStatus,
)
from stockledger.core.entities.pagination import Page, SortOrder
from stockledger.core.entities.purchase_order import (
    PurchaseOrder,
    PurchaseOrderItem,
    PurchaseOrderStatus,
)
from stockledger.core.entities.queries import (
    InventoryQuery,
    MovementQuery,
    PageQuery,
    TransferQuery,
)
from stockledger.core.entities.transfer import (
    StockTransfer,
    StockTransferItem,
    TransferStatus,
)

__all__ = [
    # Catalog entities
    "Product",
    "Location",
    # Inventory entities
    "InventorySnapshot",
    "StockMovement",
    "MovementType",
    "SignRule",
    "StockStatus",
    "LedgerEntry",
    "BalanceDrift",
    # Transfer entities
    "StockTransfer",
    "StockTransferItem",
    "TransferStatus",
    # Purchase order entities
    "PurchaseOrder",
    "PurchaseOrderItem",
    "PurchaseOrderStatus",
    # Listing
    "Page",
    "SortOrder",
    "PageQuery",
    "InventoryQuery",
    "MovementQuery",
    "TransferQuery",
]
