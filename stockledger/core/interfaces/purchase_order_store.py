"""Abstract interface for purchase orders as seen by receiving."""

from abc import ABC, abstractmethod
from typing import Any

from stockledger.core.entities.purchase_order import PurchaseOrder


class IPurchaseOrderStore(ABC):
    """Interface for purchase order persistence."""

    @abstractmethod
    async def create_purchase_order(self, order: PurchaseOrder) -> PurchaseOrder:
        """Create a purchase order with its items."""
        pass

    @abstractmethod
    async def get_purchase_order(
        self, purchase_order_id: int, conn: Any = None
    ) -> PurchaseOrder | None:
        """Get purchase order by ID with items."""
        pass

    @abstractmethod
    async def save_receipt(self, order: PurchaseOrder, conn: Any = None) -> PurchaseOrder:
        """Persist received quantities, status and received date."""
        pass
