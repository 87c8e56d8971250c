"""Purchase order entities referenced by goods receiving."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


class PurchaseOrderStatus(str, Enum):
    """Purchase order lifecycle as seen by receiving."""

    DRAFT = "draft"
    PENDING = "pending"
    PARTIALLY_RECEIVED = "partially_received"
    RECEIVED = "received"
    CANCELLED = "cancelled"


class PurchaseOrderItem(BaseModel):
    """An ordered product line and what has arrived so far."""

    id: int | None = None
    purchase_order_id: int | None = None
    product_id: int
    quantity: Decimal = Field(..., gt=0)  # ordered
    received_quantity: Decimal = Decimal("0")

    @property
    def remaining(self) -> Decimal:
        return max(self.quantity - self.received_quantity, Decimal("0"))

    @property
    def is_fully_received(self) -> bool:
        return self.received_quantity >= self.quantity


class PurchaseOrder(BaseModel):
    """Supplier order whose lines are received into stock."""

    id: int | None = None
    order_number: str
    status: PurchaseOrderStatus = PurchaseOrderStatus.DRAFT
    received_date: datetime | None = None
    items: list[PurchaseOrderItem] = Field(default_factory=list)

    def get_item(self, item_id: int) -> PurchaseOrderItem | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def derive_status(self) -> PurchaseOrderStatus:
        """Status implied by the received quantities of the lines."""
        if self.items and all(item.is_fully_received for item in self.items):
            return PurchaseOrderStatus.RECEIVED
        if any(item.received_quantity > 0 for item in self.items):
            return PurchaseOrderStatus.PARTIALLY_RECEIVED
        return self.status
