"""Stock transfer entities and their state machine."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field

from stockledger.core.entities.inventory import utcnow
from stockledger.core.exceptions import InvalidTransitionError


class TransferStatus(str, Enum):
    """Lifecycle of a stock transfer."""

    PENDING = "pending"
    IN_TRANSIT = "in_transit"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (TransferStatus.COMPLETED, TransferStatus.CANCELLED)

    def can_transition_to(self, target: "TransferStatus") -> bool:
        return target in _TRANSITIONS[self]


_TRANSITIONS: dict[TransferStatus, frozenset[TransferStatus]] = {
    TransferStatus.PENDING: frozenset(
        {TransferStatus.IN_TRANSIT, TransferStatus.COMPLETED, TransferStatus.CANCELLED}
    ),
    TransferStatus.IN_TRANSIT: frozenset(
        {TransferStatus.COMPLETED, TransferStatus.CANCELLED}
    ),
    TransferStatus.COMPLETED: frozenset(),
    TransferStatus.CANCELLED: frozenset(),
}

# Verb used in error messages for each target status
_ACTIONS: dict[TransferStatus, str] = {
    TransferStatus.PENDING: "reopen",
    TransferStatus.IN_TRANSIT: "dispatch",
    TransferStatus.COMPLETED: "complete",
    TransferStatus.CANCELLED: "cancel",
}


class StockTransferItem(BaseModel):
    """One product line on a transfer."""

    id: int | None = None
    transfer_id: int | None = None
    product_id: int
    quantity: Decimal = Field(..., gt=0)  # requested
    received_quantity: Decimal = Decimal("0")
    notes: str | None = None

    @property
    def discrepancy(self) -> Decimal:
        """Requested minus received; non-zero after a short receipt."""
        return self.quantity - self.received_quantity


class StockTransfer(BaseModel):
    """Movement of stock from one location to another."""

    id: int | None = None
    transfer_number: str | None = None
    from_location_id: int
    to_location_id: int
    status: TransferStatus = TransferStatus.PENDING
    notes: str | None = None
    requested_by_id: int
    approved_by_id: int | None = None
    completed_by_id: int | None = None
    requested_at: datetime = Field(default_factory=utcnow)
    approved_at: datetime | None = None
    completed_at: datetime | None = None
    items: list[StockTransferItem] = Field(default_factory=list)

    def check_transition(self, target: TransferStatus) -> None:
        """Raise InvalidTransitionError unless ``target`` is reachable from here."""
        if not self.status.can_transition_to(target):
            raise InvalidTransitionError(
                entity="transfer",
                entity_id=self.id,
                status=self.status.value,
                action=_ACTIONS[target],
            )

    def transition_to(self, target: TransferStatus) -> None:
        """Move to ``target`` or raise InvalidTransitionError, leaving status as is."""
        self.check_transition(target)
        self.status = target

    def get_item(self, item_id: int) -> StockTransferItem | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    @property
    def total_requested(self) -> Decimal:
        return sum((item.quantity for item in self.items), Decimal("0"))

    @property
    def total_received(self) -> Decimal:
        return sum((item.received_quantity for item in self.items), Decimal("0"))
