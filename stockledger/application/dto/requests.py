"""Request DTOs for the ledger workflows.

Pydantic v2 models validating input at the application boundary.
Business validation (sign rules, remaining quantities, state) happens
in the use cases.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from stockledger.core.entities.inventory import MovementType


# --- Inventory ---


class AdjustStockRequest(BaseModel):
    """Request to record a manual adjustment, damage or expiry write-off."""

    product_id: int = Field(..., description="Product ID")
    quantity: Decimal = Field(
        ...,
        description="Entered quantity; sign is normalized by movement type",
    )
    type: MovementType = Field(..., description="Movement type")
    reason: str | None = Field(default=None, max_length=500, description="Reason")
    user_id: int = Field(..., description="Acting user ID")
    location_id: int | None = Field(
        default=None,
        description="Location ID (omit for the store-wide snapshot)",
    )
    reference_id: int | None = Field(default=None, description="Source document ID")
    expiry_date: date | None = Field(
        default=None,
        description="Batch expiry; only for purchases and positive adjustments",
    )


class SetReorderLevelRequest(BaseModel):
    """Request to change a snapshot's low-stock threshold."""

    reorder_level: Decimal = Field(..., ge=0, description="Low-stock threshold")
    location_id: int | None = Field(default=None, description="Location ID")


class InitializeSnapshotRequest(BaseModel):
    """Request to create a zero-quantity snapshot."""

    location_id: int | None = Field(default=None, description="Location ID")
    reorder_level: Decimal | None = Field(
        default=None,
        ge=0,
        description="Threshold (defaults to the product's reorder level)",
    )


# --- Purchase receiving ---


class ReceiveItemRequest(BaseModel):
    """Quantity arriving for one purchase order line."""

    item_id: int = Field(..., description="Purchase order item ID")
    received_quantity: Decimal = Field(..., description="Quantity arriving now")
    expiry_date: date | None = Field(default=None, description="Batch expiry date")


class ReceiveGoodsRequest(BaseModel):
    """Request to receive goods against a purchase order."""

    purchase_order_id: int = Field(..., description="Purchase order ID")
    items: list[ReceiveItemRequest] = Field(default_factory=list)
    user_id: int = Field(..., description="Receiving user ID")
    location_id: int | None = Field(
        default=None,
        description="Receiving location (omit for store-wide stock)",
    )


# --- Transfers ---


class TransferItemRequest(BaseModel):
    """Product line on a new transfer."""

    product_id: int = Field(..., description="Product ID")
    quantity: Decimal = Field(..., description="Requested quantity, must be > 0")
    notes: str | None = Field(default=None, max_length=500)


class CreateTransferRequest(BaseModel):
    """Request to create a stock transfer between two locations."""

    from_location_id: int = Field(..., description="Source location ID")
    to_location_id: int = Field(..., description="Destination location ID")
    items: list[TransferItemRequest] = Field(default_factory=list)
    notes: str | None = Field(default=None, max_length=1000)
    requested_by_id: int = Field(..., description="Requesting user ID")


class DispatchTransferRequest(BaseModel):
    """Request to approve and dispatch a pending transfer."""

    transfer_id: int
    approved_by_id: int


class ReceivedItemRequest(BaseModel):
    """Quantity that actually arrived for a transfer line."""

    item_id: int = Field(..., description="Transfer item ID")
    received_quantity: Decimal = Field(..., description="Quantity received")


class CompleteTransferRequest(BaseModel):
    """Request to complete a transfer with actual received quantities."""

    transfer_id: int
    completed_by_id: int
    received_items: list[ReceivedItemRequest] = Field(default_factory=list)


class CancelTransferRequest(BaseModel):
    """Request to cancel a transfer."""

    transfer_id: int
    cancelled_by_id: int | None = None
    reason: str | None = Field(default=None, max_length=500)


# --- HTTP bodies (path supplies the ID) ---


class ReceiveGoodsBody(BaseModel):
    """Body of POST /api/purchase-orders/{id}/receive."""

    items: list[ReceiveItemRequest] = Field(default_factory=list)
    user_id: int
    location_id: int | None = None


class DispatchTransferBody(BaseModel):
    """Body of POST /api/transfers/{id}/dispatch."""

    approved_by_id: int


class CompleteTransferBody(BaseModel):
    """Body of POST /api/transfers/{id}/complete."""

    completed_by_id: int
    received_items: list[ReceivedItemRequest] = Field(default_factory=list)


class CancelTransferBody(BaseModel):
    """Body of POST /api/transfers/{id}/cancel."""

    cancelled_by_id: int | None = None
    reason: str | None = Field(default=None, max_length=500)
