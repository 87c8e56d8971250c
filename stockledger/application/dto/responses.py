"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
"""

from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from stockledger.core.entities.inventory import BalanceDrift, InventorySnapshot, StockMovement
from stockledger.core.entities.purchase_order import PurchaseOrder
from stockledger.core.entities.transfer import StockTransfer
from stockledger.core.services.stock_status import classify_snapshot


# --- Inventory ---


class SnapshotResponse(BaseModel):
    """Current stock of a product, store-wide or at one location."""

    id: int
    product_id: int
    product_name: str | None = None
    location_id: int | None = None
    quantity: Decimal
    reorder_level: Decimal
    status: str = Field(..., description="in_stock | low_stock | out_of_stock")
    earliest_expiry: date | None = None
    last_updated: datetime

    @classmethod
    def from_entity(cls, snapshot: InventorySnapshot) -> "SnapshotResponse":
        return cls(
            id=snapshot.id,  # type: ignore[arg-type]
            product_id=snapshot.product_id,
            product_name=snapshot.product_name,
            location_id=snapshot.location_id,
            quantity=snapshot.quantity,
            reorder_level=snapshot.reorder_level,
            status=classify_snapshot(snapshot).value,
            earliest_expiry=snapshot.earliest_expiry,
            last_updated=snapshot.last_updated,
        )


class MovementResponse(BaseModel):
    """One recorded stock movement."""

    id: int
    product_id: int
    location_id: int | None = None
    type: str
    quantity: Decimal = Field(..., description="Signed quantity")
    reason: str | None = None
    user_id: int | None = None
    reference_id: int | None = None
    expiry_date: date | None = None
    timestamp: datetime

    @classmethod
    def from_entity(cls, movement: StockMovement) -> "MovementResponse":
        return cls(
            id=movement.id,  # type: ignore[arg-type]
            product_id=movement.product_id,
            location_id=movement.location_id,
            type=movement.movement_type.value,
            quantity=movement.quantity,
            reason=movement.reason,
            user_id=movement.user_id,
            reference_id=movement.reference_id,
            expiry_date=movement.expiry_date,
            timestamp=movement.timestamp,
        )


class AdjustStockResponse(BaseModel):
    """Outcome of a manual adjustment."""

    snapshot: SnapshotResponse
    movement: MovementResponse
    warnings: list[str] = Field(default_factory=list)


class StockPreviewResponse(BaseModel):
    """Projected effect of an adjustment, computed without writing."""

    product_id: int
    location_id: int | None = None
    current_quantity: Decimal
    delta: Decimal
    projected_quantity: Decimal
    reorder_level: Decimal
    warnings: list[str] = Field(default_factory=list)


class PaginatedResponse(BaseModel):
    """Base for paginated responses."""

    total: int
    page: int
    page_size: int
    total_pages: int
    has_more: bool


class InventoryListResponse(PaginatedResponse):
    """Page of snapshots."""

    items: list[SnapshotResponse]


class MovementListResponse(PaginatedResponse):
    """Page of movements."""

    items: list[MovementResponse]


class StockCountsResponse(BaseModel):
    """Dashboard badge counts."""

    low_stock: int
    out_of_stock: int


class BalanceDriftResponse(BaseModel):
    """Snapshot that disagrees with the sum of its movements."""

    product_id: int
    location_id: int | None = None
    snapshot_quantity: Decimal
    movement_total: Decimal
    difference: Decimal

    @classmethod
    def from_entity(cls, drift: BalanceDrift) -> "BalanceDriftResponse":
        return cls(
            product_id=drift.product_id,
            location_id=drift.location_id,
            snapshot_quantity=drift.snapshot_quantity,
            movement_total=drift.movement_total,
            difference=drift.difference,
        )


class BalanceAuditResponse(BaseModel):
    """Result of comparing every snapshot with its history."""

    balanced: bool
    drift: list[BalanceDriftResponse] = Field(default_factory=list)


# --- Transfers ---


class TransferItemResponse(BaseModel):
    """Transfer line with requested and received quantities."""

    id: int
    product_id: int
    quantity: Decimal
    received_quantity: Decimal
    discrepancy: Decimal
    notes: str | None = None


class TransferResponse(BaseModel):
    """Stock transfer with its items."""

    id: int
    transfer_number: str
    from_location_id: int
    to_location_id: int
    status: str
    notes: str | None = None
    requested_by_id: int
    approved_by_id: int | None = None
    completed_by_id: int | None = None
    requested_at: datetime
    approved_at: datetime | None = None
    completed_at: datetime | None = None
    items: list[TransferItemResponse] = Field(default_factory=list)

    @classmethod
    def from_entity(cls, transfer: StockTransfer) -> "TransferResponse":
        return cls(
            id=transfer.id,  # type: ignore[arg-type]
            transfer_number=transfer.transfer_number or "",
            from_location_id=transfer.from_location_id,
            to_location_id=transfer.to_location_id,
            status=transfer.status.value,
            notes=transfer.notes,
            requested_by_id=transfer.requested_by_id,
            approved_by_id=transfer.approved_by_id,
            completed_by_id=transfer.completed_by_id,
            requested_at=transfer.requested_at,
            approved_at=transfer.approved_at,
            completed_at=transfer.completed_at,
            items=[
                TransferItemResponse(
                    id=item.id,  # type: ignore[arg-type]
                    product_id=item.product_id,
                    quantity=item.quantity,
                    received_quantity=item.received_quantity,
                    discrepancy=item.discrepancy,
                    notes=item.notes,
                )
                for item in transfer.items
            ],
        )


class TransferListResponse(PaginatedResponse):
    """Page of transfers."""

    items: list[TransferResponse]


class CompleteTransferResponse(BaseModel):
    """Completed transfer and the movements it produced."""

    transfer: TransferResponse
    movements: list[MovementResponse] = Field(default_factory=list)


# --- Purchase receiving ---


class PurchaseOrderItemResponse(BaseModel):
    """Purchase order line after receiving."""

    id: int
    product_id: int
    quantity: Decimal
    received_quantity: Decimal
    remaining: Decimal


class PurchaseOrderResponse(BaseModel):
    """Purchase order after receiving."""

    id: int
    order_number: str
    status: str
    received_date: datetime | None = None
    items: list[PurchaseOrderItemResponse] = Field(default_factory=list)

    @classmethod
    def from_entity(cls, order: PurchaseOrder) -> "PurchaseOrderResponse":
        return cls(
            id=order.id,  # type: ignore[arg-type]
            order_number=order.order_number,
            status=order.status.value,
            received_date=order.received_date,
            items=[
                PurchaseOrderItemResponse(
                    id=item.id,  # type: ignore[arg-type]
                    product_id=item.product_id,
                    quantity=item.quantity,
                    received_quantity=item.received_quantity,
                    remaining=item.remaining,
                )
                for item in order.items
            ],
        )


class ReceiveGoodsResponse(BaseModel):
    """Outcome of receiving goods against a purchase order."""

    purchase_order: PurchaseOrderResponse
    movements: list[MovementResponse] = Field(default_factory=list)
    snapshots: list[SnapshotResponse] = Field(default_factory=list)


# --- Service ---


class ComponentHealthResponse(BaseModel):
    """Health of one dependency."""

    name: str
    available: bool
    latency_ms: float | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: ComponentHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. TRANSFER_NOT_FOUND)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    details: dict[str, Any] | None = Field(
        default=None, description="Structured context from the domain error"
    )
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
