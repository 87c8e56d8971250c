"""Receive Goods Use Case: book purchase order arrivals into stock."""

from dataclasses import dataclass, field
from decimal import Decimal

from stockledger.application.dto.requests import ReceiveGoodsRequest, ReceiveItemRequest
from stockledger.application.dto.responses import (
    MovementResponse,
    PurchaseOrderResponse,
    ReceiveGoodsResponse,
    SnapshotResponse,
)
from stockledger.application.retry import run_with_conflict_retry
from stockledger.config import get_logger
from stockledger.core.entities.inventory import LedgerEntry, MovementType, utcnow
from stockledger.core.entities.purchase_order import PurchaseOrder, PurchaseOrderStatus
from stockledger.core.exceptions import (
    InvalidTransitionError,
    PurchaseOrderItemNotFoundError,
    PurchaseOrderNotFoundError,
    ValidationError,
)
from stockledger.core.interfaces.purchase_order_store import IPurchaseOrderStore
from stockledger.core.services import StockLedger

logger = get_logger(__name__)


@dataclass
class ReceiveGoodsResult:
    """Result of receiving goods."""

    purchase_order: PurchaseOrder
    entries: list[LedgerEntry] = field(default_factory=list)


class ReceiveGoodsUseCase:
    """
    Receive goods against a purchase order.

    Every line is checked against what is still outstanding before any
    stock moves; one bad line rejects the whole receipt.
    """

    def __init__(
        self,
        purchase_order_store: IPurchaseOrderStore | None = None,
        ledger: StockLedger | None = None,
        conflict_retries: int | None = None,
    ):
        self._purchase_order_store = purchase_order_store
        self._ledger = ledger
        self._conflict_retries = conflict_retries

    async def _get_purchase_order_store(self) -> IPurchaseOrderStore:
        if self._purchase_order_store is None:
            from stockledger.infrastructure.storage.sqlite import get_purchase_order_store

            self._purchase_order_store = await get_purchase_order_store()
        return self._purchase_order_store

    async def _get_ledger(self) -> StockLedger:
        if self._ledger is None:
            from stockledger.application.services import get_stock_ledger

            self._ledger = await get_stock_ledger()
        return self._ledger

    async def execute(self, request: ReceiveGoodsRequest) -> ReceiveGoodsResult:
        """Execute receive goods use case."""
        if not request.items:
            raise ValidationError("items", "At least one item must be received")

        logger.info(
            "receive_goods_started",
            purchase_order_id=request.purchase_order_id,
            lines=len(request.items),
        )
        return await run_with_conflict_retry(
            self._receive, request, retries=self._conflict_retries
        )

    async def _receive(self, request: ReceiveGoodsRequest) -> ReceiveGoodsResult:
        store = await self._get_purchase_order_store()
        ledger = await self._get_ledger()

        async with ledger.transaction() as conn:
            # Re-read inside the transaction so remaining quantities are current
            order = await store.get_purchase_order(request.purchase_order_id, conn=conn)
            if order is None:
                raise PurchaseOrderNotFoundError(request.purchase_order_id)
            if order.status == PurchaseOrderStatus.CANCELLED:
                raise InvalidTransitionError(
                    entity="purchase_order",
                    entity_id=order.id,
                    status=order.status.value,
                    action="receive",
                )

            self._validate_lines(order, request.items)

            entries: list[LedgerEntry] = []
            for line in request.items:
                if line.received_quantity == 0:
                    continue
                item = order.get_item(line.item_id)
                item.received_quantity += line.received_quantity  # type: ignore[union-attr]
                entry = await ledger.apply_movement(
                    item.product_id,  # type: ignore[union-attr]
                    MovementType.PURCHASE,
                    line.received_quantity,
                    request.user_id,
                    location_id=request.location_id,
                    reason=f"Received on purchase order {order.order_number}",
                    reference_id=item.id,  # type: ignore[union-attr]
                    expiry_date=line.expiry_date,
                    conn=conn,
                )
                entries.append(entry)

            order.status = order.derive_status()
            order.received_date = utcnow()
            order = await store.save_receipt(order, conn=conn)

        logger.info(
            "goods_received",
            purchase_order_id=order.id,
            status=order.status.value,
            movements=len(entries),
        )
        return ReceiveGoodsResult(purchase_order=order, entries=entries)

    @staticmethod
    def _validate_lines(order: PurchaseOrder, lines: list[ReceiveItemRequest]) -> None:
        """Reject unknown, duplicate, negative or over-received lines."""
        seen: set[int] = set()
        total = Decimal("0")

        for line in lines:
            if line.item_id in seen:
                raise ValidationError(
                    "items", f"Item {line.item_id} appears more than once", line.item_id
                )
            seen.add(line.item_id)

            item = order.get_item(line.item_id)
            if item is None:
                raise PurchaseOrderItemNotFoundError(order.id, line.item_id)  # type: ignore[arg-type]

            if line.received_quantity < 0:
                raise ValidationError(
                    "received_quantity",
                    f"Received quantity for item {item.id} cannot be negative",
                    line.received_quantity,
                )
            if line.received_quantity > item.remaining:
                raise ValidationError(
                    "received_quantity",
                    f"Received quantity for item {item.id} exceeds remaining "
                    f"{item.remaining} (ordered {item.quantity}, "
                    f"already received {item.received_quantity})",
                    line.received_quantity,
                )
            total += line.received_quantity

        if total == 0:
            raise ValidationError("items", "No quantities to receive")

    def to_response(self, result: ReceiveGoodsResult) -> ReceiveGoodsResponse:
        """Convert result to API response."""
        return ReceiveGoodsResponse(
            purchase_order=PurchaseOrderResponse.from_entity(result.purchase_order),
            movements=[MovementResponse.from_entity(e.movement) for e in result.entries],
            snapshots=[SnapshotResponse.from_entity(e.snapshot) for e in result.entries],
        )
