"""Complete Transfer Use Case: move stock between locations in one transaction."""

from dataclasses import dataclass, field
from decimal import Decimal

from stockledger.application.dto.requests import CompleteTransferRequest
from stockledger.application.dto.responses import (
    CompleteTransferResponse,
    MovementResponse,
    TransferResponse,
)
from stockledger.application.retry import run_with_conflict_retry
from stockledger.application.use_cases.transfer_base import TransferUseCase
from stockledger.config import get_logger
from stockledger.core.entities.inventory import LedgerEntry, MovementType, utcnow
from stockledger.core.entities.transfer import StockTransfer, TransferStatus
from stockledger.core.exceptions import TransferItemNotFoundError, ValidationError

logger = get_logger(__name__)


@dataclass
class CompleteTransferResult:
    """Completed transfer and the ledger entries it wrote."""

    transfer: StockTransfer
    entries: list[LedgerEntry] = field(default_factory=list)


class CompleteTransferUseCase(TransferUseCase):
    """
    Complete a transfer with the quantities that actually arrived.

    For each line with something received, the source loses the requested
    quantity and the destination gains the received quantity. A short
    receipt therefore leaves the difference recorded only as the line's
    discrepancy. Items left out of the request count as nothing received.
    """

    async def execute(self, request: CompleteTransferRequest) -> CompleteTransferResult:
        """Execute complete transfer use case."""
        if not request.received_items:
            raise ValidationError("received_items", "Received quantities are required")

        logger.info("complete_transfer_started", transfer_id=request.transfer_id)
        return await run_with_conflict_retry(
            self._complete, request, retries=self._conflict_retries
        )

    async def _complete(self, request: CompleteTransferRequest) -> CompleteTransferResult:
        store = await self._get_transfer_store()
        ledger = await self._get_ledger()
        policy = self._get_policy()

        async with ledger.transaction() as conn:
            transfer = await self._load(request.transfer_id, conn)
            transfer.check_transition(TransferStatus.COMPLETED)

            received = self._received_by_item(transfer, request)

            entries: list[LedgerEntry] = []
            reason = (
                f"Transfer {transfer.transfer_number} from location "
                f"{transfer.from_location_id} to location {transfer.to_location_id}"
            )
            for item in transfer.items:
                item.received_quantity = received.get(item.id, Decimal("0"))  # type: ignore[arg-type]
                if item.received_quantity == 0:
                    continue

                if not policy.allow_negative_stock:
                    source = await ledger.inventory_store.get_snapshot(
                        item.product_id, transfer.from_location_id, conn=conn
                    )
                    policy.check(
                        item.product_id,
                        source.quantity if source else Decimal("0"),
                        -item.quantity,
                        location_id=transfer.from_location_id,
                    )

                entries.append(
                    await ledger.apply_movement(
                        item.product_id,
                        MovementType.TRANSFER,
                        -item.quantity,
                        request.completed_by_id,
                        location_id=transfer.from_location_id,
                        reason=reason,
                        reference_id=transfer.id,
                        conn=conn,
                    )
                )
                entries.append(
                    await ledger.apply_movement(
                        item.product_id,
                        MovementType.TRANSFER,
                        item.received_quantity,
                        request.completed_by_id,
                        location_id=transfer.to_location_id,
                        reason=reason,
                        reference_id=transfer.id,
                        conn=conn,
                    )
                )

            transfer.transition_to(TransferStatus.COMPLETED)
            transfer.completed_by_id = request.completed_by_id
            transfer.completed_at = utcnow()
            transfer = await store.save_transfer(transfer, conn=conn)

        logger.info(
            "transfer_completed",
            transfer_id=transfer.id,
            transfer_number=transfer.transfer_number,
            requested=str(transfer.total_requested),
            received=str(transfer.total_received),
            movements=len(entries),
        )
        return CompleteTransferResult(transfer=transfer, entries=entries)

    @staticmethod
    def _received_by_item(
        transfer: StockTransfer, request: CompleteTransferRequest
    ) -> dict[int, Decimal]:
        """Validate received quantities against each line's requested quantity."""
        received: dict[int, Decimal] = {}
        for line in request.received_items:
            item = transfer.get_item(line.item_id)
            if item is None:
                raise TransferItemNotFoundError(transfer.id, line.item_id)  # type: ignore[arg-type]
            if line.item_id in received:
                raise ValidationError(
                    "received_items",
                    f"Item {line.item_id} appears more than once",
                    line.item_id,
                )
            if line.received_quantity < 0 or line.received_quantity > item.quantity:
                raise ValidationError(
                    "received_quantity",
                    f"Received quantity for item {item.id} must be between 0 "
                    f"and the requested {item.quantity}",
                    line.received_quantity,
                )
            received[line.item_id] = line.received_quantity

        if sum(received.values(), Decimal("0")) == 0:
            raise ValidationError("received_items", "No items were received")
        return received

    def result_to_response(self, result: CompleteTransferResult) -> CompleteTransferResponse:
        return CompleteTransferResponse(
            transfer=TransferResponse.from_entity(result.transfer),
            movements=[MovementResponse.from_entity(e.movement) for e in result.entries],
        )
