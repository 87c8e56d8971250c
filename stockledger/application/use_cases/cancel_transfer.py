"""Cancel Transfer Use Case."""

from stockledger.application.dto.requests import CancelTransferRequest
from stockledger.application.retry import run_with_conflict_retry
from stockledger.application.use_cases.transfer_base import TransferUseCase
from stockledger.config import get_logger
from stockledger.core.entities.transfer import StockTransfer, TransferStatus

logger = get_logger(__name__)


class CancelTransferUseCase(TransferUseCase):
    """pending | in_transit -> cancelled. No stock moves."""

    async def execute(self, request: CancelTransferRequest) -> StockTransfer:
        return await run_with_conflict_retry(
            self._cancel, request, retries=self._conflict_retries
        )

    async def _cancel(self, request: CancelTransferRequest) -> StockTransfer:
        store = await self._get_transfer_store()
        ledger = await self._get_ledger()

        async with ledger.transaction() as conn:
            transfer = await self._load(request.transfer_id, conn)
            transfer.transition_to(TransferStatus.CANCELLED)
            if request.reason:
                note = f"Cancelled: {request.reason}"
                transfer.notes = f"{transfer.notes}\n{note}" if transfer.notes else note
            transfer = await store.save_transfer(transfer, conn=conn)

        logger.info(
            "transfer_cancelled",
            transfer_id=transfer.id,
            cancelled_by_id=request.cancelled_by_id,
            reason=request.reason,
        )
        return transfer
