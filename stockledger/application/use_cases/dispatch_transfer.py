"""Dispatch Transfer Use Case: approve a pending transfer and send it on its way."""

from stockledger.application.dto.requests import DispatchTransferRequest
from stockledger.application.retry import run_with_conflict_retry
from stockledger.application.use_cases.transfer_base import TransferUseCase
from stockledger.config import get_logger
from stockledger.core.entities.inventory import utcnow
from stockledger.core.entities.transfer import StockTransfer, TransferStatus

logger = get_logger(__name__)


class DispatchTransferUseCase(TransferUseCase):
    """pending -> in_transit. No stock moves."""

    async def execute(self, request: DispatchTransferRequest) -> StockTransfer:
        return await run_with_conflict_retry(
            self._dispatch, request, retries=self._conflict_retries
        )

    async def _dispatch(self, request: DispatchTransferRequest) -> StockTransfer:
        store = await self._get_transfer_store()
        ledger = await self._get_ledger()

        async with ledger.transaction() as conn:
            transfer = await self._load(request.transfer_id, conn)
            transfer.transition_to(TransferStatus.IN_TRANSIT)
            transfer.approved_by_id = request.approved_by_id
            transfer.approved_at = utcnow()
            transfer = await store.save_transfer(transfer, conn=conn)

        logger.info(
            "transfer_dispatched",
            transfer_id=transfer.id,
            approved_by_id=request.approved_by_id,
        )
        return transfer
