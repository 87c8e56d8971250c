"""Collaborators shared by the stock transfer use cases."""

from typing import Any

from stockledger.application.dto.responses import TransferResponse
from stockledger.core.entities.transfer import StockTransfer
from stockledger.core.exceptions import TransferNotFoundError
from stockledger.core.interfaces.transfer_store import ITransferStore
from stockledger.core.services import StockLedger, StockPolicy


class TransferUseCase:
    """Base for transfer workflows: store, ledger and negative-stock policy."""

    def __init__(
        self,
        transfer_store: ITransferStore | None = None,
        ledger: StockLedger | None = None,
        policy: StockPolicy | None = None,
        conflict_retries: int | None = None,
    ):
        self._transfer_store = transfer_store
        self._ledger = ledger
        self._policy = policy
        self._conflict_retries = conflict_retries

    async def _get_transfer_store(self) -> ITransferStore:
        if self._transfer_store is None:
            from stockledger.infrastructure.storage.sqlite import get_transfer_store

            self._transfer_store = await get_transfer_store()
        return self._transfer_store

    async def _get_ledger(self) -> StockLedger:
        if self._ledger is None:
            from stockledger.application.services import get_stock_ledger

            self._ledger = await get_stock_ledger()
        return self._ledger

    def _get_policy(self) -> StockPolicy:
        if self._policy is None:
            from stockledger.application.services import get_stock_policy

            self._policy = get_stock_policy()
        return self._policy

    async def _load(self, transfer_id: int, conn: Any) -> StockTransfer:
        store = await self._get_transfer_store()
        transfer = await store.get_transfer(transfer_id, conn=conn)
        if transfer is None:
            raise TransferNotFoundError(transfer_id)
        return transfer

    def to_response(self, transfer: StockTransfer) -> TransferResponse:
        """Convert transfer to API response."""
        return TransferResponse.from_entity(transfer)
