"""
In-process boundary of the ledger.

Callers on the other side of this facade (UI handlers, IPC bridges,
scripts) receive an ``OperationResult`` instead of an exception.
"""

from collections.abc import Awaitable, Callable
from decimal import Decimal
from typing import Any, TypeVar

from stockledger.application.dto.requests import (
    AdjustStockRequest,
    CancelTransferRequest,
    CompleteTransferRequest,
    CreateTransferRequest,
    DispatchTransferRequest,
    ReceiveGoodsRequest,
)
from stockledger.application.results import OperationResult
from stockledger.application.use_cases import (
    AdjustStockResult,
    AdjustStockUseCase,
    CancelTransferUseCase,
    CompleteTransferResult,
    CompleteTransferUseCase,
    CreateTransferUseCase,
    DispatchTransferUseCase,
    ReceiveGoodsResult,
    ReceiveGoodsUseCase,
    StockPreview,
)
from stockledger.config import get_logger
from stockledger.core.entities.inventory import BalanceDrift, InventorySnapshot, StockMovement
from stockledger.core.entities.pagination import Page
from stockledger.core.entities.queries import InventoryQuery, MovementQuery, TransferQuery
from stockledger.core.entities.transfer import StockTransfer
from stockledger.core.exceptions import LedgerError, TransferNotFoundError
from stockledger.core.interfaces.transfer_store import ITransferStore
from stockledger.core.services import StockLedger, StockStatusService

logger = get_logger(__name__)

T = TypeVar("T")


class InventoryLedgerService:
    """Facade over the ledger workflows returning result objects."""

    def __init__(
        self,
        ledger: StockLedger,
        status_service: StockStatusService,
        transfer_store: ITransferStore,
        adjust_stock: AdjustStockUseCase | None = None,
        receive_goods: ReceiveGoodsUseCase | None = None,
        create_transfer: CreateTransferUseCase | None = None,
        dispatch_transfer: DispatchTransferUseCase | None = None,
        complete_transfer: CompleteTransferUseCase | None = None,
        cancel_transfer: CancelTransferUseCase | None = None,
    ):
        self.ledger = ledger
        self.status_service = status_service
        self.transfer_store = transfer_store
        self._adjust_stock = adjust_stock or AdjustStockUseCase(ledger=ledger)
        self._receive_goods = receive_goods or ReceiveGoodsUseCase(ledger=ledger)
        self._create_transfer = create_transfer or CreateTransferUseCase(
            transfer_store=transfer_store, ledger=ledger
        )
        self._dispatch_transfer = dispatch_transfer or DispatchTransferUseCase(
            transfer_store=transfer_store, ledger=ledger
        )
        self._complete_transfer = complete_transfer or CompleteTransferUseCase(
            transfer_store=transfer_store, ledger=ledger
        )
        self._cancel_transfer = cancel_transfer or CancelTransferUseCase(
            transfer_store=transfer_store, ledger=ledger
        )

    async def _run(
        self,
        operation: str,
        call: Callable[[], Awaitable[T]],
        message: str,
    ) -> OperationResult[T]:
        try:
            data = await call()
        except LedgerError as e:
            logger.warning(
                "ledger_operation_rejected",
                operation=operation,
                error_code=e.code,
                error=e.message,
            )
            return OperationResult.from_error(e)
        except Exception as e:
            logger.exception("ledger_operation_failed", operation=operation)
            return OperationResult.internal_error(e)
        return OperationResult.ok(data, message)

    # --- Writes ---

    async def adjust_stock(
        self, request: AdjustStockRequest
    ) -> OperationResult[AdjustStockResult]:
        return await self._run(
            "adjust_stock",
            lambda: self._adjust_stock.execute(request),
            "Stock adjusted successfully",
        )

    async def preview_adjustment(
        self, request: AdjustStockRequest
    ) -> OperationResult[StockPreview]:
        return await self._run(
            "preview_adjustment",
            lambda: self._adjust_stock.preview(request),
            "Adjustment preview computed",
        )

    async def receive_goods(
        self, request: ReceiveGoodsRequest
    ) -> OperationResult[ReceiveGoodsResult]:
        return await self._run(
            "receive_goods",
            lambda: self._receive_goods.execute(request),
            "Goods received successfully",
        )

    async def create_transfer(
        self, request: CreateTransferRequest
    ) -> OperationResult[StockTransfer]:
        return await self._run(
            "create_transfer",
            lambda: self._create_transfer.execute(request),
            "Stock transfer created successfully",
        )

    async def dispatch_transfer(
        self, request: DispatchTransferRequest
    ) -> OperationResult[StockTransfer]:
        return await self._run(
            "dispatch_transfer",
            lambda: self._dispatch_transfer.execute(request),
            "Stock transfer dispatched",
        )

    async def complete_transfer(
        self, request: CompleteTransferRequest
    ) -> OperationResult[CompleteTransferResult]:
        return await self._run(
            "complete_transfer",
            lambda: self._complete_transfer.execute(request),
            "Stock transfer completed successfully",
        )

    async def cancel_transfer(
        self, request: CancelTransferRequest
    ) -> OperationResult[StockTransfer]:
        return await self._run(
            "cancel_transfer",
            lambda: self._cancel_transfer.execute(request),
            "Stock transfer cancelled",
        )

    async def set_reorder_level(
        self,
        product_id: int,
        reorder_level: Decimal,
        location_id: int | None = None,
    ) -> OperationResult[InventorySnapshot]:
        return await self._run(
            "set_reorder_level",
            lambda: self.ledger.set_reorder_level(product_id, reorder_level, location_id),
            "Reorder level updated",
        )

    async def initialize_snapshot(
        self,
        product_id: int,
        location_id: int | None = None,
        reorder_level: Decimal | None = None,
    ) -> OperationResult[InventorySnapshot]:
        return await self._run(
            "initialize_snapshot",
            lambda: self.ledger.initialize_snapshot(product_id, location_id, reorder_level),
            "Inventory initialized",
        )

    # --- Reads ---

    async def get_snapshot(
        self, product_id: int, location_id: int | None = None
    ) -> OperationResult[InventorySnapshot | None]:
        return await self._run(
            "get_snapshot",
            lambda: self.status_service.get_snapshot(product_id, location_id),
            "OK",
        )

    async def list_inventory(
        self, query: InventoryQuery
    ) -> OperationResult[Page[InventorySnapshot]]:
        return await self._run(
            "list_inventory", lambda: self.status_service.list_inventory(query), "OK"
        )

    async def low_stock_items(
        self, query: InventoryQuery
    ) -> OperationResult[Page[InventorySnapshot]]:
        return await self._run(
            "low_stock_items", lambda: self.status_service.low_stock_items(query), "OK"
        )

    async def out_of_stock_items(
        self, query: InventoryQuery
    ) -> OperationResult[Page[InventorySnapshot]]:
        return await self._run(
            "out_of_stock_items",
            lambda: self.status_service.out_of_stock_items(query),
            "OK",
        )

    async def count_low_stock(self, location_id: int | None = None) -> OperationResult[int]:
        return await self._run(
            "count_low_stock",
            lambda: self.status_service.count_low_stock(location_id),
            "OK",
        )

    async def count_out_of_stock(
        self, location_id: int | None = None
    ) -> OperationResult[int]:
        return await self._run(
            "count_out_of_stock",
            lambda: self.status_service.count_out_of_stock(location_id),
            "OK",
        )

    async def list_movements(
        self, query: MovementQuery
    ) -> OperationResult[Page[StockMovement]]:
        return await self._run(
            "list_movements",
            lambda: self.ledger.inventory_store.list_movements(query),
            "OK",
        )

    async def get_transfer(self, transfer_id: int) -> OperationResult[StockTransfer]:
        async def load() -> StockTransfer:
            transfer = await self.transfer_store.get_transfer(transfer_id)
            if transfer is None:
                raise TransferNotFoundError(transfer_id)
            return transfer

        return await self._run("get_transfer", load, "OK")

    async def list_transfers(
        self, query: TransferQuery
    ) -> OperationResult[Page[StockTransfer]]:
        return await self._run(
            "list_transfers", lambda: self.transfer_store.list_transfers(query), "OK"
        )

    async def verify_balances(self) -> OperationResult[list[BalanceDrift]]:
        return await self._run(
            "verify_balances", self.ledger.verify_balances, "Balance audit finished"
        )


async def get_inventory_ledger_service(**overrides: Any) -> InventoryLedgerService:
    """Build the facade on the default SQLite stores."""
    from stockledger.application.services import get_stock_ledger, get_stock_status_service
    from stockledger.infrastructure.storage.sqlite import get_transfer_store

    ledger = overrides.pop("ledger", None) or await get_stock_ledger()
    status_service = overrides.pop("status_service", None) or await get_stock_status_service()
    transfer_store = overrides.pop("transfer_store", None) or await get_transfer_store()
    return InventoryLedgerService(
        ledger=ledger,
        status_service=status_service,
        transfer_store=transfer_store,
        **overrides,
    )
