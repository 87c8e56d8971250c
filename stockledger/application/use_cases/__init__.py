"""Application use cases."""

from stockledger.application.use_cases.adjust_stock import (
    AdjustStockResult,
    AdjustStockUseCase,
    StockPreview,
)
from stockledger.application.use_cases.cancel_transfer import CancelTransferUseCase
from stockledger.application.use_cases.complete_transfer import (
    CompleteTransferResult,
    CompleteTransferUseCase,
)
from stockledger.application.use_cases.create_transfer import CreateTransferUseCase
from stockledger.application.use_cases.dispatch_transfer import DispatchTransferUseCase
from stockledger.application.use_cases.receive_goods import (
    ReceiveGoodsResult,
    ReceiveGoodsUseCase,
)

__all__ = [
    "AdjustStockUseCase",
    "AdjustStockResult",
    "StockPreview",
    "ReceiveGoodsUseCase",
    "ReceiveGoodsResult",
    "CreateTransferUseCase",
    "DispatchTransferUseCase",
    "CompleteTransferUseCase",
    "CompleteTransferResult",
    "CancelTransferUseCase",
]
