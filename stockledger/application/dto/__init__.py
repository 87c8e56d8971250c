"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming requests.
Response DTOs: Structure and serialize responses.

These are the ONLY contracts between API handlers and use cases.
"""

from stockledger.application.dto.requests import (
    AdjustStockRequest,
    CancelTransferBody,
    CancelTransferRequest,
    CompleteTransferBody,
    CompleteTransferRequest,
    CreateTransferRequest,
    DispatchTransferBody,
    DispatchTransferRequest,
    InitializeSnapshotRequest,
    ReceivedItemRequest,
    ReceiveGoodsBody,
    ReceiveGoodsRequest,
    ReceiveItemRequest,
    SetReorderLevelRequest,
    TransferItemRequest,
)
from stockledger.application.dto.responses import (
    AdjustStockResponse,
    BalanceAuditResponse,
    BalanceDriftResponse,
    CompleteTransferResponse,
    ComponentHealthResponse,
    ErrorResponse,
    HealthResponse,
    InventoryListResponse,
    MovementListResponse,
    MovementResponse,
    PaginatedResponse,
    PurchaseOrderItemResponse,
    PurchaseOrderResponse,
    ReceiveGoodsResponse,
    SnapshotResponse,
    StockCountsResponse,
    StockPreviewResponse,
    TransferItemResponse,
    TransferListResponse,
    TransferResponse,
)

__all__ = [
    # Requests
    "AdjustStockRequest",
    "SetReorderLevelRequest",
    "InitializeSnapshotRequest",
    "ReceiveItemRequest",
    "ReceiveGoodsRequest",
    "ReceiveGoodsBody",
    "TransferItemRequest",
    "CreateTransferRequest",
    "DispatchTransferRequest",
    "DispatchTransferBody",
    "ReceivedItemRequest",
    "CompleteTransferRequest",
    "CompleteTransferBody",
    "CancelTransferRequest",
    "CancelTransferBody",
    # Responses
    "SnapshotResponse",
    "MovementResponse",
    "AdjustStockResponse",
    "StockPreviewResponse",
    "PaginatedResponse",
    "InventoryListResponse",
    "MovementListResponse",
    "StockCountsResponse",
    "BalanceDriftResponse",
    "BalanceAuditResponse",
    "TransferItemResponse",
    "TransferResponse",
    "TransferListResponse",
    "CompleteTransferResponse",
    "PurchaseOrderItemResponse",
    "PurchaseOrderResponse",
    "ReceiveGoodsResponse",
    "ComponentHealthResponse",
    "HealthResponse",
    "ErrorResponse",
]
