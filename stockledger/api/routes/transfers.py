"""Stock transfer endpoints."""

from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Depends, Query, status

from stockledger.api.dependencies import (
    get_cancel_transfer_use_case,
    get_complete_transfer_use_case,
    get_create_transfer_use_case,
    get_dispatch_transfer_use_case,
    get_xfer_store,
)
from stockledger.application.dto.requests import (
    CancelTransferBody,
    CancelTransferRequest,
    CompleteTransferBody,
    CompleteTransferRequest,
    CreateTransferRequest,
    DispatchTransferBody,
    DispatchTransferRequest,
)
from stockledger.application.dto.responses import (
    CompleteTransferResponse,
    ErrorResponse,
    TransferListResponse,
    TransferResponse,
)
from stockledger.application.use_cases import (
    CancelTransferUseCase,
    CompleteTransferUseCase,
    CreateTransferUseCase,
    DispatchTransferUseCase,
)
from stockledger.core.entities.pagination import SortOrder
from stockledger.core.entities.queries import TransferQuery
from stockledger.core.entities.transfer import TransferStatus
from stockledger.core.exceptions import TransferNotFoundError
from stockledger.infrastructure.storage.sqlite import SQLiteTransferStore

router = APIRouter(prefix="/api/transfers", tags=["transfers"])

_TRANSITION_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


@router.post(
    "",
    response_model=TransferResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_transfer(
    request: CreateTransferRequest,
    use_case: CreateTransferUseCase = Depends(get_create_transfer_use_case),
) -> TransferResponse:
    """Create a pending transfer between two locations."""
    transfer = await use_case.execute(request)
    return use_case.to_response(transfer)


@router.get("", response_model=TransferListResponse)
async def list_transfers(
    search: str | None = None,
    from_location_id: int | None = None,
    to_location_id: int | None = None,
    status: TransferStatus | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    sort_by: Literal["requested_at", "transfer_number", "status"] = "requested_at",
    sort_order: SortOrder = "desc",
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=200),
    store: SQLiteTransferStore = Depends(get_xfer_store),
) -> TransferListResponse:
    """List transfers with filters, sorting and paging."""
    result = await store.list_transfers(
        TransferQuery(
            search=search,
            from_location_id=from_location_id,
            to_location_id=to_location_id,
            status=status,
            start_date=start_date,
            end_date=end_date,
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            page_size=page_size,
        )
    )
    return TransferListResponse(
        items=[TransferResponse.from_entity(t) for t in result.items],
        total=result.total,
        page=result.page,
        page_size=result.page_size,
        total_pages=result.total_pages,
        has_more=result.has_more,
    )


@router.get(
    "/{transfer_id}",
    response_model=TransferResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_transfer(
    transfer_id: int,
    store: SQLiteTransferStore = Depends(get_xfer_store),
) -> TransferResponse:
    """Get a transfer with its items."""
    transfer = await store.get_transfer(transfer_id)
    if transfer is None:
        raise TransferNotFoundError(transfer_id)
    return TransferResponse.from_entity(transfer)


@router.post(
    "/{transfer_id}/dispatch",
    response_model=TransferResponse,
    responses=_TRANSITION_ERRORS,
)
async def dispatch_transfer(
    transfer_id: int,
    body: DispatchTransferBody,
    use_case: DispatchTransferUseCase = Depends(get_dispatch_transfer_use_case),
) -> TransferResponse:
    """Approve a pending transfer and mark it in transit."""
    transfer = await use_case.execute(
        DispatchTransferRequest(transfer_id=transfer_id, approved_by_id=body.approved_by_id)
    )
    return use_case.to_response(transfer)


@router.post(
    "/{transfer_id}/complete",
    response_model=CompleteTransferResponse,
    responses=_TRANSITION_ERRORS,
)
async def complete_transfer(
    transfer_id: int,
    body: CompleteTransferBody,
    use_case: CompleteTransferUseCase = Depends(get_complete_transfer_use_case),
) -> CompleteTransferResponse:
    """Complete a transfer with the quantities that arrived."""
    result = await use_case.execute(
        CompleteTransferRequest(
            transfer_id=transfer_id,
            completed_by_id=body.completed_by_id,
            received_items=body.received_items,
        )
    )
    return use_case.result_to_response(result)


@router.post(
    "/{transfer_id}/cancel",
    response_model=TransferResponse,
    responses=_TRANSITION_ERRORS,
)
async def cancel_transfer(
    transfer_id: int,
    body: CancelTransferBody,
    use_case: CancelTransferUseCase = Depends(get_cancel_transfer_use_case),
) -> TransferResponse:
    """Cancel a pending or in-transit transfer."""
    transfer = await use_case.execute(
        CancelTransferRequest(
            transfer_id=transfer_id,
            cancelled_by_id=body.cancelled_by_id,
            reason=body.reason,
        )
    )
    return use_case.to_response(transfer)
