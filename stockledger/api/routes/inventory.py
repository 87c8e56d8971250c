"""Inventory endpoints: snapshots, adjustments and movement history."""

from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status

from stockledger.api.dependencies import (
    get_adjust_stock_use_case,
    get_inv_store,
    get_ledger,
    get_status_service,
)
from stockledger.application.dto.requests import (
    AdjustStockRequest,
    InitializeSnapshotRequest,
    SetReorderLevelRequest,
)
from stockledger.application.dto.responses import (
    AdjustStockResponse,
    BalanceAuditResponse,
    BalanceDriftResponse,
    ErrorResponse,
    InventoryListResponse,
    MovementListResponse,
    MovementResponse,
    SnapshotResponse,
    StockCountsResponse,
    StockPreviewResponse,
)
from stockledger.application.use_cases.adjust_stock import AdjustStockUseCase
from stockledger.core.entities.inventory import InventorySnapshot, MovementType
from stockledger.core.entities.pagination import Page, SortOrder
from stockledger.core.entities.queries import InventoryQuery, MovementQuery
from stockledger.core.services import StockLedger, StockStatusService
from stockledger.infrastructure.storage.sqlite import SQLiteInventoryStore

router = APIRouter(prefix="/api/inventory", tags=["inventory"])

SnapshotSort = Literal["product_name", "quantity", "reorder_level", "last_updated"]


def _inventory_query(
    search: str | None = None,
    product_id: int | None = None,
    location_id: int | None = None,
    low_stock_only: bool = False,
    out_of_stock_only: bool = False,
    sort_by: SnapshotSort = "product_name",
    sort_order: SortOrder = "asc",
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=200),
) -> InventoryQuery:
    return InventoryQuery(
        search=search,
        product_id=product_id,
        location_id=location_id,
        low_stock_only=low_stock_only,
        out_of_stock_only=out_of_stock_only,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        page_size=page_size,
    )


def _snapshot_page(page: Page[InventorySnapshot]) -> InventoryListResponse:
    return InventoryListResponse(
        items=[SnapshotResponse.from_entity(s) for s in page.items],
        total=page.total,
        page=page.page,
        page_size=page.page_size,
        total_pages=page.total_pages,
        has_more=page.has_more,
    )


@router.get("", response_model=InventoryListResponse)
async def list_inventory(
    query: InventoryQuery = Depends(_inventory_query),
    service: StockStatusService = Depends(get_status_service),
) -> InventoryListResponse:
    """List snapshots with search, stock-level filters, sorting and paging."""
    return _snapshot_page(await service.list_inventory(query))


@router.get("/low-stock", response_model=InventoryListResponse)
async def low_stock_items(
    query: InventoryQuery = Depends(_inventory_query),
    service: StockStatusService = Depends(get_status_service),
) -> InventoryListResponse:
    """Snapshots with 0 < quantity <= reorder level."""
    return _snapshot_page(await service.low_stock_items(query))


@router.get("/out-of-stock", response_model=InventoryListResponse)
async def out_of_stock_items(
    query: InventoryQuery = Depends(_inventory_query),
    service: StockStatusService = Depends(get_status_service),
) -> InventoryListResponse:
    """Snapshots with quantity <= 0."""
    return _snapshot_page(await service.out_of_stock_items(query))


@router.get("/counts", response_model=StockCountsResponse)
async def stock_counts(
    location_id: int | None = None,
    service: StockStatusService = Depends(get_status_service),
) -> StockCountsResponse:
    """Low-stock and out-of-stock counts for dashboard badges."""
    return StockCountsResponse(
        low_stock=await service.count_low_stock(location_id),
        out_of_stock=await service.count_out_of_stock(location_id),
    )


@router.get(
    "/movements",
    response_model=MovementListResponse,
)
async def list_movements(
    product_id: int | None = None,
    location_id: int | None = None,
    type: MovementType | None = None,
    user_id: int | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    sort_by: Literal["timestamp", "quantity", "type"] = "timestamp",
    sort_order: SortOrder = "desc",
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=200),
    store: SQLiteInventoryStore = Depends(get_inv_store),
) -> MovementListResponse:
    """Movement history, newest first by default."""
    result = await store.list_movements(
        MovementQuery(
            product_id=product_id,
            location_id=location_id,
            movement_type=type,
            user_id=user_id,
            start_date=start_date,
            end_date=end_date,
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            page_size=page_size,
        )
    )
    return MovementListResponse(
        items=[MovementResponse.from_entity(m) for m in result.items],
        total=result.total,
        page=result.page,
        page_size=result.page_size,
        total_pages=result.total_pages,
        has_more=result.has_more,
    )


@router.get("/audit", response_model=BalanceAuditResponse)
async def audit_balances(
    ledger: StockLedger = Depends(get_ledger),
) -> BalanceAuditResponse:
    """Compare every snapshot with the sum of its movements."""
    drift = await ledger.verify_balances()
    return BalanceAuditResponse(
        balanced=not drift,
        drift=[BalanceDriftResponse.from_entity(d) for d in drift],
    )


@router.post(
    "/adjust",
    response_model=AdjustStockResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def adjust_stock(
    request: AdjustStockRequest,
    use_case: AdjustStockUseCase = Depends(get_adjust_stock_use_case),
) -> AdjustStockResponse:
    """Record an adjustment, damage or expiry movement."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.post(
    "/adjust/preview",
    response_model=StockPreviewResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def preview_adjustment(
    request: AdjustStockRequest,
    use_case: AdjustStockUseCase = Depends(get_adjust_stock_use_case),
) -> StockPreviewResponse:
    """Projected quantity and warnings for an adjustment, without writing."""
    preview = await use_case.preview(request)
    return use_case.preview_to_response(preview)


@router.get(
    "/{product_id}",
    response_model=SnapshotResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_snapshot(
    product_id: int,
    location_id: int | None = None,
    service: StockStatusService = Depends(get_status_service),
) -> SnapshotResponse:
    """Current stock of a product, store-wide or at one location."""
    snapshot = await service.get_snapshot(product_id, location_id)
    if snapshot is None:
        raise HTTPException(
            status_code=404,
            detail=f"No inventory snapshot for product {product_id}",
        )
    return SnapshotResponse.from_entity(snapshot)


@router.put(
    "/{product_id}/reorder-level",
    response_model=SnapshotResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def set_reorder_level(
    product_id: int,
    request: SetReorderLevelRequest,
    ledger: StockLedger = Depends(get_ledger),
) -> SnapshotResponse:
    """Change the low-stock threshold."""
    snapshot = await ledger.set_reorder_level(
        product_id, request.reorder_level, request.location_id
    )
    return SnapshotResponse.from_entity(snapshot)


@router.post(
    "/{product_id}/initialize",
    response_model=SnapshotResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}},
)
async def initialize_snapshot(
    product_id: int,
    request: InitializeSnapshotRequest,
    ledger: StockLedger = Depends(get_ledger),
) -> SnapshotResponse:
    """Create a zero-quantity snapshot if none exists."""
    snapshot = await ledger.initialize_snapshot(
        product_id, request.location_id, request.reorder_level
    )
    return SnapshotResponse.from_entity(snapshot)
