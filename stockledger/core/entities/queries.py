"""Listing filters shared by the store interfaces."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from stockledger.core.entities.inventory import MovementType
from stockledger.core.entities.pagination import SortOrder
from stockledger.core.entities.transfer import TransferStatus


class PageQuery(BaseModel):
    """Page selection."""

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1, le=200)
    sort_order: SortOrder = "asc"

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class InventoryQuery(PageQuery):
    """Snapshot listing filters."""

    search: str | None = None
    product_id: int | None = None
    location_id: int | None = None
    low_stock_only: bool = False
    out_of_stock_only: bool = False
    sort_by: Literal["product_name", "quantity", "reorder_level", "last_updated"] = (
        "product_name"
    )


class MovementQuery(PageQuery):
    """Movement history filters."""

    product_id: int | None = None
    location_id: int | None = None
    movement_type: MovementType | None = None
    user_id: int | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    sort_by: Literal["timestamp", "quantity", "type"] = "timestamp"
    sort_order: SortOrder = "desc"


class TransferQuery(PageQuery):
    """Transfer listing filters."""

    search: str | None = None
    from_location_id: int | None = None
    to_location_id: int | None = None
    status: TransferStatus | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    sort_by: Literal["requested_at", "transfer_number", "status"] = "requested_at"
    sort_order: SortOrder = "desc"
