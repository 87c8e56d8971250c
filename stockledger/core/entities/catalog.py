"""Catalog entities owned by other subsystems; the ledger only reads them."""

from decimal import Decimal

from pydantic import BaseModel, Field


class Product(BaseModel):
    """Sellable product."""

    id: int | None = None
    name: str
    code: str | None = None
    barcode: str | None = None
    unit: str = "pcs"
    reorder_level: Decimal = Field(default=Decimal("0"), ge=0)


class Location(BaseModel):
    """Store, warehouse or shelf area holding stock."""

    id: int | None = None
    name: str
    code: str | None = None
    is_active: bool = True
