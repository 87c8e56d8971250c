"""Mock ledger collaborators for use case tests."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from stockledger.core.entities import (
    InventorySnapshot,
    LedgerEntry,
    MovementType,
    Product,
    StockMovement,
)


@asynccontextmanager
async def fake_transaction() -> AsyncIterator[str]:
    yield "tx-conn"


def _ledger_entry(
    product_id: int = 1,
    quantity: str = "0",
    delta: str = "1",
    reorder_level: str = "0",
    movement_type: MovementType = MovementType.ADJUSTMENT,
) -> LedgerEntry:
    return LedgerEntry(
        snapshot=InventorySnapshot(
            id=1,
            product_id=product_id,
            quantity=Decimal(quantity),
            reorder_level=Decimal(reorder_level),
        ),
        movement=StockMovement(
            id=1,
            product_id=product_id,
            movement_type=movement_type,
            quantity=Decimal(delta),
        ),
    )


@pytest.fixture
def mock_ledger() -> MagicMock:
    """StockLedger stand-in whose transaction yields a sentinel connection."""
    ledger = MagicMock()
    ledger.transaction = MagicMock(side_effect=lambda: fake_transaction())
    ledger.default_reorder_level = Decimal("0")
    ledger.inventory_store = AsyncMock()
    ledger.inventory_store.get_snapshot.return_value = None
    ledger.catalog_store = AsyncMock()
    ledger.catalog_store.get_product.return_value = Product(
        id=1, name="Whole Milk 1L", reorder_level=Decimal("20")
    )
    ledger.apply_movement = AsyncMock()
    return ledger


@pytest.fixture
def make_entry():
    """Factory for the LedgerEntry a mocked ``apply_movement`` returns."""
    return _ledger_entry
