"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Generator
from decimal import Decimal
from pathlib import Path
from types import SimpleNamespace

import pytest

from stockledger.application.services import reset_services
from stockledger.config import reset_settings
from stockledger.core.entities import (
    Location,
    Product,
    PurchaseOrder,
    PurchaseOrderItem,
    PurchaseOrderStatus,
)
from stockledger.core.services import StockLedger, StockPolicy, StockStatusService
from stockledger.infrastructure.storage.sqlite import (
    ConnectionPool,
    SQLiteCatalogStore,
    SQLiteInventoryStore,
    SQLitePurchaseOrderStore,
    SQLiteTransferStore,
    reset_stores,
)
from stockledger.infrastructure.storage.sqlite.migrations.migrator import initialize_database


@pytest.fixture(autouse=True)
def isolated_settings(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[None, None, None]:
    """Point settings at a per-test data dir and drop cached singletons."""
    monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("STORAGE_BUSY_TIMEOUT", "5000")
    reset_settings()
    reset_services()
    reset_stores()
    yield
    reset_settings()
    reset_services()
    reset_stores()


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "ledger.db"


@pytest.fixture
async def pool(temp_db_path: Path) -> AsyncGenerator[ConnectionPool, None]:
    """Migrated database behind a small connection pool."""
    await initialize_database(temp_db_path)
    pool = ConnectionPool(temp_db_path, pool_size=4, busy_timeout=5000)
    await pool.initialize()
    yield pool
    await pool.close()


@pytest.fixture
def inventory_store(pool: ConnectionPool) -> SQLiteInventoryStore:
    return SQLiteInventoryStore(pool)


@pytest.fixture
def catalog_store(pool: ConnectionPool) -> SQLiteCatalogStore:
    return SQLiteCatalogStore(pool)


@pytest.fixture
def transfer_store(pool: ConnectionPool) -> SQLiteTransferStore:
    return SQLiteTransferStore(pool)


@pytest.fixture
def purchase_order_store(pool: ConnectionPool) -> SQLitePurchaseOrderStore:
    return SQLitePurchaseOrderStore(pool)


@pytest.fixture
def ledger(
    inventory_store: SQLiteInventoryStore, catalog_store: SQLiteCatalogStore
) -> StockLedger:
    return StockLedger(inventory_store, catalog_store)


@pytest.fixture
def status_service(inventory_store: SQLiteInventoryStore) -> StockStatusService:
    return StockStatusService(inventory_store)


@pytest.fixture
def strict_policy() -> StockPolicy:
    """Policy that refuses deductions below zero."""
    return StockPolicy(allow_negative_stock=False)


@pytest.fixture
async def catalog(catalog_store: SQLiteCatalogStore) -> SimpleNamespace:
    """Products and locations most ledger tests need."""
    milk = await catalog_store.create_product(
        Product(name="Whole Milk 1L", code="MLK-1L", barcode="6001", reorder_level=Decimal("20"))
    )
    bread = await catalog_store.create_product(
        Product(name="White Bread", code="BRD-01", barcode="6002", reorder_level=Decimal("5"))
    )
    rice = await catalog_store.create_product(Product(name="Basmati Rice 5kg", code="RCE-5"))
    store = await catalog_store.create_location(Location(name="Shop Floor", code="SHOP"))
    warehouse = await catalog_store.create_location(Location(name="Back Warehouse", code="WH"))
    closed = await catalog_store.create_location(
        Location(name="Old Kiosk", code="KIOSK", is_active=False)
    )
    return SimpleNamespace(
        milk=milk, bread=bread, rice=rice, store=store, warehouse=warehouse, closed=closed
    )


@pytest.fixture
async def purchase_order(
    purchase_order_store: SQLitePurchaseOrderStore, catalog: SimpleNamespace
) -> PurchaseOrder:
    """Pending order for 50 milk and 10 bread, nothing received yet."""
    return await purchase_order_store.create_purchase_order(
        PurchaseOrder(
            order_number="PO-0001",
            status=PurchaseOrderStatus.PENDING,
            items=[
                PurchaseOrderItem(product_id=catalog.milk.id, quantity=Decimal("50")),
                PurchaseOrderItem(product_id=catalog.bread.id, quantity=Decimal("10")),
            ],
        )
    )
