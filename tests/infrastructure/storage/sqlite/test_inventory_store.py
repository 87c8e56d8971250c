"""Tests for SQLiteInventoryStore listings."""

from datetime import timedelta
from decimal import Decimal

import pytest

from stockledger.core.entities import (
    InventoryQuery,
    InventorySnapshot,
    MovementQuery,
    MovementType,
)
from stockledger.core.entities.inventory import utcnow
from stockledger.core.exceptions import DatabaseError


@pytest.fixture
async def stocked(ledger, catalog):
    """milk 15 (low), bread 0 (out), rice 40 (in), plus 7 milk in the warehouse."""
    await ledger.apply_movement(catalog.milk.id, MovementType.PURCHASE, Decimal("100"), 1)
    await ledger.apply_movement(catalog.milk.id, MovementType.ADJUSTMENT, Decimal("-85"), 2)
    await ledger.apply_movement(catalog.bread.id, MovementType.PURCHASE, Decimal("4"), 1)
    await ledger.apply_movement(catalog.bread.id, MovementType.DAMAGE, Decimal("-4"), 2)
    await ledger.apply_movement(catalog.rice.id, MovementType.PURCHASE, Decimal("40"), 1)
    await ledger.apply_movement(
        catalog.milk.id, MovementType.PURCHASE, Decimal("7"), 1,
        location_id=catalog.warehouse.id,
    )
    return catalog


class TestSnapshots:
    async def test_store_wide_and_location_rows_are_distinct(
        self, inventory_store, stocked
    ):
        store_wide = await inventory_store.get_snapshot(stocked.milk.id)
        warehouse = await inventory_store.get_snapshot(stocked.milk.id, stocked.warehouse.id)
        assert store_wide.id != warehouse.id
        assert store_wide.location_id is None
        assert warehouse.product_name == "Whole Milk 1L"

    async def test_duplicate_key_rejected(self, inventory_store, catalog):
        await inventory_store.create_snapshot(InventorySnapshot(product_id=catalog.milk.id))
        with pytest.raises(DatabaseError):
            await inventory_store.create_snapshot(InventorySnapshot(product_id=catalog.milk.id))

    async def test_quantity_round_trips_exactly(self, inventory_store, catalog):
        created = await inventory_store.create_snapshot(
            InventorySnapshot(product_id=catalog.rice.id, quantity=Decimal("1.125"))
        )
        loaded = await inventory_store.get_snapshot(catalog.rice.id)
        assert loaded.id == created.id
        assert loaded.quantity == Decimal("1.125")

    async def test_list_sorted_by_name(self, inventory_store, stocked):
        page = await inventory_store.list_snapshots(InventoryQuery())
        names = [s.product_name for s in page.items]
        assert names == sorted(names)
        assert page.total == 4

    async def test_list_sorted_by_quantity_desc(self, inventory_store, stocked):
        page = await inventory_store.list_snapshots(
            InventoryQuery(sort_by="quantity", sort_order="desc")
        )
        assert [s.quantity for s in page.items] == [
            Decimal("40"), Decimal("15"), Decimal("7"), Decimal("0")
        ]

    async def test_search_matches_name_code_and_barcode(self, inventory_store, stocked):
        by_name = await inventory_store.list_snapshots(InventoryQuery(search="Bread"))
        by_code = await inventory_store.list_snapshots(InventoryQuery(search="RCE"))
        by_barcode = await inventory_store.list_snapshots(InventoryQuery(search="6001"))

        assert [s.product_id for s in by_name.items] == [stocked.bread.id]
        assert [s.product_id for s in by_code.items] == [stocked.rice.id]
        assert {s.product_id for s in by_barcode.items} == {stocked.milk.id}
        assert by_barcode.total == 2

    async def test_location_filter(self, inventory_store, stocked):
        page = await inventory_store.list_snapshots(
            InventoryQuery(location_id=stocked.warehouse.id)
        )
        assert [s.quantity for s in page.items] == [Decimal("7")]

    async def test_paging(self, inventory_store, stocked):
        first = await inventory_store.list_snapshots(InventoryQuery(page_size=3))
        second = await inventory_store.list_snapshots(InventoryQuery(page=2, page_size=3))

        assert len(first.items) == 3 and first.has_more
        assert len(second.items) == 1 and not second.has_more
        assert first.total_pages == 2

    async def test_stock_level_filters_and_counts(self, inventory_store, stocked):
        low = await inventory_store.list_snapshots(InventoryQuery(low_stock_only=True))
        out = await inventory_store.list_snapshots(InventoryQuery(out_of_stock_only=True))

        # warehouse milk (7) is also below its reorder level of 20
        assert sorted(s.quantity for s in low.items) == [Decimal("7"), Decimal("15")]
        assert [s.product_id for s in out.items] == [stocked.bread.id]
        assert await inventory_store.count_low_stock() == 2
        assert await inventory_store.count_out_of_stock() == 1
        assert await inventory_store.count_low_stock(stocked.warehouse.id) == 1


class TestMovements:
    async def test_default_order_is_newest_first(self, inventory_store, stocked):
        page = await inventory_store.list_movements(MovementQuery())
        assert page.total == 6
        assert page.items[0].quantity == Decimal("7")
        assert page.items[-1].quantity == Decimal("100")

    async def test_filters(self, inventory_store, stocked):
        damage = await inventory_store.list_movements(
            MovementQuery(movement_type=MovementType.DAMAGE)
        )
        by_user = await inventory_store.list_movements(MovementQuery(user_id=2))
        milk = await inventory_store.list_movements(MovementQuery(product_id=stocked.milk.id))
        warehouse = await inventory_store.list_movements(
            MovementQuery(location_id=stocked.warehouse.id)
        )

        assert [m.quantity for m in damage.items] == [Decimal("-4")]
        assert by_user.total == 2
        assert milk.total == 3
        assert warehouse.total == 1

    async def test_date_range(self, inventory_store, stocked):
        now = utcnow()
        recent = await inventory_store.list_movements(
            MovementQuery(start_date=now - timedelta(hours=1), end_date=now + timedelta(hours=1))
        )
        future = await inventory_store.list_movements(
            MovementQuery(start_date=now + timedelta(days=1))
        )
        assert recent.total == 6
        assert future.total == 0

    async def test_sort_by_quantity(self, inventory_store, stocked):
        page = await inventory_store.list_movements(
            MovementQuery(sort_by="quantity", sort_order="asc")
        )
        assert page.items[0].quantity == Decimal("-85")
        assert page.items[-1].quantity == Decimal("100")


class TestFindDrift:
    async def test_snapshot_without_movements_is_balanced_at_zero(
        self, inventory_store, catalog
    ):
        await inventory_store.create_snapshot(InventorySnapshot(product_id=catalog.milk.id))
        assert await inventory_store.find_drift() == []

    async def test_snapshot_with_unrecorded_quantity_drifts(self, inventory_store, catalog):
        await inventory_store.create_snapshot(
            InventorySnapshot(product_id=catalog.milk.id, quantity=Decimal("3"))
        )
        drift = await inventory_store.find_drift()
        assert len(drift) == 1
        assert drift[0].snapshot_quantity == Decimal("3")
        assert drift[0].movement_total == Decimal("0")
