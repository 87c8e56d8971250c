"""Tests for the Ledger Core write path."""

from datetime import date
from decimal import Decimal

import pytest

from stockledger.core.entities import MovementQuery, MovementType
from stockledger.core.exceptions import (
    LocationNotFoundError,
    ProductNotFoundError,
    ValidationError,
)


class TestApplyMovement:
    async def test_creates_snapshot_on_first_movement(self, ledger, catalog):
        entry = await ledger.apply_movement(
            catalog.milk.id, MovementType.PURCHASE, Decimal("30"), 7, reason="opening"
        )

        assert entry.snapshot.id is not None
        assert entry.snapshot.quantity == Decimal("30")
        assert entry.snapshot.reorder_level == Decimal("20")
        assert entry.snapshot.product_name == "Whole Milk 1L"
        assert entry.movement.id is not None
        assert entry.movement.quantity == Decimal("30")
        assert entry.movement.user_id == 7
        assert entry.movement.timestamp == entry.snapshot.last_updated

    async def test_accumulates_signed_quantities(self, ledger, inventory_store, catalog):
        await ledger.apply_movement(catalog.milk.id, MovementType.PURCHASE, Decimal("100"), 1)
        entry = await ledger.apply_movement(
            catalog.milk.id, MovementType.ADJUSTMENT, Decimal("-85"), 1
        )

        assert entry.snapshot.quantity == Decimal("15")
        stored = await inventory_store.get_snapshot(catalog.milk.id)
        assert stored.quantity == Decimal("15")

    async def test_does_not_block_negative_results(self, ledger, catalog):
        entry = await ledger.apply_movement(
            catalog.bread.id, MovementType.DAMAGE, Decimal("-3"), 1
        )
        assert entry.snapshot.quantity == Decimal("-3")

    async def test_fractional_quantities_are_exact(self, ledger, catalog):
        for _ in range(3):
            entry = await ledger.apply_movement(
                catalog.rice.id, MovementType.PURCHASE, Decimal("0.1"), 1
            )
        assert entry.snapshot.quantity == Decimal("0.3")

    async def test_zero_quantity_rejected(self, ledger, catalog):
        with pytest.raises(ValidationError):
            await ledger.apply_movement(catalog.milk.id, MovementType.ADJUSTMENT, Decimal("0"), 1)

    async def test_unknown_product(self, ledger, catalog):
        with pytest.raises(ProductNotFoundError):
            await ledger.apply_movement(9999, MovementType.PURCHASE, Decimal("1"), 1)

    async def test_unknown_location(self, ledger, catalog):
        with pytest.raises(LocationNotFoundError):
            await ledger.apply_movement(
                catalog.milk.id, MovementType.PURCHASE, Decimal("1"), 1, location_id=9999
            )

    async def test_locations_are_separate_snapshots(self, ledger, inventory_store, catalog):
        await ledger.apply_movement(
            catalog.milk.id, MovementType.PURCHASE, Decimal("30"), 1,
            location_id=catalog.store.id,
        )
        await ledger.apply_movement(
            catalog.milk.id, MovementType.PURCHASE, Decimal("5"), 1,
            location_id=catalog.warehouse.id,
        )

        shop = await inventory_store.get_snapshot(catalog.milk.id, catalog.store.id)
        back = await inventory_store.get_snapshot(catalog.milk.id, catalog.warehouse.id)
        assert (shop.quantity, back.quantity) == (Decimal("30"), Decimal("5"))
        assert await inventory_store.get_snapshot(catalog.milk.id) is None

    async def test_tracks_earliest_expiry(self, ledger, catalog):
        await ledger.apply_movement(
            catalog.milk.id, MovementType.PURCHASE, Decimal("10"), 1,
            expiry_date=date(2031, 5, 1),
        )
        await ledger.apply_movement(
            catalog.milk.id, MovementType.PURCHASE, Decimal("10"), 1,
            expiry_date=date(2031, 3, 1),
        )
        entry = await ledger.apply_movement(
            catalog.milk.id, MovementType.PURCHASE, Decimal("10"), 1,
            expiry_date=date(2031, 9, 1),
        )
        assert entry.snapshot.earliest_expiry == date(2031, 3, 1)

    async def test_joins_caller_transaction(self, ledger, inventory_store, catalog):
        with pytest.raises(RuntimeError):
            async with ledger.transaction() as conn:
                await ledger.apply_movement(
                    catalog.milk.id, MovementType.PURCHASE, Decimal("10"), 1, conn=conn
                )
                raise RuntimeError("abort")

        assert await inventory_store.get_snapshot(catalog.milk.id) is None
        movements = await inventory_store.list_movements(MovementQuery())
        assert movements.total == 0


class TestSnapshotMaintenance:
    async def test_initialize_creates_zero_snapshot(self, ledger, catalog):
        snapshot = await ledger.initialize_snapshot(catalog.bread.id, catalog.store.id)
        assert snapshot.quantity == Decimal("0")
        assert snapshot.reorder_level == Decimal("5")
        assert snapshot.location_id == catalog.store.id

    async def test_initialize_is_idempotent(self, ledger, catalog):
        first = await ledger.initialize_snapshot(catalog.bread.id)
        await ledger.apply_movement(catalog.bread.id, MovementType.PURCHASE, Decimal("4"), 1)
        again = await ledger.initialize_snapshot(catalog.bread.id, reorder_level=Decimal("9"))

        assert again.id == first.id
        assert again.quantity == Decimal("4")
        assert again.reorder_level == Decimal("5")

    async def test_initialize_writes_no_movement(self, ledger, inventory_store, catalog):
        await ledger.initialize_snapshot(catalog.rice.id)
        assert (await inventory_store.list_movements(MovementQuery())).total == 0
        assert await ledger.verify_balances() == []

    async def test_set_reorder_level(self, ledger, catalog):
        await ledger.apply_movement(catalog.milk.id, MovementType.PURCHASE, Decimal("12"), 1)
        snapshot = await ledger.set_reorder_level(catalog.milk.id, Decimal("10"))
        assert snapshot.reorder_level == Decimal("10")
        assert snapshot.quantity == Decimal("12")

    async def test_set_reorder_level_creates_missing_snapshot(self, ledger, catalog):
        snapshot = await ledger.set_reorder_level(
            catalog.rice.id, Decimal("3"), catalog.warehouse.id
        )
        assert snapshot.id is not None
        assert snapshot.quantity == Decimal("0")

    async def test_negative_reorder_level_rejected(self, ledger, catalog):
        with pytest.raises(ValidationError):
            await ledger.set_reorder_level(catalog.milk.id, Decimal("-1"))


class TestVerifyBalances:
    async def test_balanced_after_writes(self, ledger, catalog):
        await ledger.apply_movement(catalog.milk.id, MovementType.PURCHASE, Decimal("10"), 1)
        await ledger.apply_movement(catalog.milk.id, MovementType.DAMAGE, Decimal("-2.5"), 1)
        assert await ledger.verify_balances() == []

    async def test_reports_drift(self, ledger, pool, catalog):
        await ledger.apply_movement(catalog.milk.id, MovementType.PURCHASE, Decimal("10"), 1)
        async with pool.transaction() as conn:
            await conn.execute(
                "UPDATE inventory_snapshots SET quantity = '12' WHERE product_id = ?",
                (catalog.milk.id,),
            )

        drift = await ledger.verify_balances()
        assert len(drift) == 1
        assert drift[0].product_id == catalog.milk.id
        assert drift[0].difference == Decimal("2")
