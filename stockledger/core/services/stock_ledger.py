"""
Ledger Core.

Single write path for on-hand quantity. Every change updates the
(product, location) snapshot and appends one movement in the same
transaction, so a snapshot always equals the sum of its movements.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date
from decimal import Decimal
from typing import Any

from stockledger.config import get_logger
from stockledger.core.entities.catalog import Product
from stockledger.core.entities.inventory import (
    BalanceDrift,
    InventorySnapshot,
    LedgerEntry,
    MovementType,
    StockMovement,
    utcnow,
)
from stockledger.core.exceptions import (
    LocationNotFoundError,
    ProductNotFoundError,
    ValidationError,
)
from stockledger.core.interfaces.catalog_store import ICatalogStore
from stockledger.core.interfaces.inventory_store import IInventoryStore

logger = get_logger(__name__)


class StockLedger:
    """
    Applies signed quantity changes to inventory snapshots.

    Business rules (sign conventions, negative-stock policy, state machines)
    belong to the workflows calling this class. The ledger only guarantees
    that snapshot and movement are written together.
    """

    def __init__(
        self,
        inventory_store: IInventoryStore,
        catalog_store: ICatalogStore,
        default_reorder_level: Decimal = Decimal("0"),
    ):
        self.inventory_store = inventory_store
        self.catalog_store = catalog_store
        self.default_reorder_level = default_reorder_level

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Any]:
        """Write transaction that workflows share across several ledger calls."""
        async with self.inventory_store.transaction() as conn:
            yield conn

    async def apply_movement(
        self,
        product_id: int,
        movement_type: MovementType,
        quantity: Decimal,
        user_id: int | None,
        *,
        location_id: int | None = None,
        reason: str | None = None,
        reference_id: int | None = None,
        expiry_date: date | None = None,
        conn: Any = None,
    ) -> LedgerEntry:
        """
        Add ``quantity`` (already signed) to the snapshot and record it.

        Joins the transaction on ``conn`` when given, otherwise opens one.

        Raises:
            ValidationError: If quantity is zero.
            ProductNotFoundError: If the product does not exist.
            LocationNotFoundError: If a location is given and does not exist.
        """
        quantity = Decimal(quantity)
        if quantity == 0:
            raise ValidationError("quantity", "Quantity must be non-zero", quantity)

        if conn is None:
            async with self.transaction() as tx:
                return await self._apply(
                    product_id, movement_type, quantity, user_id,
                    location_id, reason, reference_id, expiry_date, tx,
                )
        return await self._apply(
            product_id, movement_type, quantity, user_id,
            location_id, reason, reference_id, expiry_date, conn,
        )

    async def _apply(
        self,
        product_id: int,
        movement_type: MovementType,
        quantity: Decimal,
        user_id: int | None,
        location_id: int | None,
        reason: str | None,
        reference_id: int | None,
        expiry_date: date | None,
        conn: Any,
    ) -> LedgerEntry:
        product = await self._require_product(product_id, conn)
        if location_id is not None:
            await self._require_location(location_id, conn)

        snapshot = await self.inventory_store.get_snapshot(product_id, location_id, conn=conn)
        if snapshot is None:
            snapshot = await self.inventory_store.create_snapshot(
                InventorySnapshot(
                    product_id=product_id,
                    location_id=location_id,
                    reorder_level=self._reorder_level_for(product),
                ),
                conn=conn,
            )

        now = utcnow()
        snapshot.quantity += quantity
        snapshot.last_updated = now
        if quantity > 0 and expiry_date is not None:
            if snapshot.earliest_expiry is None or expiry_date < snapshot.earliest_expiry:
                snapshot.earliest_expiry = expiry_date

        snapshot = await self.inventory_store.save_snapshot(snapshot, conn=conn)
        movement = await self.inventory_store.add_movement(
            StockMovement(
                product_id=product_id,
                location_id=location_id,
                movement_type=movement_type,
                quantity=quantity,
                reason=reason,
                user_id=user_id,
                reference_id=reference_id,
                expiry_date=expiry_date,
                timestamp=now,
            ),
            conn=conn,
        )
        snapshot.product_name = snapshot.product_name or product.name

        logger.info(
            "stock_movement_applied",
            movement_id=movement.id,
            product_id=product_id,
            location_id=location_id,
            type=movement_type.value,
            qty=str(quantity),
            balance=str(snapshot.quantity),
        )
        return LedgerEntry(snapshot=snapshot, movement=movement)

    async def initialize_snapshot(
        self,
        product_id: int,
        location_id: int | None = None,
        reorder_level: Decimal | None = None,
    ) -> InventorySnapshot:
        """Create a zero-quantity snapshot if none exists; return the current one."""
        async with self.transaction() as conn:
            product = await self._require_product(product_id, conn)
            if location_id is not None:
                await self._require_location(location_id, conn)

            existing = await self.inventory_store.get_snapshot(product_id, location_id, conn=conn)
            if existing is not None:
                return existing

            snapshot = await self.inventory_store.create_snapshot(
                InventorySnapshot(
                    product_id=product_id,
                    location_id=location_id,
                    reorder_level=(
                        reorder_level
                        if reorder_level is not None
                        else self._reorder_level_for(product)
                    ),
                    product_name=product.name,
                ),
                conn=conn,
            )
            logger.info(
                "inventory_snapshot_initialized",
                product_id=product_id,
                location_id=location_id,
            )
            return snapshot

    async def set_reorder_level(
        self,
        product_id: int,
        reorder_level: Decimal,
        location_id: int | None = None,
    ) -> InventorySnapshot:
        """Change the low-stock threshold. Quantity and history are untouched."""
        reorder_level = Decimal(reorder_level)
        if reorder_level < 0:
            raise ValidationError(
                "reorder_level", "Reorder level cannot be negative", reorder_level
            )

        async with self.transaction() as conn:
            product = await self._require_product(product_id, conn)
            if location_id is not None:
                await self._require_location(location_id, conn)

            snapshot = await self.inventory_store.get_snapshot(product_id, location_id, conn=conn)
            if snapshot is None:
                snapshot = await self.inventory_store.create_snapshot(
                    InventorySnapshot(
                        product_id=product_id,
                        location_id=location_id,
                        reorder_level=reorder_level,
                    ),
                    conn=conn,
                )
            else:
                snapshot.reorder_level = reorder_level
                snapshot.last_updated = utcnow()
                snapshot = await self.inventory_store.save_snapshot(snapshot, conn=conn)

            snapshot.product_name = snapshot.product_name or product.name
            logger.info(
                "reorder_level_updated",
                product_id=product_id,
                location_id=location_id,
                reorder_level=str(reorder_level),
            )
            return snapshot

    async def verify_balances(self) -> list[BalanceDrift]:
        """Snapshots that disagree with their movement history. Read-only."""
        drift = await self.inventory_store.find_drift()
        if drift:
            logger.warning(
                "inventory_balance_drift",
                count=len(drift),
                keys=[(d.product_id, d.location_id) for d in drift],
            )
        return drift

    async def _require_product(self, product_id: int, conn: Any) -> Product:
        product = await self.catalog_store.get_product(product_id, conn=conn)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    async def _require_location(self, location_id: int, conn: Any) -> None:
        if await self.catalog_store.get_location(location_id, conn=conn) is None:
            raise LocationNotFoundError(location_id)

    def _reorder_level_for(self, product: Product) -> Decimal:
        return product.reorder_level or self.default_reorder_level
