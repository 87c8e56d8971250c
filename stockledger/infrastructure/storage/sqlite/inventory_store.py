"""SQLite implementation of inventory snapshot and stock movement storage."""

from collections import defaultdict
from decimal import Decimal

import aiosqlite

from stockledger.config import get_logger
from stockledger.core.entities.inventory import (
    BalanceDrift,
    InventorySnapshot,
    MovementType,
    StockMovement,
)
from stockledger.core.entities.pagination import Page
from stockledger.core.entities.queries import InventoryQuery, MovementQuery
from stockledger.core.interfaces.inventory_store import IInventoryStore
from stockledger.infrastructure.storage.sqlite.base import (
    SQLiteStore,
    from_db_date,
    from_db_datetime,
    from_db_decimal,
    to_db_date,
    to_db_datetime,
    to_db_decimal,
)

logger = get_logger(__name__)

_QTY = "CAST(s.quantity AS REAL)"
_REORDER = "CAST(s.reorder_level AS REAL)"
_LOW_STOCK = f"{_QTY} > 0 AND {_QTY} <= {_REORDER}"
_OUT_OF_STOCK = f"{_QTY} <= 0"

_SNAPSHOT_SORT = {
    "product_name": "p.name",
    "quantity": _QTY,
    "reorder_level": _REORDER,
    "last_updated": "s.last_updated",
}

_MOVEMENT_SORT = {
    "timestamp": "m.timestamp",
    "quantity": "CAST(m.quantity AS REAL)",
    "type": "m.type",
}

_SNAPSHOT_SELECT = """
    SELECT s.*, p.name AS product_name
    FROM inventory_snapshots s
    JOIN products p ON p.id = s.product_id
"""


class SQLiteInventoryStore(SQLiteStore, IInventoryStore):
    """SQLite implementation of snapshot and movement storage."""

    async def get_snapshot(
        self,
        product_id: int,
        location_id: int | None = None,
        conn: aiosqlite.Connection | None = None,
    ) -> InventorySnapshot | None:
        """Get the snapshot for a product; ``location_id=None`` is store-wide."""
        async with self._reading(conn) as c:
            cursor = await c.execute(
                _SNAPSHOT_SELECT + " WHERE s.product_id = ? AND s.location_id IS ?",
                (product_id, location_id),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_snapshot(row)

    async def create_snapshot(
        self,
        snapshot: InventorySnapshot,
        conn: aiosqlite.Connection | None = None,
    ) -> InventorySnapshot:
        """Insert a new snapshot row."""
        async with self._writing(conn) as c:
            cursor = await c.execute(
                """
                INSERT INTO inventory_snapshots (
                    product_id, location_id, quantity, reorder_level,
                    earliest_expiry, last_updated
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    snapshot.product_id,
                    snapshot.location_id,
                    to_db_decimal(snapshot.quantity),
                    to_db_decimal(snapshot.reorder_level),
                    to_db_date(snapshot.earliest_expiry),
                    to_db_datetime(snapshot.last_updated),
                ),
            )
            snapshot.id = cursor.lastrowid
            logger.info(
                "inventory_snapshot_created",
                snapshot_id=snapshot.id,
                product_id=snapshot.product_id,
                location_id=snapshot.location_id,
            )
            return snapshot

    async def save_snapshot(
        self,
        snapshot: InventorySnapshot,
        conn: aiosqlite.Connection | None = None,
    ) -> InventorySnapshot:
        """Persist quantity, reorder level, earliest expiry and last update."""
        async with self._writing(conn) as c:
            await c.execute(
                """
                UPDATE inventory_snapshots SET
                    quantity = ?,
                    reorder_level = ?,
                    earliest_expiry = ?,
                    last_updated = ?
                WHERE id = ?
                """,
                (
                    to_db_decimal(snapshot.quantity),
                    to_db_decimal(snapshot.reorder_level),
                    to_db_date(snapshot.earliest_expiry),
                    to_db_datetime(snapshot.last_updated),
                    snapshot.id,
                ),
            )
            return snapshot

    async def add_movement(
        self,
        movement: StockMovement,
        conn: aiosqlite.Connection | None = None,
    ) -> StockMovement:
        """Record a stock movement."""
        async with self._writing(conn) as c:
            cursor = await c.execute(
                """
                INSERT INTO stock_movements (
                    product_id, location_id, type, quantity, reason,
                    user_id, reference_id, expiry_date, timestamp
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    movement.product_id,
                    movement.location_id,
                    movement.movement_type.value,
                    to_db_decimal(movement.quantity),
                    movement.reason,
                    movement.user_id,
                    movement.reference_id,
                    to_db_date(movement.expiry_date),
                    to_db_datetime(movement.timestamp),
                ),
            )
            movement.id = cursor.lastrowid
            logger.debug(
                "stock_movement_recorded",
                movement_id=movement.id,
                type=movement.movement_type.value,
                qty=str(movement.quantity),
            )
            return movement

    async def list_snapshots(self, query: InventoryQuery) -> Page[InventorySnapshot]:
        """List snapshots with search, stock-level filters, sorting and paging."""
        conditions: list[str] = []
        params: list = []

        if query.search:
            conditions.append("(p.name LIKE ? OR p.code LIKE ? OR p.barcode LIKE ?)")
            pattern = f"%{query.search}%"
            params.extend([pattern, pattern, pattern])
        if query.product_id is not None:
            conditions.append("s.product_id = ?")
            params.append(query.product_id)
        if query.location_id is not None:
            conditions.append("s.location_id = ?")
            params.append(query.location_id)
        if query.low_stock_only:
            conditions.append(_LOW_STOCK)
        if query.out_of_stock_only:
            conditions.append(_OUT_OF_STOCK)

        where = f" WHERE {' AND '.join(conditions)}" if conditions else ""
        order = f"{_SNAPSHOT_SORT[query.sort_by]} {query.sort_order.upper()}, s.id ASC"

        async with self._reading() as conn:
            total = await self._count(
                conn,
                "SELECT COUNT(*) FROM inventory_snapshots s "
                "JOIN products p ON p.id = s.product_id" + where,
                params,
            )
            cursor = await conn.execute(
                _SNAPSHOT_SELECT + where + f" ORDER BY {order} LIMIT ? OFFSET ?",
                [*params, query.page_size, query.offset],
            )
            rows = await cursor.fetchall()

        return Page(
            items=[self._row_to_snapshot(row) for row in rows],
            total=total,
            page=query.page,
            page_size=query.page_size,
        )

    async def count_low_stock(self, location_id: int | None = None) -> int:
        """Count snapshots with 0 < quantity <= reorder level."""
        return await self._count_where(_LOW_STOCK, location_id)

    async def count_out_of_stock(self, location_id: int | None = None) -> int:
        """Count snapshots with quantity <= 0."""
        return await self._count_where(_OUT_OF_STOCK, location_id)

    async def _count_where(self, condition: str, location_id: int | None) -> int:
        sql = f"SELECT COUNT(*) FROM inventory_snapshots s WHERE {condition}"
        params: list = []
        if location_id is not None:
            sql += " AND s.location_id = ?"
            params.append(location_id)
        async with self._reading() as conn:
            return await self._count(conn, sql, params)

    async def list_movements(self, query: MovementQuery) -> Page[StockMovement]:
        """List movements with filters, sorting and pagination."""
        conditions: list[str] = []
        params: list = []

        if query.product_id is not None:
            conditions.append("m.product_id = ?")
            params.append(query.product_id)
        if query.location_id is not None:
            conditions.append("m.location_id = ?")
            params.append(query.location_id)
        if query.movement_type is not None:
            conditions.append("m.type = ?")
            params.append(query.movement_type.value)
        if query.user_id is not None:
            conditions.append("m.user_id = ?")
            params.append(query.user_id)
        if query.start_date is not None:
            conditions.append("m.timestamp >= ?")
            params.append(to_db_datetime(query.start_date))
        if query.end_date is not None:
            conditions.append("m.timestamp <= ?")
            params.append(to_db_datetime(query.end_date))

        where = f" WHERE {' AND '.join(conditions)}" if conditions else ""
        direction = query.sort_order.upper()
        order = f"{_MOVEMENT_SORT[query.sort_by]} {direction}, m.id {direction}"

        async with self._reading() as conn:
            total = await self._count(
                conn, "SELECT COUNT(*) FROM stock_movements m" + where, params
            )
            cursor = await conn.execute(
                f"SELECT m.* FROM stock_movements m{where} ORDER BY {order} LIMIT ? OFFSET ?",
                [*params, query.page_size, query.offset],
            )
            rows = await cursor.fetchall()

        return Page(
            items=[self._row_to_movement(row) for row in rows],
            total=total,
            page=query.page,
            page_size=query.page_size,
        )

    async def find_drift(self) -> list[BalanceDrift]:
        """Compare every snapshot with the exact Decimal sum of its movements."""
        totals: dict[tuple[int, int | None], Decimal] = defaultdict(Decimal)
        snapshots: dict[tuple[int, int | None], Decimal] = {}

        async with self._reading() as conn:
            cursor = await conn.execute(
                "SELECT product_id, location_id, quantity FROM stock_movements"
            )
            async for row in cursor:
                totals[(row["product_id"], row["location_id"])] += from_db_decimal(
                    row["quantity"]
                )

            cursor = await conn.execute(
                "SELECT product_id, location_id, quantity FROM inventory_snapshots"
            )
            async for row in cursor:
                snapshots[(row["product_id"], row["location_id"])] = from_db_decimal(
                    row["quantity"]
                )

        drift = []
        for key in sorted(set(totals) | set(snapshots), key=lambda k: (k[0], k[1] or 0)):
            snapshot_quantity = snapshots.get(key, Decimal("0"))
            movement_total = totals.get(key, Decimal("0"))
            if snapshot_quantity != movement_total:
                drift.append(
                    BalanceDrift(
                        product_id=key[0],
                        location_id=key[1],
                        snapshot_quantity=snapshot_quantity,
                        movement_total=movement_total,
                    )
                )
        return drift

    @staticmethod
    def _row_to_snapshot(row: aiosqlite.Row) -> InventorySnapshot:
        """Convert a database row to an InventorySnapshot entity."""
        return InventorySnapshot(
            id=row["id"],
            product_id=row["product_id"],
            location_id=row["location_id"],
            quantity=from_db_decimal(row["quantity"]),
            reorder_level=from_db_decimal(row["reorder_level"]),
            earliest_expiry=from_db_date(row["earliest_expiry"]),
            last_updated=from_db_datetime(row["last_updated"]),
            product_name=row["product_name"],
        )

    @staticmethod
    def _row_to_movement(row: aiosqlite.Row) -> StockMovement:
        """Convert a database row to a StockMovement entity."""
        return StockMovement(
            id=row["id"],
            product_id=row["product_id"],
            location_id=row["location_id"],
            movement_type=MovementType(row["type"]),
            quantity=from_db_decimal(row["quantity"]),
            reason=row["reason"],
            user_id=row["user_id"],
            reference_id=row["reference_id"],
            expiry_date=from_db_date(row["expiry_date"]),
            timestamp=from_db_datetime(row["timestamp"]),
        )
