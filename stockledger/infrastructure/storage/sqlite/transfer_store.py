"""SQLite implementation of stock transfer storage."""

from datetime import date

import aiosqlite

from stockledger.config import get_logger
from stockledger.core.entities.pagination import Page
from stockledger.core.entities.queries import TransferQuery
from stockledger.core.entities.transfer import (
    StockTransfer,
    StockTransferItem,
    TransferStatus,
)
from stockledger.core.interfaces.transfer_store import ITransferStore
from stockledger.infrastructure.storage.sqlite.base import (
    SQLiteStore,
    from_db_datetime,
    from_db_decimal,
    to_db_datetime,
    to_db_decimal,
)

logger = get_logger(__name__)

_TRANSFER_SORT = {
    "requested_at": "t.requested_at",
    "transfer_number": "t.transfer_number",
    "status": "t.status",
}


class SQLiteTransferStore(SQLiteStore, ITransferStore):
    """SQLite implementation of transfers and transfer items."""

    async def next_transfer_number(
        self,
        prefix: str,
        on: date,
        conn: aiosqlite.Connection | None = None,
    ) -> str:
        """
        Next number for the day: ``{prefix}-YYYYMMDD-NNNNN``.

        Must run inside the transaction that inserts the transfer so two
        writers cannot draw the same sequence.
        """
        day_prefix = f"{prefix}-{on.strftime('%Y%m%d')}-"
        async with self._reading(conn) as c:
            # Prefix matched literally; sequence compared as an integer
            cursor = await c.execute(
                """
                SELECT MAX(CAST(substr(transfer_number, ?) AS INTEGER)) AS last_sequence
                FROM stock_transfers
                WHERE substr(transfer_number, 1, ?) = ?
                  AND substr(transfer_number, ?) NOT GLOB '*[^0-9]*'
                """,
                (len(day_prefix) + 1, len(day_prefix), day_prefix, len(day_prefix) + 1),
            )
            row = await cursor.fetchone()

        sequence = (row["last_sequence"] or 0) + 1
        return f"{day_prefix}{sequence:05d}"

    async def create_transfer(
        self,
        transfer: StockTransfer,
        conn: aiosqlite.Connection | None = None,
    ) -> StockTransfer:
        """Insert a transfer with its items."""
        async with self._writing(conn) as c:
            cursor = await c.execute(
                """
                INSERT INTO stock_transfers (
                    transfer_number, from_location_id, to_location_id, status,
                    notes, requested_by_id, requested_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    transfer.transfer_number,
                    transfer.from_location_id,
                    transfer.to_location_id,
                    transfer.status.value,
                    transfer.notes,
                    transfer.requested_by_id,
                    to_db_datetime(transfer.requested_at),
                ),
            )
            transfer.id = cursor.lastrowid

            for item in transfer.items:
                item.transfer_id = transfer.id
                item_cursor = await c.execute(
                    """
                    INSERT INTO stock_transfer_items (
                        transfer_id, product_id, quantity, received_quantity, notes
                    ) VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        transfer.id,
                        item.product_id,
                        to_db_decimal(item.quantity),
                        to_db_decimal(item.received_quantity),
                        item.notes,
                    ),
                )
                item.id = item_cursor.lastrowid

            logger.info(
                "stock_transfer_created",
                transfer_id=transfer.id,
                transfer_number=transfer.transfer_number,
                items=len(transfer.items),
            )
            return transfer

    async def get_transfer(
        self,
        transfer_id: int,
        conn: aiosqlite.Connection | None = None,
    ) -> StockTransfer | None:
        """Get transfer by ID with items."""
        async with self._reading(conn) as c:
            cursor = await c.execute(
                "SELECT * FROM stock_transfers WHERE id = ?", (transfer_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            transfer = self._row_to_transfer(row)
            transfer.items = await self._load_items(c, transfer_id)
            return transfer

    async def save_transfer(
        self,
        transfer: StockTransfer,
        conn: aiosqlite.Connection | None = None,
    ) -> StockTransfer:
        """Persist status, actors, timestamps, notes and received quantities."""
        async with self._writing(conn) as c:
            await c.execute(
                """
                UPDATE stock_transfers SET
                    status = ?,
                    notes = ?,
                    approved_by_id = ?,
                    completed_by_id = ?,
                    approved_at = ?,
                    completed_at = ?
                WHERE id = ?
                """,
                (
                    transfer.status.value,
                    transfer.notes,
                    transfer.approved_by_id,
                    transfer.completed_by_id,
                    to_db_datetime(transfer.approved_at),
                    to_db_datetime(transfer.completed_at),
                    transfer.id,
                ),
            )
            for item in transfer.items:
                await c.execute(
                    """
                    UPDATE stock_transfer_items SET received_quantity = ?, notes = ?
                    WHERE id = ? AND transfer_id = ?
                    """,
                    (
                        to_db_decimal(item.received_quantity),
                        item.notes,
                        item.id,
                        transfer.id,
                    ),
                )
            logger.debug(
                "stock_transfer_saved",
                transfer_id=transfer.id,
                status=transfer.status.value,
            )
            return transfer

    async def list_transfers(self, query: TransferQuery) -> Page[StockTransfer]:
        """List transfers with filters, sorting and pagination."""
        conditions: list[str] = []
        params: list = []

        if query.search:
            conditions.append("(t.transfer_number LIKE ? OR t.notes LIKE ?)")
            pattern = f"%{query.search}%"
            params.extend([pattern, pattern])
        if query.from_location_id is not None:
            conditions.append("t.from_location_id = ?")
            params.append(query.from_location_id)
        if query.to_location_id is not None:
            conditions.append("t.to_location_id = ?")
            params.append(query.to_location_id)
        if query.status is not None:
            conditions.append("t.status = ?")
            params.append(query.status.value)
        if query.start_date is not None:
            conditions.append("t.requested_at >= ?")
            params.append(to_db_datetime(query.start_date))
        if query.end_date is not None:
            conditions.append("t.requested_at <= ?")
            params.append(to_db_datetime(query.end_date))

        where = f" WHERE {' AND '.join(conditions)}" if conditions else ""
        direction = query.sort_order.upper()
        order = f"{_TRANSFER_SORT[query.sort_by]} {direction}, t.id {direction}"

        async with self._reading() as conn:
            total = await self._count(
                conn, "SELECT COUNT(*) FROM stock_transfers t" + where, params
            )
            cursor = await conn.execute(
                f"SELECT t.* FROM stock_transfers t{where} ORDER BY {order} LIMIT ? OFFSET ?",
                [*params, query.page_size, query.offset],
            )
            rows = await cursor.fetchall()
            transfers = []
            for row in rows:
                transfer = self._row_to_transfer(row)
                transfer.items = await self._load_items(conn, transfer.id)
                transfers.append(transfer)

        return Page(
            items=transfers,
            total=total,
            page=query.page,
            page_size=query.page_size,
        )

    async def _load_items(
        self, conn: aiosqlite.Connection, transfer_id: int
    ) -> list[StockTransferItem]:
        cursor = await conn.execute(
            "SELECT * FROM stock_transfer_items WHERE transfer_id = ? ORDER BY id",
            (transfer_id,),
        )
        rows = await cursor.fetchall()
        return [
            StockTransferItem(
                id=row["id"],
                transfer_id=row["transfer_id"],
                product_id=row["product_id"],
                quantity=from_db_decimal(row["quantity"]),
                received_quantity=from_db_decimal(row["received_quantity"]),
                notes=row["notes"],
            )
            for row in rows
        ]

    @staticmethod
    def _row_to_transfer(row: aiosqlite.Row) -> StockTransfer:
        """Convert a database row to a StockTransfer entity (without items)."""
        return StockTransfer(
            id=row["id"],
            transfer_number=row["transfer_number"],
            from_location_id=row["from_location_id"],
            to_location_id=row["to_location_id"],
            status=TransferStatus(row["status"]),
            notes=row["notes"],
            requested_by_id=row["requested_by_id"],
            approved_by_id=row["approved_by_id"],
            completed_by_id=row["completed_by_id"],
            requested_at=from_db_datetime(row["requested_at"]),
            approved_at=from_db_datetime(row["approved_at"]),
            completed_at=from_db_datetime(row["completed_at"]),
        )
