"""SQLite implementation of purchase order storage as used by receiving."""

import aiosqlite

from stockledger.config import get_logger
from stockledger.core.entities.purchase_order import (
    PurchaseOrder,
    PurchaseOrderItem,
    PurchaseOrderStatus,
)
from stockledger.core.interfaces.purchase_order_store import IPurchaseOrderStore
from stockledger.infrastructure.storage.sqlite.base import (
    SQLiteStore,
    from_db_datetime,
    from_db_decimal,
    to_db_datetime,
    to_db_decimal,
)

logger = get_logger(__name__)


class SQLitePurchaseOrderStore(SQLiteStore, IPurchaseOrderStore):
    """SQLite implementation of purchase orders and their lines."""

    async def create_purchase_order(self, order: PurchaseOrder) -> PurchaseOrder:
        """Create a purchase order with its items."""
        async with self._writing() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO purchase_orders (order_number, status, received_date)
                VALUES (?, ?, ?)
                """,
                (
                    order.order_number,
                    order.status.value,
                    to_db_datetime(order.received_date),
                ),
            )
            order.id = cursor.lastrowid

            for item in order.items:
                item.purchase_order_id = order.id
                item_cursor = await conn.execute(
                    """
                    INSERT INTO purchase_order_items (
                        purchase_order_id, product_id, quantity, received_quantity
                    ) VALUES (?, ?, ?, ?)
                    """,
                    (
                        order.id,
                        item.product_id,
                        to_db_decimal(item.quantity),
                        to_db_decimal(item.received_quantity),
                    ),
                )
                item.id = item_cursor.lastrowid

            logger.info(
                "purchase_order_created",
                purchase_order_id=order.id,
                order_number=order.order_number,
            )
            return order

    async def get_purchase_order(
        self,
        purchase_order_id: int,
        conn: aiosqlite.Connection | None = None,
    ) -> PurchaseOrder | None:
        """Get purchase order by ID with items."""
        async with self._reading(conn) as c:
            cursor = await c.execute(
                "SELECT * FROM purchase_orders WHERE id = ?", (purchase_order_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None

            item_cursor = await c.execute(
                "SELECT * FROM purchase_order_items WHERE purchase_order_id = ? ORDER BY id",
                (purchase_order_id,),
            )
            item_rows = await item_cursor.fetchall()

        return PurchaseOrder(
            id=row["id"],
            order_number=row["order_number"],
            status=PurchaseOrderStatus(row["status"]),
            received_date=from_db_datetime(row["received_date"]),
            items=[
                PurchaseOrderItem(
                    id=item["id"],
                    purchase_order_id=item["purchase_order_id"],
                    product_id=item["product_id"],
                    quantity=from_db_decimal(item["quantity"]),
                    received_quantity=from_db_decimal(item["received_quantity"]),
                )
                for item in item_rows
            ],
        )

    async def save_receipt(
        self,
        order: PurchaseOrder,
        conn: aiosqlite.Connection | None = None,
    ) -> PurchaseOrder:
        """Persist received quantities, status and received date."""
        async with self._writing(conn) as c:
            for item in order.items:
                await c.execute(
                    """
                    UPDATE purchase_order_items SET received_quantity = ?
                    WHERE id = ? AND purchase_order_id = ?
                    """,
                    (to_db_decimal(item.received_quantity), item.id, order.id),
                )
            await c.execute(
                "UPDATE purchase_orders SET status = ?, received_date = ? WHERE id = ?",
                (order.status.value, to_db_datetime(order.received_date), order.id),
            )
            logger.debug(
                "purchase_order_receipt_saved",
                purchase_order_id=order.id,
                status=order.status.value,
            )
            return order
