"""SQLite implementation of the product and location catalog."""

import aiosqlite

from stockledger.config import get_logger
from stockledger.core.entities.catalog import Location, Product
from stockledger.core.interfaces.catalog_store import ICatalogStore
from stockledger.infrastructure.storage.sqlite.base import (
    SQLiteStore,
    from_db_decimal,
    to_db_decimal,
)

logger = get_logger(__name__)


class SQLiteCatalogStore(SQLiteStore, ICatalogStore):
    """SQLite implementation of catalog lookups."""

    async def get_product(
        self, product_id: int, conn: aiosqlite.Connection | None = None
    ) -> Product | None:
        """Get product by ID."""
        async with self._reading(conn) as c:
            cursor = await c.execute("SELECT * FROM products WHERE id = ?", (product_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return Product(
                id=row["id"],
                name=row["name"],
                code=row["code"],
                barcode=row["barcode"],
                unit=row["unit"],
                reorder_level=from_db_decimal(row["reorder_level"]),
            )

    async def get_location(
        self, location_id: int, conn: aiosqlite.Connection | None = None
    ) -> Location | None:
        """Get location by ID."""
        async with self._reading(conn) as c:
            cursor = await c.execute("SELECT * FROM locations WHERE id = ?", (location_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return Location(
                id=row["id"],
                name=row["name"],
                code=row["code"],
                is_active=bool(row["is_active"]),
            )

    async def create_product(self, product: Product) -> Product:
        """Create a product."""
        async with self._writing() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO products (name, code, barcode, unit, reorder_level)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    product.name,
                    product.code,
                    product.barcode,
                    product.unit,
                    to_db_decimal(product.reorder_level),
                ),
            )
            product.id = cursor.lastrowid
            logger.info("product_created", product_id=product.id, name=product.name)
            return product

    async def create_location(self, location: Location) -> Location:
        """Create a location."""
        async with self._writing() as conn:
            cursor = await conn.execute(
                "INSERT INTO locations (name, code, is_active) VALUES (?, ?, ?)",
                (location.name, location.code, int(location.is_active)),
            )
            location.id = cursor.lastrowid
            logger.info("location_created", location_id=location.id, name=location.name)
            return location
