"""
Stock Status Classifier.

Derives low-stock and out-of-stock sets from current snapshots. Reads the
snapshot table only; movement history is never replayed here.
"""

from decimal import Decimal

from stockledger.config import get_logger
from stockledger.core.entities.inventory import InventorySnapshot, StockStatus
from stockledger.core.entities.pagination import Page
from stockledger.core.entities.queries import InventoryQuery
from stockledger.core.interfaces.inventory_store import IInventoryStore

logger = get_logger(__name__)


def classify(quantity: Decimal, reorder_level: Decimal) -> StockStatus:
    """
    Classify an on-hand quantity against its reorder threshold.

    - OUT_OF_STOCK: quantity <= 0
    - LOW_STOCK: 0 < quantity <= reorder_level
    - IN_STOCK: otherwise
    """
    if quantity <= 0:
        return StockStatus.OUT_OF_STOCK
    if quantity <= reorder_level:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


def classify_snapshot(snapshot: InventorySnapshot) -> StockStatus:
    return classify(snapshot.quantity, snapshot.reorder_level)


class StockStatusService:
    """Read-side listing and dashboard counts over inventory snapshots."""

    def __init__(self, inventory_store: IInventoryStore) -> None:
        self._store = inventory_store

    async def get_snapshot(
        self, product_id: int, location_id: int | None = None
    ) -> InventorySnapshot | None:
        return await self._store.get_snapshot(product_id, location_id)

    async def list_inventory(self, query: InventoryQuery) -> Page[InventorySnapshot]:
        """List snapshots; low/out-of-stock filters are evaluated in SQL."""
        return await self._store.list_snapshots(query)

    async def low_stock_items(self, query: InventoryQuery) -> Page[InventorySnapshot]:
        return await self._store.list_snapshots(
            query.model_copy(update={"low_stock_only": True, "out_of_stock_only": False})
        )

    async def out_of_stock_items(self, query: InventoryQuery) -> Page[InventorySnapshot]:
        return await self._store.list_snapshots(
            query.model_copy(update={"out_of_stock_only": True, "low_stock_only": False})
        )

    async def count_low_stock(self, location_id: int | None = None) -> int:
        return await self._store.count_low_stock(location_id)

    async def count_out_of_stock(self, location_id: int | None = None) -> int:
        return await self._store.count_out_of_stock(location_id)

    async def status_counts(self, location_id: int | None = None) -> dict[str, int]:
        """Badge counts for the dashboard."""
        counts = {
            StockStatus.LOW_STOCK.value: await self.count_low_stock(location_id),
            StockStatus.OUT_OF_STOCK.value: await self.count_out_of_stock(location_id),
        }
        logger.debug("stock_status_counts", location_id=location_id, **counts)
        return counts
