"""Abstract interface for inventory snapshot and stock movement storage."""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from typing import Any

from stockledger.core.entities.inventory import (
    BalanceDrift,
    InventorySnapshot,
    StockMovement,
)
from stockledger.core.entities.pagination import Page
from stockledger.core.entities.queries import InventoryQuery, MovementQuery


class IInventoryStore(ABC):
    """
    Interface for snapshot and movement persistence.

    Methods taking ``conn`` run on that open transaction when one is given
    (as yielded by ``transaction()``), otherwise on their own connection.
    """

    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager[Any]:
        """Open a write transaction shared by several store calls."""
        pass

    @abstractmethod
    async def get_snapshot(
        self, product_id: int, location_id: int | None = None, conn: Any = None
    ) -> InventorySnapshot | None:
        """Get the snapshot for a product, store-wide or at one location."""
        pass

    @abstractmethod
    async def create_snapshot(
        self, snapshot: InventorySnapshot, conn: Any = None
    ) -> InventorySnapshot:
        """Insert a new snapshot row."""
        pass

    @abstractmethod
    async def save_snapshot(
        self, snapshot: InventorySnapshot, conn: Any = None
    ) -> InventorySnapshot:
        """Persist quantity, reorder level, expiry and last-updated of a snapshot."""
        pass

    @abstractmethod
    async def add_movement(
        self, movement: StockMovement, conn: Any = None
    ) -> StockMovement:
        """Append a stock movement."""
        pass

    @abstractmethod
    async def list_snapshots(self, query: InventoryQuery) -> Page[InventorySnapshot]:
        """List snapshots with filters, sorting and pagination."""
        pass

    @abstractmethod
    async def count_low_stock(self, location_id: int | None = None) -> int:
        """Count snapshots with 0 < quantity <= reorder level."""
        pass

    @abstractmethod
    async def count_out_of_stock(self, location_id: int | None = None) -> int:
        """Count snapshots with quantity <= 0."""
        pass

    @abstractmethod
    async def list_movements(self, query: MovementQuery) -> Page[StockMovement]:
        """List movements with filters, sorting and pagination."""
        pass

    @abstractmethod
    async def find_drift(self) -> list[BalanceDrift]:
        """Snapshots whose quantity differs from the sum of their movements."""
        pass
