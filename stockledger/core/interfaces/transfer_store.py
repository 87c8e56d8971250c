"""Abstract interface for stock transfer storage."""

from abc import ABC, abstractmethod
from datetime import date
from typing import Any

from stockledger.core.entities.pagination import Page
from stockledger.core.entities.queries import TransferQuery
from stockledger.core.entities.transfer import StockTransfer


class ITransferStore(ABC):
    """Interface for stock transfers and their items."""

    @abstractmethod
    async def next_transfer_number(
        self, prefix: str, on: date, conn: Any = None
    ) -> str:
        """Next free transfer number for the day, e.g. ST-20240115-00001."""
        pass

    @abstractmethod
    async def create_transfer(
        self, transfer: StockTransfer, conn: Any = None
    ) -> StockTransfer:
        """Insert a transfer with its items."""
        pass

    @abstractmethod
    async def get_transfer(
        self, transfer_id: int, conn: Any = None
    ) -> StockTransfer | None:
        """Get transfer by ID with items."""
        pass

    @abstractmethod
    async def save_transfer(
        self, transfer: StockTransfer, conn: Any = None
    ) -> StockTransfer:
        """Persist status, actors, timestamps, notes and received quantities."""
        pass

    @abstractmethod
    async def list_transfers(self, query: TransferQuery) -> Page[StockTransfer]:
        """List transfers with filters, sorting and pagination."""
        pass
