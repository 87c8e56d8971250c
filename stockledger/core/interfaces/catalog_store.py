"""Abstract interface for the product and location catalog."""

from abc import ABC, abstractmethod
from typing import Any

from stockledger.core.entities.catalog import Location, Product


class ICatalogStore(ABC):
    """Read access to products and locations, plus creation for seeding."""

    @abstractmethod
    async def get_product(self, product_id: int, conn: Any = None) -> Product | None:
        """Get product by ID."""
        pass

    @abstractmethod
    async def get_location(self, location_id: int, conn: Any = None) -> Location | None:
        """Get location by ID."""
        pass

    @abstractmethod
    async def create_product(self, product: Product) -> Product:
        """Create a product."""
        pass

    @abstractmethod
    async def create_location(self, location: Location) -> Location:
        """Create a location."""
        pass
