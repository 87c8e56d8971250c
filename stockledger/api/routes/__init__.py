"""API route modules."""

from stockledger.api.routes.health import router as health_router
from stockledger.api.routes.inventory import router as inventory_router
from stockledger.api.routes.purchase_orders import router as purchase_orders_router
from stockledger.api.routes.transfers import router as transfers_router

__all__ = [
    "health_router",
    "inventory_router",
    "transfers_router",
    "purchase_orders_router",
]
