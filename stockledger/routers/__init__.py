from stockledger.routers.audit import router as audit_router
from stockledger.routers.feature import router as feature_router
from stockledger.routers.health import router as health_router
from stockledger.routers.inventory import router as inventory_router
from stockledger.routers.products import router as products_router

__all__ = [
    "audit_router",
    "feature_router",
    "health_router",
    "inventory_router",
    "products_router",
]
