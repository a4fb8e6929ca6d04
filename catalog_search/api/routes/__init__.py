"""API routes package."""

from .health_routes import router as health_router
from .product_routes import get_cache_store, get_product_service, router as product_router

__all__ = ["health_router", "product_router", "get_product_service", "get_cache_store"]
