"""API 엔드포인트 패키지 - export only."""

from .routes import get_cache_store, get_product_service, health_router, product_router

__all__ = ["health_router", "product_router", "get_product_service", "get_cache_store"]
