"""Services implementation package."""

from .cache_store import MemoryCacheStore, RedisCacheStore, build_cache_store
from .cached_product_service import CachedProductService
from .product_service import ProductService

__all__ = [
    "ProductService",
    "CachedProductService",
    "MemoryCacheStore",
    "RedisCacheStore",
    "build_cache_store",
]
