"""비즈니스 로직 서비스 - export only."""

from .impl import (
    CachedProductService,
    MemoryCacheStore,
    ProductService,
    RedisCacheStore,
    build_cache_store,
)
from .interfaces import CacheStore, CatalogStore, ProductServiceProtocol

__all__ = [
    "ProductService",
    "CachedProductService",
    "MemoryCacheStore",
    "RedisCacheStore",
    "build_cache_store",
    "ProductServiceProtocol",
    "CatalogStore",
    "CacheStore",
]
