"""캐시 데코레이터 - ProductServiceProtocol을 감싸는 read-through 캐시

읽기:
    - 검색: "search:" 키, 절대 TTL + 슬라이딩 윈도우
    - 단건: "item:<id>" 키, 절대 TTL (존재하는 상품만 캐시)
쓰기 (create/update/delete):
    - 하위 서비스의 쓰기가 끝난 뒤 단건 키 제거(update/delete) + 모든 검색 키 무효화
    - 무효화는 쓰기 호출이 반환되기 전에 끝납니다.

캐시 오류는 로깅만 하고 하위 서비스 결과로 우회합니다. 하위 서비스 오류는 그대로 전파합니다.
"""
from typing import Any, Optional
from uuid import UUID

from pydantic import ValidationError

from catalog_search.core.logging import logger
from catalog_search.engine.cache_keys import (
    SEARCH_NAMESPACE,
    encode_item_key,
    encode_search_key,
)
from catalog_search.engine.normalizer import normalize
from catalog_search.schemas.product_schema import (
    PagedResult,
    ProductCreate,
    ProductUpdate,
    ProductView,
)
from catalog_search.services.interfaces import CacheStore, ProductServiceProtocol


ProductPage = PagedResult[ProductView]


class CachedProductService:
    """ProductServiceProtocol 구현체를 감싸는 캐시 데코레이터

    Args:
        inner: 실제 검색/쓰기를 수행하는 서비스
        cache: 캐시 저장소 (composition root에서 한 번 생성해 주입)
        search_ttl: 검색 결과 절대 TTL (초)
        search_sliding: 검색 결과 슬라이딩 윈도우 (초, search_ttl 상한)
        item_ttl: 단건 조회 절대 TTL (초)
        key_digest: True면 검색 키를 SHA-256 고정 길이로 사용
    """

    def __init__(
        self,
        inner: ProductServiceProtocol,
        cache: CacheStore,
        search_ttl: float = 60,
        search_sliding: Optional[float] = 30,
        item_ttl: float = 60,
        key_digest: bool = False,
    ):
        self.inner = inner
        self.cache = cache
        self.search_ttl = search_ttl
        self.search_sliding = search_sliding
        self.item_ttl = item_ttl
        self.key_digest = key_digest
        # 무효화 세대: 계산 도중 무효화가 일어나면 그 결과는 캐시하지 않음
        self._search_generation = 0

    async def search(self, criteria: Any) -> ProductPage:
        normalized = normalize(criteria)
        cache_key = encode_search_key(normalized, digest=self.key_digest)

        cached = self._read(cache_key)
        if cached is not None:
            try:
                result = ProductPage.model_validate(cached)
                logger.info(f"Cache HIT for search: {cache_key}")
                return result
            except ValidationError as e:
                logger.warning(f"Discarding unreadable search cache entry {cache_key}: {e}")
                self._remove(cache_key)

        logger.info(f"Cache MISS for search: {cache_key}")
        generation = self._search_generation
        result = await self.inner.search(normalized)

        if generation == self._search_generation:
            self._write(cache_key, result.model_dump(mode="json"), self.search_ttl, self.search_sliding)
            logger.info(
                f"Cached search result: {cache_key} "
                f"(items: {len(result.items)}, total_count: {result.total_count})"
            )
        else:
            logger.debug(f"Search cache invalidated during computation, not caching: {cache_key}")

        return result

    async def get_by_id(self, product_id: UUID) -> Optional[ProductView]:
        cache_key = encode_item_key(product_id)

        cached = self._read(cache_key)
        if cached is not None:
            try:
                product = ProductView.model_validate(cached)
                logger.debug(f"Cache HIT for product: {product_id}")
                return product
            except ValidationError as e:
                logger.warning(f"Discarding unreadable item cache entry {cache_key}: {e}")
                self._remove(cache_key)

        logger.debug(f"Cache MISS for product: {product_id}")
        product = await self.inner.get_by_id(product_id)

        if product is not None:
            self._write(cache_key, product.model_dump(mode="json"), self.item_ttl, None)

        return product

    async def create(self, data: ProductCreate) -> ProductView:
        try:
            result = await self.inner.create(data)
        finally:
            self._invalidate_search_caches()
        logger.debug(f"Product created and search caches invalidated: {result.id}")
        return result

    async def update(self, product_id: UUID, data: ProductUpdate) -> Optional[ProductView]:
        try:
            result = await self.inner.update(product_id, data)
        finally:
            self._remove(encode_item_key(product_id))
            self._invalidate_search_caches()
        logger.debug(f"Product updated and caches invalidated: {product_id}")
        return result

    async def delete(self, product_id: UUID) -> bool:
        try:
            result = await self.inner.delete(product_id)
        finally:
            self._remove(encode_item_key(product_id))
            self._invalidate_search_caches()
        logger.debug(f"Product deleted and caches invalidated: {product_id}")
        return result

    def _invalidate_search_caches(self) -> None:
        """모든 "search:" 엔트리 삭제 ("item:" 엔트리는 유지)"""
        self._search_generation += 1
        try:
            removed = self.cache.remove_by_prefix(SEARCH_NAMESPACE)
            logger.debug(f"Invalidated {removed} search cache entries")
        except Exception as e:
            logger.error(f"Search cache invalidation failed: {type(e).__name__}: {e}")

    def _read(self, key: str) -> Optional[Any]:
        try:
            return self.cache.get(key)
        except Exception as e:
            logger.warning(f"Cache get failed, bypassing cache: {type(e).__name__}: {e}")
            return None

    def _write(self, key: str, value: Any, ttl: float, sliding: Optional[float]) -> None:
        try:
            self.cache.set(key, value, ttl, sliding)
        except Exception as e:
            logger.warning(f"Cache set failed: {type(e).__name__}: {e}")

    def _remove(self, key: str) -> None:
        try:
            self.cache.remove(key)
        except Exception as e:
            logger.error(f"Cache remove failed: {type(e).__name__}: {e}")
