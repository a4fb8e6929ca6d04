"""서비스 계약 (structural typing)

CachedProductService는 ProductServiceProtocol 구현체를 감싸면서 자신도 같은 계약을 구현합니다.
상속이 아니라 합성으로 데코레이터를 구성합니다.
"""

from typing import Any, Optional, Protocol
from uuid import UUID

from catalog_search.engine.criteria import SearchCriteria
from catalog_search.schemas.product_schema import (
    PagedResult,
    ProductCreate,
    ProductUpdate,
    ProductView,
)


class ProductServiceProtocol(Protocol):
    """검색/조회/생성/수정/삭제 계약"""

    async def search(self, criteria: Any) -> PagedResult[ProductView]: ...

    async def get_by_id(self, product_id: UUID) -> Optional[ProductView]: ...

    async def create(self, data: ProductCreate) -> ProductView: ...

    async def update(self, product_id: UUID, data: ProductUpdate) -> Optional[ProductView]: ...

    async def delete(self, product_id: UUID) -> bool: ...


class CatalogStore(Protocol):
    """카탈로그 저장소 계약 (동기, thread-safe)

    search는 필터 → 전체 건수 → 정렬(키워드면 관련도) → 페이지네이션 순서를 지켜야 합니다.
    """

    def search(self, criteria: SearchCriteria) -> tuple[list[Any], int]: ...

    def get_by_id(self, product_id: UUID) -> Optional[Any]: ...

    def create(self, product: Any) -> Any: ...

    def update(self, product_id: UUID, fields: dict[str, Any]) -> Optional[Any]: ...

    def delete(self, product_id: UUID) -> bool: ...


class CacheStore(Protocol):
    """캐시 저장소 계약 (동기, 외부 동기화 없이 동시 호출 가능)

    값은 JSON 호환 dict/list 입니다. 구현체는 네임스페이스별 활성 키 인덱스를 직접 관리해야 합니다.
    """

    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any, ttl: float, sliding: Optional[float] = None) -> None: ...

    def remove(self, key: str) -> bool: ...

    def remove_by_prefix(self, prefix: str) -> int: ...

    def health_check(self) -> bool: ...

    def close(self) -> None: ...
