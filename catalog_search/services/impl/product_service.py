"""상품 서비스 - Search Engine + 쓰기 경로

- 검색 조건 정규화는 Query Normalizer
- 필터/정렬/페이지네이션은 CatalogStore(ProductRepository)
- 결과 조립(뷰 모델 투영 + PagedResult)은 이 서비스

저장소 호출은 블로킹이므로 asyncio.to_thread로 실행합니다.
취소(CancelledError)나 저장소 예외는 잡지 않고 그대로 전파합니다.
"""
import asyncio
import uuid
from typing import Any, Optional
from uuid import UUID

from catalog_search.core.logging import logger, sanitize_for_log
from catalog_search.engine.normalizer import normalize
from catalog_search.repositories.models import Product, utcnow
from catalog_search.schemas.product_schema import (
    PagedResult,
    ProductCreate,
    ProductUpdate,
    ProductView,
)
from catalog_search.services.interfaces import CatalogStore


class ProductService:
    """상품 검색/CRUD 서비스 (캐시 없음)"""

    def __init__(self, repository: CatalogStore):
        self.repository = repository

    async def search(self, criteria: Any) -> PagedResult[ProductView]:
        """검색 조건으로 페이지 결과 생성

        키워드가 있으면 sort는 무시되고 관련도 순으로 정렬됩니다.
        """
        normalized = normalize(criteria)
        rows, total_count = await asyncio.to_thread(self.repository.search, normalized)

        logger.debug(
            f"Search: keyword={sanitize_for_log(normalized.keyword)}, page={normalized.page}, "
            f"page_size={normalized.page_size}, total={total_count}"
        )

        return PagedResult[ProductView](
            items=[self._to_view(row) for row in rows],
            total_count=total_count,
            page=normalized.page,
            page_size=normalized.page_size,
        )

    async def get_by_id(self, product_id: UUID) -> Optional[ProductView]:
        product = await asyncio.to_thread(self.repository.get_by_id, product_id)
        return self._to_view(product) if product is not None else None

    async def create(self, data: ProductCreate) -> ProductView:
        now = utcnow()
        product = Product(
            id=uuid.uuid4(),
            name=data.name,
            description=data.description,
            category=data.category,
            price=data.price,
            stock_quantity=data.stock_quantity,
            created_at=now,
            updated_at=now,
        )
        created = await asyncio.to_thread(self.repository.create, product)
        return self._to_view(created)

    async def update(self, product_id: UUID, data: ProductUpdate) -> Optional[ProductView]:
        """전체 필드 교체 (없으면 None)"""
        fields = data.model_dump()
        fields["updated_at"] = utcnow()
        updated = await asyncio.to_thread(self.repository.update, product_id, fields)
        return self._to_view(updated) if updated is not None else None

    async def delete(self, product_id: UUID) -> bool:
        return await asyncio.to_thread(self.repository.delete, product_id)

    @staticmethod
    def _to_view(product: Any) -> ProductView:
        return ProductView.model_validate(product)
