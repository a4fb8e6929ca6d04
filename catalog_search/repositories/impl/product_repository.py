"""상품 리포지토리 - Catalog Store 구현 (SQLAlchemy)"""
from typing import Any, Callable, List, Optional
from uuid import UUID

from sqlalchemy import or_, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from catalog_search.core.exceptions import DatabaseException, DatabaseQueryException
from catalog_search.core.logging import logger, sanitize_for_log
from catalog_search.engine.criteria import SearchCriteria, SortOrder
from catalog_search.engine.ranking import relevance_tier_expression
from catalog_search.repositories.models import Product


_SORT_COLUMNS = {
    "name": Product.name,
    "price": Product.price,
    "created": Product.created_at,
    "stock": Product.stock_quantity,
}

# 수정 가능한 필드 (id/created_at은 불변)
_UPDATABLE_FIELDS = ("name", "description", "category", "price", "stock_quantity", "updated_at")


class ProductRepository:
    """상품 데이터 액세스 레이어

    호출마다 자체 세션을 열고 닫으므로 여러 스레드에서 동시에 사용할 수 있습니다.
    반환되는 Product는 세션이 닫힌 뒤에도 속성 접근이 가능한 상태입니다.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get_by_id(self, product_id: UUID) -> Optional[Product]:
        """ID로 상품 조회"""
        try:
            with self.session_factory() as db:
                return db.get(Product, product_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load product {product_id}: {e}")
            raise DatabaseQueryException("get_by_id", str(e)) from e

    def create(self, product: Product) -> Product:
        """상품 생성"""
        with self.session_factory() as db:
            try:
                db.add(product)
                db.commit()
                db.refresh(product)
                logger.info(f"Product created: {product.id}")
                return product
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Failed to create product: {e}")
                raise DatabaseException(f"Failed to create product: {e}")

    def update(self, product_id: UUID, fields: dict[str, Any]) -> Optional[Product]:
        """상품 수정 (없으면 None)

        updated_at은 created_at보다 과거가 되지 않도록 보정합니다.
        """
        with self.session_factory() as db:
            try:
                product = db.get(Product, product_id)
                if product is None:
                    return None

                for field, value in fields.items():
                    if field in _UPDATABLE_FIELDS:
                        setattr(product, field, value)

                if product.updated_at is not None and product.updated_at < product.created_at:
                    product.updated_at = product.created_at

                db.commit()
                db.refresh(product)
                logger.info(f"Product updated: {product_id}")
                return product
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Failed to update product {product_id}: {e}")
                raise DatabaseException(f"Failed to update product: {e}")

    def delete(self, product_id: UUID) -> bool:
        """상품 삭제 (없으면 False)"""
        with self.session_factory() as db:
            try:
                product = db.get(Product, product_id)
                if product is None:
                    return False
                db.delete(product)
                db.commit()
                logger.info(f"Product deleted: {product_id}")
                return True
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Failed to delete product {product_id}: {e}")
                raise DatabaseException(f"Failed to delete product: {e}")

    def search(self, criteria: SearchCriteria) -> tuple[List[Product], int]:
        """필터/정렬/페이지네이션 검색

        1. 조건 결합 (키워드는 이름/설명/카테고리 OR, 나머지는 AND)
        2. 페이지네이션 전 전체 건수
        3. 정렬: 키워드가 있으면 관련도 tier, 없으면 sort 기준 (+ 이름, id 순 보조 정렬)
        4. offset/limit

        Returns:
            (현재 페이지 상품 목록, 전체 매칭 건수)
        """
        try:
            with self.session_factory() as db:
                query = self._apply_filters(db.query(Product), criteria)
                total_count = query.order_by(None).count()

                if criteria.offset >= total_count:
                    return [], total_count

                rows = (
                    query.order_by(*self._ordering(criteria))
                    .offset(criteria.offset)
                    .limit(criteria.page_size)
                    .all()
                )
                logger.debug(
                    f"Catalog search: keyword={sanitize_for_log(criteria.keyword)}, "
                    f"total={total_count}, returned={len(rows)}"
                )
                return rows, total_count
        except SQLAlchemyError as e:
            logger.error(f"Catalog search failed: {e}")
            raise DatabaseQueryException("search", str(e)) from e

    @staticmethod
    def _apply_filters(query: Query, criteria: SearchCriteria) -> Query:
        if criteria.has_keyword:
            keyword = criteria.keyword
            query = query.filter(
                or_(
                    func.lower(Product.name).contains(keyword, autoescape=True),
                    func.lower(Product.description).contains(keyword, autoescape=True),
                    func.lower(Product.category).contains(keyword, autoescape=True),
                )
            )

        if criteria.min_price is not None:
            query = query.filter(Product.price >= criteria.min_price)

        if criteria.max_price is not None:
            query = query.filter(Product.price <= criteria.max_price)

        if criteria.in_stock is True:
            query = query.filter(Product.stock_quantity > 0)
        elif criteria.in_stock is False:
            query = query.filter(Product.stock_quantity == 0)

        return query

    @staticmethod
    def _ordering(criteria: SearchCriteria) -> list:
        if criteria.has_keyword:
            primary = relevance_tier_expression(criteria.keyword, Product.name, Product.category)
            return [primary.asc(), Product.name.asc(), Product.id.asc()]

        sort: SortOrder = criteria.sort
        column = _SORT_COLUMNS[sort.field]
        primary = column.desc() if sort.is_descending else column.asc()
        return [primary, Product.name.asc(), Product.id.asc()]
