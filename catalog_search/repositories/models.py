"""데이터베이스 모델"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, Index, Integer, Numeric, String, Uuid
from sqlalchemy.types import DateTime, TypeDecorator

from catalog_search.core.database import Base


class UTCDateTime(TypeDecorator):
    """항상 UTC aware datetime으로 읽고 쓰는 컬럼 타입.

    SQLite처럼 timezone을 저장하지 못하는 백엔드에서도 naive 값이 새어나오지 않게 합니다.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Product(Base):
    """상품 테이블

    - id: UUID4 (128-bit random)
    - created_at은 생성 후 불변, updated_at은 수정 시 갱신 (updated_at >= created_at)
    - soft delete 없음
    """

    __tablename__ = "products"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False, index=True)
    description = Column(String(500), nullable=False, default="")
    category = Column(String(100), nullable=False, index=True)
    price = Column(Numeric(18, 2), nullable=False, index=True)
    stock_quantity = Column(Integer, nullable=False, default=0)
    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime(), nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_products_category_name", "category", "name"),
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        CheckConstraint("stock_quantity >= 0", name="ck_products_stock_non_negative"),
        CheckConstraint("updated_at >= created_at", name="ck_products_updated_after_created"),
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name={self.name}, price={self.price})>"
