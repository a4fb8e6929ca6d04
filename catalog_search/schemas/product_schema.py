"""Pydantic 스키마 정의 (요청 검증 + 응답 뷰 모델)"""
import math
from datetime import datetime
from decimal import Decimal
from typing import Generic, List, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


T = TypeVar("T")


class ProductInput(BaseModel):
    """상품 생성/수정 공통 입력 (입력 검증)"""
    name: str = Field(..., min_length=1, max_length=200, description="상품명")
    description: str = Field("", max_length=500, description="상품 설명")
    category: str = Field(..., min_length=1, max_length=100, description="카테고리")
    price: Decimal = Field(..., ge=0, max_digits=18, decimal_places=2, description="판매가")
    stock_quantity: int = Field(..., ge=0, description="재고 수량 (0이면 품절)")

    @field_validator("name", "category")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """공백만으로 구성된 값 거부"""
        if not v.strip():
            raise ValueError("공백만으로 구성될 수 없습니다")
        return v.strip()

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str) -> str:
        return v.strip()


class ProductCreate(ProductInput):
    """상품 생성 요청"""


class ProductUpdate(ProductInput):
    """상품 수정 요청 (전체 필드 교체, id/타임스탬프는 서버 관리)"""


class ProductView(BaseModel):
    """API로 노출되는 상품 뷰 모델"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str
    category: str
    price: Decimal
    stock_quantity: int
    created_at: datetime
    updated_at: datetime


class PagedResult(BaseModel, Generic[T]):
    """페이지 단위 결과

    - total_count: 페이지네이션 적용 전 전체 매칭 건수
    - total_pages: ceil(total_count / page_size)
    """
    items: List[T] = Field(default_factory=list)
    total_count: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)

    @computed_field
    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size)

    @computed_field
    @property
    def has_previous_page(self) -> bool:
        return self.page > 1

    @computed_field
    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages


class ProductSearchQuery(BaseModel):
    """검색 요청 원본 (정규화 전)

    page/page_size/sort는 일부러 느슨하게 받고 Query Normalizer가 보정합니다.
    """
    keyword: Optional[str] = Field(None, max_length=200, description="이름/설명/카테고리 부분 일치")
    min_price: Optional[Decimal] = Field(None, ge=0, description="최소 가격 (포함)")
    max_price: Optional[Decimal] = Field(None, ge=0, description="최대 가격 (포함)")
    in_stock: Optional[bool] = Field(None, description="true=재고 있음, false=품절")
    page: Optional[int] = Field(None, description="페이지 번호 (1부터)")
    page_size: Optional[int] = Field(None, description="페이지 크기 (최대 100)")
    sort: Optional[str] = Field(None, max_length=50, description="name | price | created | stock (+ _desc)")


class HealthResponse(BaseModel):
    """헬스 체크 응답"""
    status: str
    timestamp: datetime
    version: str
    cache: str
    database: str
