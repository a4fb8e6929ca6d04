"""Search Criteria - Normalized Query Value

검색 요청을 정규화한 불변 값 객체와 정렬 토큰 정의입니다.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional


DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class SortOrder(str, Enum):
    """정렬 기준

    키워드가 있으면 무시되고 관련도 랭킹이 우선합니다.
    """

    NAME = "name"
    NAME_DESC = "name_desc"
    PRICE = "price"
    PRICE_DESC = "price_desc"
    CREATED = "created"
    CREATED_DESC = "created_desc"
    STOCK = "stock"
    STOCK_DESC = "stock_desc"

    @property
    def is_descending(self) -> bool:
        return self.value.endswith("_desc")

    @property
    def field(self) -> str:
        """정렬 대상 필드명 (name | price | created | stock)"""
        return self.value.removesuffix("_desc")


DEFAULT_SORT = SortOrder.NAME


@dataclass(frozen=True)
class SearchCriteria:
    """정규화된 검색 조건

    Attributes:
        keyword: 소문자화된 검색어 (없으면 None)
        min_price: 최소 가격 (포함)
        max_price: 최대 가격 (포함)
        in_stock: True=재고 있음, False=품절, None=필터 없음
        page: 1부터 시작하는 페이지 번호
        page_size: 1~MAX_PAGE_SIZE
        sort: 정렬 기준 (keyword가 있으면 무시)
    """

    keyword: Optional[str] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    in_stock: Optional[bool] = None
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    sort: SortOrder = DEFAULT_SORT

    @property
    def has_keyword(self) -> bool:
        return self.keyword is not None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size
