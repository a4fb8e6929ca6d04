"""Query Normalizer

느슨한 검색 입력(쿼리 파라미터, dict, 이미 정규화된 SearchCriteria)을
불변 SearchCriteria로 변환합니다. 실패하지 않는 순수 함수입니다.
"""

from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from catalog_search.engine.criteria import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_SORT,
    MAX_PAGE_SIZE,
    SearchCriteria,
    SortOrder,
)


_FIELDS = ("keyword", "min_price", "max_price", "in_stock", "page", "page_size", "sort")

_TRUE_TOKENS = {"true", "1", "yes", "y", "on"}
_FALSE_TOKENS = {"false", "0", "no", "n", "off"}


def normalize_keyword(keyword: Any) -> Optional[str]:
    """검색어 정규화: 앞뒤 공백 제거, 빈 문자열은 None, 소문자화"""
    if keyword is None:
        return None
    text = str(keyword).strip()
    if not text:
        return None
    return text.lower()


def normalize_page(page: Any) -> int:
    value = _to_int(page)
    if value is None or value < 1:
        return 1
    return value


def normalize_page_size(page_size: Any) -> int:
    value = _to_int(page_size)
    if value is None or value <= 0:
        return DEFAULT_PAGE_SIZE
    return min(value, MAX_PAGE_SIZE)


def parse_sort(sort: Any) -> SortOrder:
    """정렬 토큰 파싱 (대소문자 무시, '-'는 '_'로 취급)

    알 수 없는 값은 오류 대신 기본값(name)으로 대체합니다.
    """
    if isinstance(sort, SortOrder):
        return sort
    if sort is None:
        return DEFAULT_SORT
    token = str(sort).strip().lower().replace("-", "_")
    try:
        return SortOrder(token)
    except ValueError:
        return DEFAULT_SORT


def normalize_price(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    try:
        parsed = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return parsed if parsed.is_finite() else None


def normalize_stock_flag(value: Any) -> Optional[bool]:
    if value is None or isinstance(value, bool):
        return value
    token = str(value).strip().lower()
    if token in _TRUE_TOKENS:
        return True
    if token in _FALSE_TOKENS:
        return False
    return None


def normalize(raw: Any = None) -> SearchCriteria:
    """임의의 검색 입력을 SearchCriteria로 정규화

    Args:
        raw: SearchCriteria, Mapping, 또는 동일한 속성명을 가진 객체
             (예: ProductSearchQuery). None이면 기본 조건.

    Returns:
        SearchCriteria (normalize(normalize(x)) == normalize(x))
    """
    values = _extract(raw)
    return SearchCriteria(
        keyword=normalize_keyword(values["keyword"]),
        min_price=normalize_price(values["min_price"]),
        max_price=normalize_price(values["max_price"]),
        in_stock=normalize_stock_flag(values["in_stock"]),
        page=normalize_page(values["page"]),
        page_size=normalize_page_size(values["page_size"]),
        sort=parse_sort(values["sort"]),
    )


def _extract(raw: Any) -> dict[str, Any]:
    if raw is None:
        return {name: None for name in _FIELDS}
    if isinstance(raw, Mapping):
        return {name: raw.get(name) for name in _FIELDS}
    return {name: getattr(raw, name, None) for name in _FIELDS}


def _to_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None
