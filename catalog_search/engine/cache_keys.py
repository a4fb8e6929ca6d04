"""Cache Key Encoder

정규화된 SearchCriteria로부터 canonical 캐시 키를 만듭니다.

형식 (필드 순서 고정):
    search:kw=<quoted>|min=<decimal>|max=<decimal>|stock=<1|0|>|page=<n>|size=<n>|sort=<token>

- 키워드는 percent-encoding 하므로 구분자('|', '=')와 충돌하지 않습니다.
- 값이 없는 필드는 빈 문자열로 표현합니다 (정규화된 키워드는 절대 빈 문자열이 아님).
- 가격은 Decimal 정규화 후 기록하므로 50 과 50.00 은 같은 키가 됩니다.
"""

import hashlib
from decimal import Decimal
from typing import Optional
from urllib.parse import quote, unquote
from uuid import UUID

from catalog_search.engine.criteria import SearchCriteria, SortOrder


SEARCH_NAMESPACE = "search:"
ITEM_NAMESPACE = "item:"

_FIELD_ORDER = ("kw", "min", "max", "stock", "page", "size", "sort")


def hash_string(text: str) -> str:
    """문자열을 SHA-256 hex 다이제스트로 변환 (64자)"""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def canonical_criteria(criteria: SearchCriteria) -> str:
    """SearchCriteria의 canonical 문자열 표현 (네임스페이스 제외)"""
    parts = {
        "kw": quote(criteria.keyword, safe="") if criteria.keyword is not None else "",
        "min": _format_decimal(criteria.min_price),
        "max": _format_decimal(criteria.max_price),
        "stock": _format_stock(criteria.in_stock),
        "page": str(criteria.page),
        "size": str(criteria.page_size),
        "sort": criteria.sort.value,
    }
    return "|".join(f"{name}={parts[name]}" for name in _FIELD_ORDER)


def encode_search_key(criteria: SearchCriteria, digest: bool = False) -> str:
    """검색 결과 캐시 키 생성

    Args:
        criteria: 정규화된 검색 조건
        digest: True면 canonical 문자열 대신 SHA-256 고정 길이 키 사용

    Returns:
        "search:" 네임스페이스 키
    """
    canonical = canonical_criteria(criteria)
    if digest:
        return f"{SEARCH_NAMESPACE}{hash_string(canonical)}"
    return f"{SEARCH_NAMESPACE}{canonical}"


def decode_search_key(key: str) -> SearchCriteria:
    """encode_search_key(digest=False)의 역변환

    Raises:
        ValueError: 네임스페이스/형식이 맞지 않는 키 (digest 키 포함)
    """
    if not key.startswith(SEARCH_NAMESPACE):
        raise ValueError(f"not a search cache key: {key!r}")

    body = key[len(SEARCH_NAMESPACE):]
    pairs = body.split("|")
    if len(pairs) != len(_FIELD_ORDER):
        raise ValueError(f"malformed search cache key: {key!r}")

    values: dict[str, str] = {}
    for expected, pair in zip(_FIELD_ORDER, pairs):
        name, sep, value = pair.partition("=")
        if not sep or name != expected:
            raise ValueError(f"malformed search cache key: {key!r}")
        values[name] = value

    return SearchCriteria(
        keyword=unquote(values["kw"]) if values["kw"] else None,
        min_price=Decimal(values["min"]) if values["min"] else None,
        max_price=Decimal(values["max"]) if values["max"] else None,
        in_stock={"1": True, "0": False}.get(values["stock"]),
        page=int(values["page"]),
        page_size=int(values["size"]),
        sort=SortOrder(values["sort"]),
    )


def encode_item_key(product_id: UUID | str) -> str:
    """단건 조회 캐시 키 생성"""
    return f"{ITEM_NAMESPACE}{str(product_id).lower()}"


def _format_decimal(value: Optional[Decimal]) -> str:
    if value is None:
        return ""
    if value == 0:
        return "0"
    return format(value.normalize(), "f")


def _format_stock(value: Optional[bool]) -> str:
    if value is None:
        return ""
    return "1" if value else "0"
