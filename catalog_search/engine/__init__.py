"""Engine Layer - Query Normalization, Ranking and Cache Keys

- SearchCriteria / SortOrder: 정규화된 검색 조건
- normalize: 느슨한 입력 → SearchCriteria
- relevance_tier / relevance_tier_expression: 키워드 관련도 랭킹
- encode_search_key / encode_item_key: 캐시 키 인코딩
"""

from .cache_keys import (
    ITEM_NAMESPACE,
    SEARCH_NAMESPACE,
    decode_search_key,
    encode_item_key,
    encode_search_key,
)
from .criteria import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, SearchCriteria, SortOrder
from .normalizer import normalize
from .ranking import rank_products, relevance_tier, relevance_tier_expression

__all__ = [
    "SearchCriteria",
    "SortOrder",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "normalize",
    "relevance_tier",
    "relevance_tier_expression",
    "rank_products",
    "encode_search_key",
    "decode_search_key",
    "encode_item_key",
    "SEARCH_NAMESPACE",
    "ITEM_NAMESPACE",
]
