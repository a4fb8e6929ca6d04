"""테스트 자산(데이터) 레이어

규칙:
- 로직 없음 (단순 dict/list/primitive)
- DB/캐시 의존 없음
"""

from .products import ELECTRONICS_CATALOG, LAPTOP_RANKING_CATALOG, MIXED_CATALOG

__all__ = [
    "ELECTRONICS_CATALOG",
    "LAPTOP_RANKING_CATALOG",
    "MIXED_CATALOG",
]
