"""Relevance Ranker

키워드 검색 시 관련도 등급(tier)을 매깁니다. 숫자가 작을수록 관련도가 높습니다.

    1: 상품명 == 키워드
    2: 상품명이 키워드로 시작
    3: 카테고리 == 키워드
    4: 카테고리가 키워드로 시작
    5: 그 외 (설명 부분 일치 등)

같은 tier 안에서는 상품명 오름차순, 그 다음 id 순으로 정렬합니다.
DB 정렬용 SQL CASE 식과 메모리 정렬용 함수가 같은 규칙을 공유합니다.
"""

from collections.abc import Iterable
from typing import Any, Protocol, TypeVar

from sqlalchemy import case, func
from sqlalchemy.sql.elements import ColumnElement


TIER_EXACT_NAME = 1
TIER_NAME_PREFIX = 2
TIER_EXACT_CATEGORY = 3
TIER_CATEGORY_PREFIX = 4
TIER_OTHER = 5


class Rankable(Protocol):
    id: Any
    name: str
    category: str


R = TypeVar("R", bound=Rankable)


def relevance_tier(keyword: str, record: Rankable) -> int:
    """레코드의 관련도 tier 계산 (keyword는 정규화된 소문자 문자열)"""
    name = (record.name or "").lower()
    category = (record.category or "").lower()

    if name == keyword:
        return TIER_EXACT_NAME
    if name.startswith(keyword):
        return TIER_NAME_PREFIX
    if category == keyword:
        return TIER_EXACT_CATEGORY
    if category.startswith(keyword):
        return TIER_CATEGORY_PREFIX
    return TIER_OTHER


def relevance_sort_key(keyword: str, record: Rankable) -> tuple[int, str, str]:
    return (relevance_tier(keyword, record), record.name or "", str(record.id))


def rank_products(keyword: str, records: Iterable[R]) -> list[R]:
    """메모리 상의 레코드를 관련도 순으로 정렬 (stable)"""
    return sorted(records, key=lambda record: relevance_sort_key(keyword, record))


def relevance_tier_expression(
    keyword: str,
    name_column: ColumnElement,
    category_column: ColumnElement,
) -> ColumnElement:
    """relevance_tier와 동일한 규칙의 SQL CASE 식

    LIKE 와일드카드(%, _)는 autoescape로 이스케이프합니다.
    """
    name_lower = func.lower(name_column)
    category_lower = func.lower(category_column)
    return case(
        (name_lower == keyword, TIER_EXACT_NAME),
        (name_lower.startswith(keyword, autoescape=True), TIER_NAME_PREFIX),
        (category_lower == keyword, TIER_EXACT_CATEGORY),
        (category_lower.startswith(keyword, autoescape=True), TIER_CATEGORY_PREFIX),
        else_=TIER_OTHER,
    )
