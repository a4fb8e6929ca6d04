"""Relevance Ranker 유닛 테스트"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field

import pytest

from catalog_search.engine.ranking import (
    TIER_CATEGORY_PREFIX,
    TIER_EXACT_CATEGORY,
    TIER_EXACT_NAME,
    TIER_NAME_PREFIX,
    TIER_OTHER,
    rank_products,
    relevance_tier,
)


@dataclass
class Record:
    name: str
    category: str = "General"
    description: str = ""
    id: uuid.UUID = field(default_factory=uuid.uuid4)


class TestRelevanceTier:
    """tier 판정 (먼저 맞는 규칙 우선)"""

    def test_exact_name(self):
        assert relevance_tier("laptop", Record("Laptop")) == TIER_EXACT_NAME

    def test_name_prefix(self):
        assert relevance_tier("laptop", Record("Laptop Pro")) == TIER_NAME_PREFIX

    def test_exact_category(self):
        assert relevance_tier("laptop", Record("Sleeve", category="LAPTOP")) == TIER_EXACT_CATEGORY

    def test_category_prefix(self):
        assert relevance_tier("laptop", Record("USB Cable", category="Laptop Accessories")) == TIER_CATEGORY_PREFIX

    def test_other_match(self):
        assert relevance_tier("laptop", Record("Backpack", description="fits a laptop")) == TIER_OTHER

    def test_name_substring_not_prefix_is_other(self):
        assert relevance_tier("top", Record("Laptop", category="Computers")) == TIER_OTHER

    def test_name_rule_wins_over_category_rule(self):
        record = Record("Laptop", category="Laptop")
        assert relevance_tier("laptop", record) == TIER_EXACT_NAME


class TestRankProducts:
    """메모리 정렬"""

    def test_tier_ordering(self):
        description_only = Record("Backpack", category="Bags", description="fits a laptop")
        category_prefix = Record("USB Cable", category="Laptop Accessories")
        name_prefix = Record("Laptop Pro", category="Computers")
        exact = Record("Laptop", category="Computers")

        ranked = rank_products("laptop", [description_only, category_prefix, name_prefix, exact])

        assert [r.name for r in ranked] == ["Laptop", "Laptop Pro", "USB Cable", "Backpack"]

    def test_same_tier_sorted_by_name(self):
        records = [Record("Zeta", description="laptop"), Record("Alpha", description="laptop")]
        assert [r.name for r in rank_products("laptop", records)] == ["Alpha", "Zeta"]

    def test_same_tier_same_name_ordered_by_id(self):
        first = Record("Dup", id=uuid.UUID(int=1))
        second = Record("Dup", id=uuid.UUID(int=2))
        assert rank_products("x", [second, first]) == [first, second]

    @pytest.mark.parametrize("keyword", ["laptop", "usb", "cable"])
    def test_deterministic(self, keyword):
        records = [Record("USB Cable"), Record("Laptop"), Record("Cable Tie", description="usb")]
        assert rank_products(keyword, records) == rank_products(keyword, list(reversed(records)))
