"""상품 리포지토리 유닛 테스트 (인메모리 SQLite)"""
from datetime import timedelta
from decimal import Decimal
from unittest.mock import MagicMock
import uuid

import pytest
from sqlalchemy.exc import OperationalError

from catalog_search.core.exceptions import DatabaseQueryException
from catalog_search.engine import normalize
from catalog_search.repositories import ProductRepository
from tests.fixtures import ELECTRONICS_CATALOG, LAPTOP_RANKING_CATALOG, MIXED_CATALOG


def names(rows):
    return [row.name for row in rows]


class TestFilters:
    """필터 결합"""

    def test_no_filters_returns_everything(self, repository, seed_catalog):
        seed_catalog(MIXED_CATALOG)

        rows, total = repository.search(normalize({}))

        assert total == len(MIXED_CATALOG)
        assert len(rows) == len(MIXED_CATALOG)

    def test_keyword_matches_name_description_or_category(self, repository, seed_catalog):
        seed_catalog(MIXED_CATALOG)

        _, by_name = repository.search(normalize({"keyword": "MOUSE"}))
        _, by_description = repository.search(normalize({"keyword": "ergonomic"}))
        _, by_category = repository.search(normalize({"keyword": "kitchen"}))

        assert (by_name, by_description, by_category) == (1, 1, 1)

    @pytest.mark.parametrize(
        "keyword,expected",
        [("%", ["Wireless Mouse"]), ("_", ["Notebook_A5"]), ("100%", ["Wireless Mouse"])],
    )
    def test_like_wildcards_match_literally(self, repository, seed_catalog, keyword, expected):
        seed_catalog(MIXED_CATALOG)

        rows, total = repository.search(normalize({"keyword": keyword}))

        assert names(rows) == expected
        assert total == len(expected)

    @pytest.mark.parametrize("keyword", ["café latte", "CAFÉ", "Ünïcode"])
    def test_keyword_case_insensitive_beyond_ascii(self, repository, seed_catalog, keyword):
        seed_catalog([
            {"name": "CAFÉ Latte", "category": "Drinks", "description": "ÜNÏCODE beans"},
            {"name": "Tea", "category": "Drinks"},
        ])

        rows, total = repository.search(normalize({"keyword": keyword}))

        assert total == 1
        assert names(rows) == ["CAFÉ Latte"]

    def test_price_range_inclusive(self, repository, seed_catalog):
        seed_catalog(MIXED_CATALOG)

        rows, total = repository.search(normalize({"min_price": "10", "max_price": "35"}))

        assert total == 3
        assert names(rows) == ["Desk Lamp", "Monitor Stand", "Wireless Mouse"]

    def test_inverted_price_range_is_empty(self, repository, seed_catalog):
        seed_catalog(MIXED_CATALOG)

        rows, total = repository.search(normalize({"min_price": "100", "max_price": "10"}))

        assert (rows, total) == ([], 0)

    @pytest.mark.parametrize(
        "in_stock,expected",
        [
            (True, ["Desk Lamp", "Notebook_A5", "Office Chair", "Wireless Mouse"]),
            (False, ["Coffee Mug", "Monitor Stand"]),
        ],
    )
    def test_stock_flag(self, repository, seed_catalog, in_stock, expected):
        seed_catalog(MIXED_CATALOG)

        rows, _ = repository.search(normalize({"in_stock": in_stock}))

        assert names(rows) == expected

    def test_filters_combine_with_and(self, repository, seed_catalog):
        seed_catalog(ELECTRONICS_CATALOG + MIXED_CATALOG)

        rows, total = repository.search(
            normalize({"keyword": "electronics", "max_price": "100", "in_stock": True})
        )

        # Gadget 01(stock 1), 02(2), 03(3), 04(0 제외) + Wireless Mouse
        assert total == 4
        assert set(names(rows)) == {"Gadget 01", "Gadget 02", "Gadget 03", "Wireless Mouse"}


class TestOrdering:
    """정렬과 보조 정렬"""

    def test_keyword_uses_relevance_tiers(self, repository, seed_catalog):
        seed_catalog(list(reversed(LAPTOP_RANKING_CATALOG)))

        rows, total = repository.search(normalize({"keyword": "laptop"}))

        assert total == 4
        assert names(rows) == ["Laptop", "Laptop Pro", "USB Cable", "Backpack"]

    def test_non_ascii_relevance_tiers(self, repository, seed_catalog):
        seed_catalog([
            {"name": "Zubehör", "category": "ÉCLAIR Bakery", "description": ""},
            {"name": "Lunch box", "category": "Kitchen", "description": "fits an éclair"},
            {"name": "ÉCLAIR", "category": "Bakery", "description": ""},
            {"name": "Éclair au chocolat", "category": "Bakery", "description": ""},
        ])

        rows, _ = repository.search(normalize({"keyword": "éclair"}))

        assert names(rows) == ["ÉCLAIR", "Éclair au chocolat", "Zubehör", "Lunch box"]

    def test_keyword_ignores_requested_sort(self, repository, seed_catalog):
        seed_catalog(LAPTOP_RANKING_CATALOG)

        rows, _ = repository.search(normalize({"keyword": "laptop", "sort": "price_desc"}))

        assert names(rows) == ["Laptop", "Laptop Pro", "USB Cable", "Backpack"]

    def test_price_ascending_ties_broken_by_name(self, repository, seed_catalog):
        seed_catalog(MIXED_CATALOG)

        rows, _ = repository.search(normalize({"sort": "price"}))

        assert names(rows) == [
            "Notebook_A5", "Coffee Mug", "Wireless Mouse", "Desk Lamp", "Monitor Stand", "Office Chair",
        ]

    def test_price_descending_ties_still_name_ascending(self, repository, seed_catalog):
        seed_catalog(MIXED_CATALOG)

        rows, _ = repository.search(normalize({"sort": "price_desc"}))

        assert names(rows) == [
            "Office Chair", "Desk Lamp", "Monitor Stand", "Wireless Mouse", "Coffee Mug", "Notebook_A5",
        ]

    def test_stock_ascending(self, repository, seed_catalog):
        seed_catalog(MIXED_CATALOG)

        rows, _ = repository.search(normalize({"sort": "stock"}))

        assert names(rows)[:2] == ["Coffee Mug", "Monitor Stand"]
        assert names(rows)[-1] == "Notebook_A5"

    def test_created_descending(self, repository, seed_catalog):
        seed_catalog(MIXED_CATALOG)

        rows, _ = repository.search(normalize({"sort": "created_desc"}))

        assert names(rows) == [row["name"] for row in reversed(MIXED_CATALOG)]

    def test_same_name_ordered_by_id(self, repository, make_product):
        products = [make_product(name="Twin") for _ in range(5)]

        rows, _ = repository.search(normalize({}))

        assert [row.id for row in rows] == sorted((p.id for p in products), key=str)


class TestPagination:
    """페이지네이션"""

    def test_total_counted_before_pagination(self, repository, seed_catalog):
        seed_catalog(ELECTRONICS_CATALOG)

        rows, total = repository.search(
            normalize({"keyword": "electronics", "page": 2, "page_size": 10, "sort": "name"})
        )

        assert total == 25
        assert names(rows) == [f"Gadget {i:02d}" for i in range(11, 21)]

    def test_last_partial_page(self, repository, seed_catalog):
        seed_catalog(ELECTRONICS_CATALOG)

        rows, total = repository.search(normalize({"page": 3, "page_size": 10}))

        assert total == 25
        assert len(rows) == 5

    def test_page_beyond_end(self, repository, seed_catalog):
        seed_catalog(ELECTRONICS_CATALOG)

        rows, total = repository.search(normalize({"page": 4, "page_size": 10}))

        assert rows == []
        assert total == 25

    def test_empty_catalog(self, repository):
        assert repository.search(normalize({})) == ([], 0)


class TestWrites:
    """단건 조회/수정/삭제"""

    def test_get_by_id(self, repository, make_product):
        product = make_product(name="Desk Lamp", price="35.00")

        loaded = repository.get_by_id(product.id)

        assert loaded.name == "Desk Lamp"
        assert loaded.price == Decimal("35.00")
        assert loaded.created_at.tzinfo is not None

    def test_get_missing_returns_none(self, repository):
        assert repository.get_by_id(uuid.uuid4()) is None

    def test_update_applies_known_fields_only(self, repository, make_product):
        product = make_product(name="Old", stock_quantity=1)

        updated = repository.update(
            product.id,
            {"name": "New", "stock_quantity": 7, "created_at": product.created_at + timedelta(days=1)},
        )

        assert updated.name == "New"
        assert updated.stock_quantity == 7
        assert updated.created_at == product.created_at

    def test_update_never_moves_updated_at_before_created_at(self, repository, make_product):
        product = make_product()

        updated = repository.update(product.id, {"updated_at": product.created_at - timedelta(hours=1)})

        assert updated.updated_at == product.created_at

    def test_update_missing_returns_none(self, repository):
        assert repository.update(uuid.uuid4(), {"name": "x"}) is None

    def test_delete(self, repository, make_product):
        product = make_product()

        assert repository.delete(product.id) is True
        assert repository.get_by_id(product.id) is None
        assert repository.delete(product.id) is False


class TestErrors:
    """DB 오류 전파"""

    def test_read_errors_wrapped(self):
        factory = MagicMock(side_effect=OperationalError("SELECT 1", {}, Exception("db down")))
        repository = ProductRepository(factory)

        with pytest.raises(DatabaseQueryException):
            repository.search(normalize({}))
        with pytest.raises(DatabaseQueryException):
            repository.get_by_id(uuid.uuid4())
