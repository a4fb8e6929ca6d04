"""전역 테스트 설정

역할:
- 테스트 환경 구성 (인메모리 SQLite, 인메모리 캐시)
- 공통 Fake(시계, 캐시) 주입
- 상품 팩토리
"""

from __future__ import annotations

import os

# 패키지 import 전에 설정되어야 함 (settings/engine이 import 시점에 생성됨)
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "INFO"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CACHE_BACKEND"] = "memory"

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Callable, Optional
import uuid

import pytest
from sqlalchemy.orm import sessionmaker

from catalog_search.core.database import Base, create_db_engine
from catalog_search.repositories import ProductRepository
from catalog_search.repositories.models import Product
from catalog_search.services import MemoryCacheStore, ProductService


BASE_TIME = datetime(2024, 8, 14, 10, 30, tzinfo=timezone.utc)


@dataclass
class FakeClock:
    """캐시 TTL 테스트용 수동 시계"""

    now: float = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_cache(clock: FakeClock) -> MemoryCacheStore:
    return MemoryCacheStore(clock=clock)


@pytest.fixture
def session_factory():
    """테스트마다 새 인메모리 DB"""
    engine = create_db_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
    yield factory
    engine.dispose()


@pytest.fixture
def repository(session_factory) -> ProductRepository:
    return ProductRepository(session_factory)


@pytest.fixture
def product_service(repository: ProductRepository) -> ProductService:
    return ProductService(repository)


@pytest.fixture
def make_product(session_factory) -> Callable[..., Product]:
    """DB에 상품을 직접 저장하는 팩토리

    created_at은 호출 순서대로 1분씩 증가합니다.
    """
    counter = {"n": 0}

    def _make(
        name: str = "Sample",
        description: str = "",
        category: str = "General",
        price: Any = "10.00",
        stock_quantity: int = 1,
        created_at: Optional[datetime] = None,
    ) -> Product:
        created = created_at or BASE_TIME + timedelta(minutes=counter["n"])
        counter["n"] += 1
        product = Product(
            id=uuid.uuid4(),
            name=name,
            description=description,
            category=category,
            price=Decimal(str(price)),
            stock_quantity=stock_quantity,
            created_at=created,
            updated_at=created,
        )
        with session_factory() as db:
            db.add(product)
            db.commit()
            db.refresh(product)
        return product

    return _make


@pytest.fixture
def seed_catalog(make_product) -> Callable[[list[dict]], list[Product]]:
    """dict 목록으로 카탈로그 채우기"""

    def _seed(rows: list[dict]) -> list[Product]:
        return [make_product(**row) for row in rows]

    return _seed
