"""데이터베이스 연결 및 세션 관리"""
from typing import Any, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from catalog_search.core.config import settings
from catalog_search.core.exceptions import DatabaseConnectionException
from catalog_search.core.logging import logger

# SQLAlchemy Base
Base = declarative_base()


def _unicode_lower(value: Optional[str]) -> Optional[str]:
    return value.lower() if isinstance(value, str) else value


def _register_sqlite_functions(dbapi_connection, connection_record) -> None:
    """SQLite 내장 lower()는 ASCII만 처리하므로 파이썬 str.lower로 교체

    검색어 정규화(str.lower)와 DB 쪽 비교가 같은 규칙을 쓰도록 합니다.
    """
    dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """URL 종류에 맞는 옵션으로 엔진 생성

    - SQLite: 스레드 간 커넥션 공유 허용, 인메모리면 단일 커넥션(StaticPool),
      커넥션마다 유니코드 lower() 등록
    - 그 외(PostgreSQL 등): 커넥션 풀 설정
    """
    if database_url.startswith("sqlite"):
        kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        sqlite_engine = create_engine(database_url, echo=echo, **kwargs)
        event.listen(sqlite_engine, "connect", _register_sqlite_functions)
        return sqlite_engine

    return create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        pool_recycle=300,
        pool_size=5,
        max_overflow=10
    )


engine = create_db_engine(settings.database_url, echo=settings.database_echo)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def init_db() -> None:
    """데이터베이스 테이블 초기화"""
    # 모델 등록 (metadata에 테이블 추가)
    from catalog_search.repositories import models  # noqa: F401

    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables initialized successfully")
    except OperationalError as e:
        logger.error(f"Failed to initialize database: {e}")
        raise DatabaseConnectionException(str(e)) from e
