"""헬스 체크 엔드포인트"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from catalog_search import __version__
from catalog_search.api.routes.product_routes import get_cache_store
from catalog_search.core import database
from catalog_search.core.logging import logger
from catalog_search.schemas.product_schema import HealthResponse
from catalog_search.services.interfaces import CacheStore

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(cache_store: CacheStore = Depends(get_cache_store)):
    """
    헬스 체크 엔드포인트

    - 캐시 저장소 상태
    - DB 연결 상태
    """
    cache_ok = False
    db_ok = False

    try:
        cache_ok = cache_store.health_check()
    except Exception as e:
        logger.error(f"Unexpected cache error: {e}")

    try:
        with database.engine.connect() as connection:
            connection.exec_driver_sql("SELECT 1")
            db_ok = True
    except Exception as e:
        logger.error(f"Database connection error: {e}")

    status = "ok" if cache_ok and db_ok else ("degraded" if cache_ok or db_ok else "error")

    return HealthResponse(
        status=status,
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        cache="ok" if cache_ok else "unavailable",
        database="ok" if db_ok else "unavailable",
    )


@router.get("/")
async def root():
    """루트 엔드포인트"""
    return {
        "service": "Catalog Search Service",
        "version": __version__,
        "docs": "/docs"
    }
