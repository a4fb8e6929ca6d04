"""FastAPI 앱 팩토리 (composition root)"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from catalog_search.api import health_router, product_router
from catalog_search.core import database
from catalog_search.core.config import settings
from catalog_search.core.logging import logger
from catalog_search.repositories import ProductRepository
from catalog_search.services import CachedProductService, ProductService, build_cache_store


def build_product_service(cache_store, session_factory=None) -> CachedProductService:
    """저장소 → 검색 서비스 → 캐시 데코레이터 조립"""
    repository = ProductRepository(session_factory or database.SessionLocal)
    return CachedProductService(
        inner=ProductService(repository),
        cache=cache_store,
        search_ttl=settings.search_cache_ttl,
        search_sliding=settings.search_cache_sliding,
        item_ttl=settings.item_cache_ttl,
        key_digest=settings.cache_key_digest,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """애플리케이션 생명주기

    캐시 저장소는 여기서 한 번만 만들고 app.state로 공유합니다.
    """
    logger.info("Starting application...")
    database.init_db()
    cache_store = build_cache_store(settings)
    app.state.cache_store = cache_store
    app.state.product_service = build_product_service(cache_store)
    logger.info("Application started")
    yield
    logger.info("Shutting down application...")
    try:
        cache_store.close()
    except Exception as e:
        logger.warning(f"Cache store close failed: {e}")


def create_app() -> FastAPI:
    """
    FastAPI 앱 생성 (Factory Pattern)

    Returns:
        FastAPI 앱 인스턴스
    """
    app = FastAPI(
        title=settings.api_title,
        description=settings.api_description,
        version=settings.api_version,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(product_router)

    return app


# 앱 인스턴스 생성 (uvicorn이 로드할 수 있도록)
app = create_app()
