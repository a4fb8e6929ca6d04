"""Product Routes

HTTP 요청을 ProductServiceProtocol(캐시 데코레이터)로 위임하는 단순 Translator 역할만 수행합니다.
서비스 인스턴스는 앱 lifespan에서 한 번 만들어 app.state에 보관합니다.
"""

import asyncio
from decimal import Decimal
from typing import Awaitable, Optional, TypeVar
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from catalog_search.core.config import settings
from catalog_search.core.exceptions import DatabaseException
from catalog_search.core.logging import logger, sanitize_for_log
from catalog_search.schemas.product_schema import (
    PagedResult,
    ProductCreate,
    ProductSearchQuery,
    ProductUpdate,
    ProductView,
)
from catalog_search.services.interfaces import CacheStore, ProductServiceProtocol

router = APIRouter(prefix="/api", tags=["products"])

T = TypeVar("T")


def get_product_service(request: Request) -> ProductServiceProtocol:
    """앱 lifespan에서 구성한 (캐시된) 상품 서비스"""
    return request.app.state.product_service


def get_cache_store(request: Request) -> CacheStore:
    """앱 lifespan에서 생성한 캐시 저장소"""
    return request.app.state.cache_store


# 타임아웃 응답 후에도 끝까지 실행 중인 쓰기 작업
_pending_writes: set[asyncio.Task] = set()


def _finish_pending_write(task: asyncio.Task) -> None:
    _pending_writes.discard(task)
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error(f"[API] Write failed after timeout response: {type(error).__name__}: {error}")


def _keep_pending(task: asyncio.Task) -> None:
    _pending_writes.add(task)
    task.add_done_callback(_finish_pending_write)


async def _run(operation: str, awaitable: Awaitable[T], shield: bool = False) -> T:
    """서버 측 타임아웃 + 저장소 오류를 HTTP 오류로 변환

    shield=True(쓰기)면 타임아웃 시 504만 반환하고 작업은 취소하지 않습니다.
    저장소 커밋과 캐시 무효화가 순서대로 끝까지 실행됩니다.
    """
    if shield:
        task = asyncio.ensure_future(awaitable)
        awaitable = asyncio.shield(task)
    try:
        return await asyncio.wait_for(awaitable, timeout=settings.api_request_timeout_s)
    except asyncio.CancelledError:
        # 클라이언트 연결 종료 등으로 요청이 취소돼도 쓰기는 계속
        if shield:
            _keep_pending(task)
        raise
    except asyncio.TimeoutError:
        if shield:
            _keep_pending(task)
        logger.error(f"[API] Timeout: operation={operation}")
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail="요청 처리 시간이 초과되었습니다.",
        )
    except DatabaseException as e:
        logger.error(f"[API] Store failure during {operation}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"An error occurred while processing '{operation}'",
        )


@router.get("/products", response_model=PagedResult[ProductView])
async def search_products(
    keyword: Optional[str] = Query(None, max_length=200, description="이름/설명/카테고리 부분 일치"),
    min_price: Optional[Decimal] = Query(None, ge=0, description="최소 가격 (포함)"),
    max_price: Optional[Decimal] = Query(None, ge=0, description="최대 가격 (포함)"),
    in_stock: Optional[bool] = Query(None, description="true=재고 있음, false=품절"),
    page: Optional[int] = Query(None, description="페이지 번호 (1부터)"),
    page_size: Optional[int] = Query(None, description="페이지 크기 (최대 100)"),
    sort: Optional[str] = Query(None, max_length=50, description="name | price | created | stock (+ _desc)"),
    service: ProductServiceProtocol = Depends(get_product_service),
):
    """상품 검색 API

    - keyword가 있으면 sort는 무시되고 관련도 순 정렬
    - page/page_size/sort의 잘못된 값은 기본값으로 보정
    """
    query = ProductSearchQuery(
        keyword=keyword,
        min_price=min_price,
        max_price=max_price,
        in_stock=in_stock,
        page=page,
        page_size=page_size,
        sort=sort,
    )
    logger.info(f"[API] Search request: keyword={sanitize_for_log(keyword)}, page={page}, sort={sort}")
    return await _run("search", service.search(query))


@router.get("/products/{product_id}", response_model=ProductView)
async def get_product(
    product_id: UUID,
    service: ProductServiceProtocol = Depends(get_product_service),
):
    """상품 단건 조회"""
    product = await _run("get_by_id", service.get_by_id(product_id))
    if product is None:
        logger.warning(f"[API] Product not found: {product_id}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return product


@router.post("/products", response_model=ProductView, status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductCreate,
    response: Response,
    service: ProductServiceProtocol = Depends(get_product_service),
):
    """상품 생성"""
    product = await _run("create", service.create(payload), shield=True)
    response.headers["Location"] = f"{router.prefix}/products/{product.id}"
    logger.info(f"[API] Product created: {product.id}")
    return product


@router.put("/products/{product_id}", response_model=ProductView)
async def update_product(
    product_id: UUID,
    payload: ProductUpdate,
    service: ProductServiceProtocol = Depends(get_product_service),
):
    """상품 수정 (전체 필드 교체)"""
    product = await _run("update", service.update(product_id, payload), shield=True)
    if product is None:
        logger.warning(f"[API] Product not found for update: {product_id}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    logger.info(f"[API] Product updated: {product_id}")
    return product


@router.delete("/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: UUID,
    service: ProductServiceProtocol = Depends(get_product_service),
):
    """상품 삭제"""
    deleted = await _run("delete", service.delete(product_id), shield=True)
    if not deleted:
        logger.warning(f"[API] Product not found for deletion: {product_id}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    logger.info(f"[API] Product deleted: {product_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
