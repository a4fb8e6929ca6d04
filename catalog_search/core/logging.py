"""로깅 설정"""
import logging
import os
import sys

from catalog_search.core.config import settings


# Production 환경에서는 DEBUG 로그 비활성화
IS_PRODUCTION = os.getenv("ENVIRONMENT", "development") == "production"


def setup_logging() -> logging.Logger:
    """로거 초기화 및 설정"""

    logger = logging.getLogger("catalog_search")

    # Production에서는 최소 INFO 레벨
    log_level = settings.log_level.upper()
    if IS_PRODUCTION and log_level == "DEBUG":
        log_level = "INFO"

    logger.setLevel(getattr(logging, log_level, logging.INFO))

    # 콘솔 핸들러
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, log_level, logging.INFO))

    # 포맷터 (검색어 등 사용자 입력은 sanitize_for_log를 거쳐 기록)
    if IS_PRODUCTION:
        # Production: 최소 정보만
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )
    else:
        # Development: 상세 정보
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    console_handler.setFormatter(formatter)

    # 재호출 시 핸들러 중복 방지
    if not logger.handlers:
        logger.addHandler(console_handler)

    return logger


logger = setup_logging()


def sanitize_for_log(value: str | None, max_length: int = 100) -> str:
    """사용자 입력(검색어 등)을 로그에 남기기 전에 정리

    Args:
        value: 로깅할 문자열
        max_length: 최대 길이

    Returns:
        개행 제거 + 길이 제한된 문자열
    """
    if not value:
        return "[empty]"

    # 로그 라인 위조 방지
    result = value.replace("\r", " ").replace("\n", " ")

    # 길이 초과 시 절단
    if len(result) > max_length:
        result = result[:max_length] + "..."

    return result
