"""설정 관리 - 환경 변수 로드 및 검증"""
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


CacheBackend = Literal["memory", "redis"]


class Settings(BaseSettings):
    """애플리케이션 설정"""

    # 데이터베이스
    database_url: str = "sqlite:///./catalog.db"
    database_echo: bool = False

    # 캐시
    # - memory: 프로세스 로컬 캐시 (기본값)
    # - redis: redis_url 필수
    cache_backend: CacheBackend = "memory"
    redis_url: str = ""

    # 검색 결과 캐시: 절대 TTL 60초 + 슬라이딩 30초 (절대 TTL을 넘지 않음)
    search_cache_ttl: int = 60
    search_cache_sliding: int = 30

    # 단건 조회 캐시: 절대 TTL만 사용
    item_cache_ttl: int = 60

    # True면 검색 키를 SHA-256 고정 길이로 변환 (기본은 복원 가능한 canonical 문자열)
    cache_key_digest: bool = False

    # API
    api_title: str = "Catalog Search Service"
    api_version: str = "1.0.0"
    api_description: str = "필터/랭킹/페이지네이션 상품 검색 + 읽기 캐시"

    # 클라이언트 타임아웃보다 짧게 서버 쪽 하드 캡
    api_request_timeout_s: float = 10.0

    # 로깅
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    @field_validator("search_cache_ttl", "search_cache_sliding", "item_cache_ttl")
    @classmethod
    def validate_cache_ttl(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("cache TTLs must be positive")
        return v

    @field_validator("api_request_timeout_s")
    @classmethod
    def validate_request_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("api_request_timeout_s must be positive")
        return v

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v:
            raise ValueError("database_url must not be empty")
        return v

    @model_validator(mode="after")
    def validate_cache_settings(self) -> "Settings":
        if self.search_cache_sliding > self.search_cache_ttl:
            raise ValueError("search_cache_sliding must not exceed search_cache_ttl")
        if self.cache_backend == "redis" and not self.redis_url:
            raise ValueError("redis_url is required when cache_backend is 'redis'")
        return self


settings = Settings()
