"""커스텀 예외 정의 (Structured Exception Hierarchy)

- NotFound는 예외가 아니라 None/False 반환으로 표현합니다.
- 캐시 예외는 CachedProductService 내부에서 로깅 후 우회됩니다.
- DB 예외는 재시도 없이 호출자에게 그대로 전파됩니다.
"""
from typing import Any, Optional


class CatalogSearchException(Exception):
    """기본 예외 클래스 - 모든 커스텀 예외의 부모"""
    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


# 캐시 관련 예외
class CacheException(CatalogSearchException):
    """캐시 관련 예외"""
    def __init__(self, message: str, error_code: str = "CACHE_ERROR", details: Optional[dict[str, Any]] = None):
        super().__init__(message, error_code or "CACHE_ERROR", details)


class CacheConnectionException(CacheException):
    """캐시 저장소 연결/명령 실패"""
    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Cache store unavailable: {reason}"
        super().__init__(message, "CACHE_CONNECTION_ERROR", details or {"reason": reason})


class CacheSerializationException(CacheException):
    """캐시 직렬화/역직렬화 오류"""
    def __init__(self, operation: str, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Cache {operation} failed: {reason}"
        super().__init__(message, "CACHE_SERIALIZATION_ERROR",
                        details or {"operation": operation, "reason": reason})


# 데이터베이스 관련 예외
class DatabaseException(CatalogSearchException):
    """데이터베이스 관련 예외"""
    def __init__(self, message: str, error_code: str = "DB_ERROR", details: Optional[dict[str, Any]] = None):
        super().__init__(message, error_code or "DB_ERROR", details)


class DatabaseConnectionException(DatabaseException):
    """DB 연결 실패"""
    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Database connection failed: {reason}"
        super().__init__(message, "DB_CONNECTION_ERROR", details)


class DatabaseQueryException(DatabaseException):
    """DB 쿼리 실행 오류"""
    def __init__(self, operation: str, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Database {operation} failed: {reason}"
        super().__init__(message, "DB_QUERY_ERROR",
                        details or {"operation": operation, "reason": reason})
