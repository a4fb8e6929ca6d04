"""캐시 저장소 - TTL/슬라이딩 만료 + 네임스페이스 키 인덱스

두 가지 백엔드를 제공합니다.

- MemoryCacheStore: 프로세스 로컬, 자체 락으로 동기화
- RedisCacheStore: Redis 명령 단위 원자성 + 파이프라인

두 구현 모두 네임스페이스("search:", "item:")별 활성 키 인덱스를 스스로 관리하므로
remove_by_prefix가 저장소 내부 구조를 들여다볼 필요가 없습니다.
"""
import json
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from redis import Redis
from redis.exceptions import RedisError

from catalog_search.core.config import Settings
from catalog_search.core.exceptions import (
    CacheConnectionException,
    CacheSerializationException,
)
from catalog_search.core.logging import logger


def namespace_of(key: str) -> str:
    """키의 네임스페이스 ("search:abc" -> "search:")"""
    head, sep, _ = key.partition(":")
    return f"{head}{sep}" if sep else ""


@dataclass
class CacheEntry:
    """캐시 엔트리 (저장소 외부로 노출되지 않음)

    expires_at은 슬라이딩 윈도우로 연장될 수 있지만 absolute_expires_at을 넘지 않습니다.
    """

    key: str
    value: Any
    expires_at: float
    absolute_expires_at: float
    sliding_seconds: Optional[float] = None

    @classmethod
    def create(cls, key: str, value: Any, now: float, ttl: float, sliding: Optional[float] = None) -> "CacheEntry":
        absolute = now + ttl
        expires_at = min(now + sliding, absolute) if sliding else absolute
        return cls(key, value, expires_at, absolute, sliding)

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at

    def touch(self, now: float) -> None:
        """슬라이딩 만료 연장 (절대 TTL 상한)"""
        if self.sliding_seconds:
            self.expires_at = min(now + self.sliding_seconds, self.absolute_expires_at)


class MemoryCacheStore:
    """인메모리 캐시 저장소

    get/set/remove/remove_by_prefix 모두 내부 락으로 보호되므로 호출자는 별도 동기화가 필요 없습니다.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic, purge_interval: int = 1024):
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        # namespace -> {key: expires_at}
        self._index: dict[str, dict[str, float]] = {}
        self._lock = threading.Lock()
        self._purge_interval = purge_interval
        self._sets_since_purge = 0

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            now = self._clock()
            if entry.is_expired(now):
                self._drop(key)
                return None

            entry.touch(now)
            self._index.setdefault(namespace_of(key), {})[key] = entry.expires_at
            return entry.value

    def set(self, key: str, value: Any, ttl: float, sliding: Optional[float] = None) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be positive")

        with self._lock:
            entry = CacheEntry.create(key, value, self._clock(), ttl, sliding)
            self._entries[key] = entry
            self._index.setdefault(namespace_of(key), {})[key] = entry.expires_at

            self._sets_since_purge += 1
            if self._sets_since_purge >= self._purge_interval:
                self._purge_expired_locked()

    def remove(self, key: str) -> bool:
        with self._lock:
            return self._drop(key)

    def remove_by_prefix(self, prefix: str) -> int:
        """prefix로 시작하는 모든 키 삭제 (인덱스 기반)

        Returns:
            삭제된 키 수
        """
        with self._lock:
            targets: list[str] = []
            for namespace, keys in self._index.items():
                if namespace.startswith(prefix):
                    targets.extend(keys)
                elif prefix.startswith(namespace):
                    targets.extend(k for k in keys if k.startswith(prefix))

            for key in targets:
                self._drop(key)
            return len(targets)

    def purge_expired(self) -> int:
        with self._lock:
            return self._purge_expired_locked()

    def keys(self, prefix: str = "") -> list[str]:
        """현재 유효한 키 목록 (인덱스 기준)"""
        with self._lock:
            now = self._clock()
            return sorted(
                key
                for keys in self._index.values()
                for key, expires_at in keys.items()
                if key.startswith(prefix) and expires_at > now
            )

    def health_check(self) -> bool:
        return True

    def close(self) -> None:
        with self._lock:
            self._entries.clear()
            self._index.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _drop(self, key: str) -> bool:
        removed = self._entries.pop(key, None) is not None
        namespace = namespace_of(key)
        keys = self._index.get(namespace)
        if keys is not None:
            keys.pop(key, None)
            if not keys:
                del self._index[namespace]
        return removed

    def _purge_expired_locked(self) -> int:
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            self._drop(key)
        self._sets_since_purge = 0
        if expired:
            logger.debug(f"Purged {len(expired)} expired cache entries")
        return len(expired)


class RedisCacheStore:
    """Redis 캐시 저장소

    값은 {"value", "abs", "sliding"} JSON 봉투로 저장하고, Redis TTL은 슬라이딩 윈도우(절대 TTL 상한)로 설정합니다.
    네임스페이스별 활성 키는 절대 만료 시각을 score로 하는 ZSET("cache-index:<namespace>")으로 관리합니다.
    """

    INDEX_PREFIX = "cache-index:"

    def __init__(self, client: Redis, clock: Callable[[], float] = time.time):
        self.redis_client = client
        self._clock = clock

    @classmethod
    def from_url(cls, redis_url: str) -> "RedisCacheStore":
        """URL로 클라이언트를 만들고 연결을 확인"""
        try:
            client = Redis.from_url(
                redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5
            )
            client.ping()
            logger.info("Redis connection established")
        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise CacheConnectionException(str(e), details={"reason": str(e)})
        return cls(client)

    def get(self, key: str) -> Optional[Any]:
        try:
            raw = self.redis_client.get(key)
        except RedisError as e:
            raise CacheConnectionException(f"read failed: {e}", details={"key": key})

        if raw is None:
            return None

        try:
            envelope = json.loads(raw)
            value = envelope["value"]
            absolute = float(envelope["abs"])
            sliding = envelope.get("sliding")
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise CacheSerializationException("deserialize", str(e), details={"key": key})

        if sliding:
            remaining = absolute - self._clock()
            if remaining <= 0:
                self.remove(key)
                return None
            try:
                self.redis_client.pexpire(key, _to_ms(min(float(sliding), remaining)))
            except RedisError as e:
                raise CacheConnectionException(f"expire failed: {e}", details={"key": key})

        return value

    def set(self, key: str, value: Any, ttl: float, sliding: Optional[float] = None) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be positive")

        now = self._clock()
        absolute = now + ttl
        try:
            payload = json.dumps(
                {"value": value, "abs": absolute, "sliding": sliding},
                ensure_ascii=False,
            )
        except (TypeError, ValueError) as e:
            raise CacheSerializationException("serialize", str(e), details={"key": key})

        expire_s = min(sliding, ttl) if sliding else ttl
        index_key = self._index_key(key)
        try:
            pipe = self.redis_client.pipeline()
            pipe.set(key, payload, px=_to_ms(expire_s))
            pipe.zadd(index_key, {key: absolute})
            # 절대 만료가 지난 멤버 정리 (Redis TTL 만료는 인덱스에서 빠지지 않음)
            pipe.zremrangebyscore(index_key, "-inf", now)
            pipe.execute()
        except RedisError as e:
            raise CacheConnectionException(f"write failed: {e}", details={"key": key})

    def remove(self, key: str) -> bool:
        try:
            pipe = self.redis_client.pipeline()
            pipe.delete(key)
            pipe.zrem(self._index_key(key), key)
            deleted, _ = pipe.execute()
        except RedisError as e:
            raise CacheConnectionException(f"delete failed: {e}", details={"key": key})
        return bool(deleted)

    def remove_by_prefix(self, prefix: str) -> int:
        """네임스페이스 인덱스에 등록된 키 중 prefix로 시작하는 키 삭제

        절대 만료가 지난 인덱스 멤버는 먼저 정리합니다.

        Returns:
            실제로 삭제된 키 수
        """
        index_key = self._index_key(prefix)
        try:
            pipe = self.redis_client.pipeline()
            pipe.zremrangebyscore(index_key, "-inf", self._clock())
            pipe.zrange(index_key, 0, -1)
            _, members = pipe.execute()

            targets = [key for key in members if key.startswith(prefix)]
            if not targets:
                return 0
            pipe = self.redis_client.pipeline()
            pipe.delete(*targets)
            pipe.zrem(index_key, *targets)
            deleted, _ = pipe.execute()
        except RedisError as e:
            raise CacheConnectionException(f"sweep failed: {e}", details={"prefix": prefix})
        return int(deleted)

    def health_check(self) -> bool:
        """Redis 연결 상태 확인"""
        try:
            self.redis_client.ping()
            return True
        except Exception:
            return False

    def close(self) -> None:
        self.redis_client.close()

    def _index_key(self, key: str) -> str:
        return f"{self.INDEX_PREFIX}{namespace_of(key)}"


def _to_ms(seconds: float) -> int:
    return max(1, int(seconds * 1000))


def build_cache_store(config: Settings) -> MemoryCacheStore | RedisCacheStore:
    """설정에 맞는 캐시 저장소 생성

    Redis 연결에 실패하면 인메모리 저장소로 대체합니다 (캐시 장애가 서비스 장애가 되지 않도록).
    """
    if config.cache_backend == "redis":
        try:
            return RedisCacheStore.from_url(config.redis_url)
        except CacheConnectionException as e:
            logger.error(f"Redis cache unavailable, falling back to in-memory cache: {e}")
    logger.info("Using in-memory cache store")
    return MemoryCacheStore()
