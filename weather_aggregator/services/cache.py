from __future__ import annotations

import math
import threading
import time
from datetime import timedelta
from typing import Any, Callable, Dict, Optional, Protocol, Tuple, Type, TypeVar

import redis
import structlog
from pydantic import BaseModel, ValidationError

from ..config import AppSettings
from ..errors import CacheError
from ..geo import Coordinates

logger = structlog.get_logger(__name__)

M = TypeVar("M", bound=BaseModel)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[bytes]: ...
    def set(self, key: str, value: bytes, ttl_s: int) -> None: ...


class InMemoryStore:
    """Process-local TTL store with the same semantics as the Redis store."""

    def __init__(self, time_func: Callable[[], float] = time.monotonic) -> None:
        self._time_func = time_func
        self._lock = threading.Lock()
        # key -> (expires_at, payload); expires_at None means no expiry
        self._store: Dict[str, Tuple[Optional[float], bytes]] = {}

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            item = self._store.get(key)
            if not item:
                return None
            expires_at, payload = item
            if expires_at is not None and self._time_func() >= expires_at:
                self._store.pop(key, None)
                return None
            return payload

    def set(self, key: str, value: bytes, ttl_s: int) -> None:
        ttl = max(0, int(ttl_s))
        expires_at = self._time_func() + ttl if ttl > 0 else None
        with self._lock:
            self._store[key] = (expires_at, value)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()


class RedisStore:
    def __init__(self, url: Optional[str] = None, client: Optional[redis.Redis] = None) -> None:
        if client is None:
            if not url:
                raise ValueError("either url or client is required")
            client = redis.Redis.from_url(url)
        self._redis = client

    def get(self, key: str) -> Optional[bytes]:
        try:
            raw = self._redis.get(key)
        except redis.RedisError as e:
            raise CacheError(f"redis get failed: {e}") from e
        if raw is None:
            return None
        return raw.encode("utf-8") if isinstance(raw, str) else raw

    def set(self, key: str, value: bytes, ttl_s: int) -> None:
        ttl = max(0, int(ttl_s))
        try:
            if ttl > 0:
                self._redis.setex(key, ttl, value)
            else:
                self._redis.set(key, value)
        except redis.RedisError as e:
            raise CacheError(f"redis set failed: {e}") from e


def build_store(settings: AppSettings) -> KeyValueStore:
    """Factory: use Redis if a URL is configured; otherwise in-memory."""
    if not settings.redis_url:
        logger.info("cache_init_inmemory")
        return InMemoryStore()
    try:
        store = RedisStore(settings.redis_url)
    except ValueError as e:
        logger.warning("cache_init_redis_failed_fallback_inmemory", error=str(e))
        return InMemoryStore()
    logger.info("cache_init_redis")
    return store


def cache_key(provider_id: str, coords: Coordinates, language: str, unit: str) -> str:
    """``weather:{provider}:{lat:.2f}:{lon:.2f}:{language}:{unit}``; nearby points share a key."""
    lat, lon = coords.quantized()
    return f"weather:{provider_id}:{lat:.2f}:{lon:.2f}:{language}:{unit}"


class CacheGateway:
    """Read-through/write-behind cache for serialized results.

    Caching is an optimization only: store and deserialization failures are
    logged and reported as a miss (``get``) or dropped (``put``).
    """

    def __init__(self, store: KeyValueStore, ttl: timedelta = timedelta(minutes=30)) -> None:
        self.store = store
        self.ttl = ttl

    def get(self, key: str, model: Type[M]) -> Tuple[Optional[M], bool]:
        try:
            raw = self.store.get(key)
        except CacheError as e:
            logger.warning("cache_read_failed", key=key, error=str(e))
            return None, False
        if raw is None:
            return None, False
        try:
            value = model.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("cache_deserialize_error", key=key, errors=e.error_count())
            return None, False
        logger.info("cache_hit", key=key)
        return value, True

    def put(self, key: str, value: BaseModel, ttl: Optional[timedelta] = None) -> None:
        ttl = self.ttl if ttl is None else ttl
        if not _is_finite(value.model_dump()):
            # NaN and Inf serialize as null and would never read back
            logger.warning("cache_write_skipped", key=key, reason="non_finite_value")
            return
        payload = value.model_dump_json(by_alias=True).encode("utf-8")
        try:
            self.store.set(key, payload, int(ttl.total_seconds()))
        except CacheError as e:
            logger.warning("cache_write_failed", key=key, error=str(e))
            return
        logger.info("cache_write", key=key, ttl_s=int(ttl.total_seconds()))


def _is_finite(data: Any) -> bool:
    if isinstance(data, float):
        return math.isfinite(data)
    if isinstance(data, dict):
        return all(_is_finite(v) for v in data.values())
    if isinstance(data, (list, tuple)):
        return all(_is_finite(v) for v in data)
    return True

__all__ = [
    "KeyValueStore",
    "InMemoryStore",
    "RedisStore",
    "build_store",
    "cache_key",
    "CacheGateway",
]
