import logging
import math
import pickle
import threading
import time
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from typing import Any, Protocol

import redis

from app.core.config import get_settings

logger = logging.getLogger(__name__)


class CacheUnavailableError(Exception):
    pass


class CacheBackend(Protocol):
    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any, ttl_seconds: int) -> None: ...

    def delete(self, key: str) -> None: ...

    def delete_many(self, keys: Iterable[str]) -> None: ...

    def incr(self, key: str) -> int: ...

    def counter(self, key: str) -> int: ...


class InMemoryTTLCache:
    """Process-wide key/value store with passive expiry.

    Entries carry an absolute deadline computed when they are written; an
    expired entry is dropped the next time it is read. Counters never expire.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                logger.debug("Cache entry %s expired.", key)
                return None
            return value

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock() + ttl_seconds)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def delete_many(self, keys: Iterable[str]) -> None:
        with self._lock:
            for key in keys:
                self._entries.pop(key, None)

    def incr(self, key: str) -> int:
        with self._lock:
            value, _ = self._entries.get(key, (0, math.inf))
            self._entries[key] = (value + 1, math.inf)
            return value + 1

    def counter(self, key: str) -> int:
        return self.get(key) or 0

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class RedisCache:
    """Shared backend for deployments with several worker processes.

    Values are pickled; counters are native redis integers so ``INCR`` stays
    atomic across processes.
    """

    def __init__(self, client: redis.Redis) -> None:
        self.client = client

    @classmethod
    def from_url(cls, url: str, *, timeout_seconds: float = 0.5) -> "RedisCache":
        return cls(redis.Redis.from_url(url, socket_timeout=timeout_seconds, socket_connect_timeout=timeout_seconds))

    @contextmanager
    def _unavailable_on_error(self, operation: str) -> Iterator[None]:
        try:
            yield
        except redis.RedisError as exc:
            raise CacheUnavailableError(f"redis {operation} failed: {exc}") from exc

    def get(self, key: str) -> Any | None:
        with self._unavailable_on_error("GET"):
            raw = self.client.get(key)
        return None if raw is None else pickle.loads(raw)

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        payload = pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)
        with self._unavailable_on_error("SETEX"):
            self.client.setex(key, ttl_seconds, payload)

    def delete(self, key: str) -> None:
        with self._unavailable_on_error("DEL"):
            self.client.delete(key)

    def delete_many(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        if not keys:
            return
        with self._unavailable_on_error("DEL"):
            self.client.delete(*keys)

    def incr(self, key: str) -> int:
        with self._unavailable_on_error("INCR"):
            return int(self.client.incr(key))

    def counter(self, key: str) -> int:
        with self._unavailable_on_error("GET"):
            raw = self.client.get(key)
        return int(raw) if raw is not None else 0


_default_cache: CacheBackend | None = None


def build_cache(url: str | None) -> CacheBackend:
    if url:
        logger.info("Using redis HTML block cache at %s.", url)
        return RedisCache.from_url(url)
    return InMemoryTTLCache()


def get_cache() -> CacheBackend:
    global _default_cache
    if _default_cache is None:
        _default_cache = build_cache(get_settings().html_blocks_cache_url)
    return _default_cache


def reset_cache() -> None:
    global _default_cache
    _default_cache = None
