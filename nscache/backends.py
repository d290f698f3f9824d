"""
Cache pool backed by the Django cache framework.

DjangoCachePool adapts any configured Django cache backend (LocMem, Redis via
django-redis, Memcached, database, ...) to the item-oriented CacheItemPool
contract consumed by NamespacedCache.

Key Features:
- Hit detection with a sentinel default, so stored None values are hits
- TTL mapping: None -> backend default timeout, timedelta -> seconds
- Idempotent deletes (removing an absent key is a success)
- Backend failures are logged with stack traces, counted, and reported as
  False; failed reads degrade to a miss
"""

import logging
from datetime import timedelta
from typing import Any, Optional

from django.core.cache import caches
from django.core.cache.backends.base import DEFAULT_TIMEOUT, BaseCache

from nscache.interfaces import CacheItem, CacheItemPool, Ttl
from nscache.metrics import cache_metrics

logger = logging.getLogger(__name__)

_MISSING = object()


def ttl_to_timeout(ttl: Ttl) -> Any:
    """
    Convert a facade TTL into a Django cache timeout.

    Args:
        ttl: Seconds, a timedelta, or None

    Returns:
        DEFAULT_TIMEOUT for None (the backend's configured TIMEOUT),
        otherwise the number of seconds
    """
    if ttl is None:
        return DEFAULT_TIMEOUT

    if isinstance(ttl, timedelta):
        return ttl.total_seconds()

    return ttl


class DjangoCacheItem(CacheItem):
    """Handle for one entry of a Django cache backend."""

    def __init__(self, key: str, value: Any = None, hit: bool = False):
        self._key = key
        self._value = value
        self._hit = hit
        self._timeout = DEFAULT_TIMEOUT

    @property
    def key(self) -> str:
        return self._key

    @property
    def timeout(self) -> Any:
        """Timeout passed to the backend on save."""
        return self._timeout

    def is_hit(self) -> bool:
        return self._hit

    def get(self) -> Any:
        return self._value if self._hit else None

    def set(self, value: Any) -> "DjangoCacheItem":
        self._value = value
        return self

    def expires_after(self, ttl: Ttl) -> "DjangoCacheItem":
        self._timeout = ttl_to_timeout(ttl)
        return self


class DjangoCachePool(CacheItemPool):
    """
    CacheItemPool over a Django cache backend.

    The pool does not own the backend; several pools (and every facade built
    on them) can share one backend.

    Example Usage:
        >>> pool = DjangoCachePool(alias="default")
        >>> item = pool.get_item("abc").set({"name": "x"}).expires_after(60)
        >>> pool.save(item)
        True
        >>> pool.get_item("abc").is_hit()
        True
    """

    def __init__(self, backend: Optional[BaseCache] = None, alias: str = "default"):
        """
        Initialize the pool.

        Args:
            backend: Django cache backend instance. Defaults to caches[alias]
            alias: Alias in settings.CACHES, used when backend is not given
        """
        self.alias = alias
        self.cache = backend if backend is not None else caches[alias]

    def get_item(self, key: str) -> DjangoCacheItem:
        try:
            value = self.cache.get(key, _MISSING)
        except Exception as e:
            cache_metrics.record_error('get')
            logger.error(
                f"Cache error - alias={self.alias}, key={key}, operation=get, "
                f"error={str(e)}",
                exc_info=True
            )
            return DjangoCacheItem(key)

        if value is _MISSING:
            return DjangoCacheItem(key)

        return DjangoCacheItem(key, value, hit=True)

    def save(self, item: CacheItem) -> bool:
        if not isinstance(item, DjangoCacheItem):
            raise ValueError(
                f"item must be a DjangoCacheItem, got {type(item).__name__}"
            )

        try:
            self.cache.set(item.key, item._value, timeout=item.timeout)
        except Exception as e:
            cache_metrics.record_error('save')
            logger.error(
                f"Cache error - alias={self.alias}, key={item.key}, operation=save, "
                f"error={str(e)}",
                exc_info=True
            )
            return False

        return True

    def delete_item(self, key: str) -> bool:
        try:
            self.cache.delete(key)
        except Exception as e:
            cache_metrics.record_error('delete')
            logger.error(
                f"Cache error - alias={self.alias}, key={key}, operation=delete, "
                f"error={str(e)}",
                exc_info=True
            )
            return False

        return True

    def clear(self) -> bool:
        try:
            self.cache.clear()
        except Exception as e:
            cache_metrics.record_error('clear')
            logger.error(
                f"Cache error - alias={self.alias}, operation=clear, error={str(e)}",
                exc_info=True
            )
            return False

        return True
