"""
Namespaced cache facade.

NamespacedCache exposes a simple get/set/has/delete vocabulary on top of an
item-oriented CacheItemPool. Every logical key is translated into a storage
key by hashing the facade's namespace path together with the key, so facades
with different namespaces never see each other's entries even when they share
one pool.

Facades are immutable: with_namespace() returns a new facade over the same
pool and never changes the receiver.

Behavior worth knowing before using this module:
- get_transformed() applies the transform to the default value on a miss.
- set_multiple() / delete_multiple() always return True. Use the *_detailed
  variants to see individual failures.
- clear() empties the WHOLE underlying store, not only this namespace. It
  can be disabled per facade with allow_clear=False (NSCACHE_ALLOW_CLEAR),
  in which case it returns False and does nothing.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator, List, Mapping, Tuple, TypeVar

from nscache.interfaces import CacheItemPool, SimpleCache, Ttl
from nscache.metrics import cache_metrics
from nscache.namespace import NamespaceInput, namespace_composer

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class BulkResult:
    """Outcome of a bulk write or delete."""

    total: int
    succeeded: int
    failed_keys: Tuple[str, ...] = ()
    skipped: Tuple[Any, ...] = ()

    @property
    def all_succeeded(self) -> bool:
        return self.succeeded == self.total


class NamespacedCache(SimpleCache):
    """
    Namespace-scoped cache over a shared CacheItemPool.

    Example Usage:
        >>> users = NamespacedCache(pool, "app::users")
        >>> users.set("42", {"name": "x"}, ttl=300)
        True
        >>> users.get("42")
        {'name': 'x'}
        >>> posts = users.with_namespace("posts", replace=True)
        >>> posts.has("42")
        False
    """

    def __init__(
        self,
        pool: CacheItemPool,
        namespace: NamespaceInput = (),
        allow_clear: bool = True,
    ):
        """
        Initialize the facade. Does not touch the pool.

        Args:
            pool: Shared cache pool; its lifetime is managed by the caller
            namespace: "::" delimited path or sequence of segments
            allow_clear: Whether clear() forwards to the pool

        Raises:
            ValueError: If namespace is not a string or sequence of strings
        """
        self._pool = pool
        self._namespace = namespace_composer.normalize(namespace)
        self._path = namespace_composer.path(self._namespace)
        self._allow_clear = allow_clear

    def __repr__(self) -> str:
        return f"<NamespacedCache namespace={self._namespace!r}>"

    @property
    def pool(self) -> CacheItemPool:
        return self._pool

    @property
    def namespace(self) -> Tuple[str, ...]:
        return self._namespace

    @property
    def allow_clear(self) -> bool:
        return self._allow_clear

    def with_namespace(self, namespace: NamespaceInput, replace: bool = False) -> "NamespacedCache":
        """
        Derive a facade with a composed namespace.

        Args:
            namespace: Segments (or "::" path) to append
            replace: If True, use namespace alone instead of appending it

        Returns:
            New facade sharing this facade's pool
        """
        return NamespacedCache(
            self._pool,
            namespace_composer.merge(self._namespace, namespace, replace),
            allow_clear=self._allow_clear,
        )

    def storage_key(self, key: str) -> str:
        """Storage key the pool sees for a logical key."""
        return namespace_composer.storage_key(self._namespace, key)

    def has(self, key: str) -> bool:
        with cache_metrics.timed('has', self._path):
            hit = self._pool.get_item(self.storage_key(key)).is_hit()

        cache_metrics.record_lookup(self._path, 'has', hit)
        return hit

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a value, or default on a miss.

        Performs a single pool lookup.
        """
        with cache_metrics.timed('get', self._path):
            item = self._pool.get_item(self.storage_key(key))

        hit = item.is_hit()
        cache_metrics.record_lookup(self._path, 'get', hit)

        if hit:
            logger.debug(f"Cache hit - namespace={self._path}, key={key}, operation=get")
            return item.get()

        logger.debug(f"Cache miss - namespace={self._path}, key={key}, operation=get")
        return default

    def get_transformed(self, key: str, transform: Callable[[Any], T], default: Any = None) -> T:
        """
        Get a value and pass it through transform.

        The transform is applied to default as well when the key misses, so
        it must accept whatever default is.

        Example:
            >>> cache.get_transformed("count", int, default="0")
            0
        """
        return transform(self.get(key, default))

    def set(self, key: str, value: Any, ttl: Ttl = None) -> bool:
        """
        Store a value.

        Args:
            key: Logical key
            value: Value to store; serialization is the pool's concern
            ttl: Seconds, timedelta, or None for the pool's default policy

        Returns:
            Whether the pool persisted the write
        """
        with cache_metrics.timed('set', self._path):
            item = self._pool.get_item(self.storage_key(key)).set(value).expires_after(ttl)
            saved = self._pool.save(item)

        if saved:
            logger.debug(f"Cache write - namespace={self._path}, key={key}, operation=set, ttl={ttl}")
        else:
            logger.warning(f"Cache write rejected - namespace={self._path}, key={key}, operation=set")

        return saved

    def delete(self, key: str) -> bool:
        with cache_metrics.timed('delete', self._path):
            deleted = self._pool.delete_item(self.storage_key(key))

        if not deleted:
            logger.warning(f"Cache delete rejected - namespace={self._path}, key={key}, operation=delete")

        return deleted

    def get_multiple(self, keys: Iterable[str], default: Any = None) -> Iterator[Tuple[str, Any]]:
        """
        Lazily yield (key, value) pairs in input order.

        Each pair triggers one lookup when it is consumed. The iterator is
        one-shot; call again to start over.
        """
        for key in keys:
            yield key, self.get(key, default)

    def set_multiple(self, values: Mapping[Any, Any], ttl: Ttl = None) -> bool:
        """
        Store every string-keyed entry of values with the same ttl.

        Always returns True. Individual failures are only visible through
        set_multiple_detailed().
        """
        self.set_multiple_detailed(values, ttl)
        return True

    def set_multiple_detailed(self, values: Mapping[Any, Any], ttl: Ttl = None) -> BulkResult:
        """
        Store every string-keyed entry of values and report per-key outcomes.

        Non-string keys are skipped and listed in BulkResult.skipped; they do
        not count towards total.
        """
        failed: List[str] = []
        skipped: List[Any] = []
        total = 0

        for key, value in values.items():
            if not isinstance(key, str):
                skipped.append(key)
                continue

            total += 1
            if not self.set(key, value, ttl):
                failed.append(key)

        if skipped:
            logger.debug(
                f"Skipped non-string keys - namespace={self._path}, "
                f"operation=set_multiple, count={len(skipped)}"
            )

        return BulkResult(
            total=total,
            succeeded=total - len(failed),
            failed_keys=tuple(failed),
            skipped=tuple(skipped),
        )

    def delete_multiple(self, keys: Iterable[str]) -> bool:
        """Delete every key. Always returns True."""
        self.delete_multiple_detailed(keys)
        return True

    def delete_multiple_detailed(self, keys: Iterable[str]) -> BulkResult:
        failed: List[str] = []
        total = 0

        for key in keys:
            total += 1
            if not self.delete(key):
                failed.append(key)

        return BulkResult(total=total, succeeded=total - len(failed), failed_keys=tuple(failed))

    def clear(self) -> bool:
        """
        Clear the entire underlying store.

        This is NOT scoped to the namespace: every entry of every facade that
        shares the pool is removed. Returns False without touching the pool
        when this facade was built with allow_clear=False.
        """
        if not self._allow_clear:
            logger.warning(
                f"Cache clear refused - namespace={self._path}, operation=clear, "
                f"reason=clear_disabled"
            )
            return False

        with cache_metrics.timed('clear', self._path):
            cleared = self._pool.clear()

        if cleared:
            logger.warning(
                f"Cache cleared - namespace={self._path}, operation=clear, scope=full_store"
            )
        else:
            logger.error(f"Cache clear failed - namespace={self._path}, operation=clear")

        return cleared
