"""
Interfaces for the namespaced cache.

- CacheItem / CacheItemPool: the item-oriented storage contract the facade
  consumes. Any engine (Django cache backend, Redis client, in-memory dict)
  can sit behind it.
- SimpleCache: the get/set/has/delete vocabulary the facade exposes.
"""

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Any, Iterable, Iterator, Mapping, Optional, Tuple, Union

Ttl = Optional[Union[int, timedelta]]


class CacheItem(ABC):
    """
    Handle for a single entry in a cache pool.

    A handle is returned for every lookup, whether or not the entry exists.
    Mutating a handle has no effect until it is passed to CacheItemPool.save().
    """

    @property
    @abstractmethod
    def key(self) -> str:
        """Storage key this handle addresses."""
        ...

    @abstractmethod
    def is_hit(self) -> bool:
        """Whether the lookup found a live (non-expired) entry."""
        ...

    @abstractmethod
    def get(self) -> Any:
        """Stored value, or None on a miss."""
        ...

    @abstractmethod
    def set(self, value: Any) -> "CacheItem":
        """Set the value to persist. Returns the handle for chaining."""
        ...

    @abstractmethod
    def expires_after(self, ttl: Ttl) -> "CacheItem":
        """
        Set the expiry relative to now.

        Args:
            ttl: Seconds, a timedelta, or None for the pool's default policy

        Returns:
            The handle, for chaining
        """
        ...


class CacheItemPool(ABC):
    """Item-oriented cache storage engine."""

    @abstractmethod
    def get_item(self, key: str) -> CacheItem:
        """Fetch a handle for key, creating an empty (miss) handle if absent."""
        ...

    @abstractmethod
    def save(self, item: CacheItem) -> bool:
        """Persist a mutated handle. Returns True on success."""
        ...

    @abstractmethod
    def delete_item(self, key: str) -> bool:
        """Remove an entry. Removing an absent entry is a success."""
        ...

    @abstractmethod
    def clear(self) -> bool:
        """Remove every entry in the whole store."""
        ...


class SimpleCache(ABC):
    """Key/value cache vocabulary."""

    @abstractmethod
    def has(self, key: str) -> bool:
        ...

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        ...

    @abstractmethod
    def set(self, key: str, value: Any, ttl: Ttl = None) -> bool:
        ...

    @abstractmethod
    def delete(self, key: str) -> bool:
        ...

    @abstractmethod
    def get_multiple(self, keys: Iterable[str], default: Any = None) -> Iterator[Tuple[str, Any]]:
        ...

    @abstractmethod
    def set_multiple(self, values: Mapping[Any, Any], ttl: Ttl = None) -> bool:
        ...

    @abstractmethod
    def delete_multiple(self, keys: Iterable[str]) -> bool:
        ...

    @abstractmethod
    def clear(self) -> bool:
        ...
