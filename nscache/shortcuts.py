"""Factory for facades over the configured Django cache."""

from typing import Optional

from nscache import conf
from nscache.backends import DjangoCachePool
from nscache.facade import NamespacedCache
from nscache.namespace import NamespaceInput


def get_cache(namespace: NamespaceInput = None, alias: Optional[str] = None) -> NamespacedCache:
    """
    Build a NamespacedCache over a Django cache backend.

    Args:
        namespace: Appended to NSCACHE_NAMESPACE, if given
        alias: Cache alias; defaults to NSCACHE_CACHE_ALIAS

    Returns:
        Facade rooted at NSCACHE_NAMESPACE (+ namespace)

    Example:
        >>> sessions = get_cache("sessions")
        >>> sessions.set("abc", {"user": 1}, ttl=3600)
        True
    """
    pool = DjangoCachePool(alias=alias or conf.get_cache_alias())
    cache = NamespacedCache(
        pool,
        conf.get_root_namespace(),
        allow_clear=conf.get_allow_clear(),
    )

    if namespace is None:
        return cache

    return cache.with_namespace(namespace)
