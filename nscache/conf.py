"""
Settings for the namespaced cache app.

Settings (all optional):
- NSCACHE_CACHE_ALIAS: alias in CACHES backing the default pool ("default")
- NSCACHE_NAMESPACE: root namespace, "::" path or list of segments (empty)
- NSCACHE_ALLOW_CLEAR: whether facade.clear() empties the store (True)
"""

import os
from typing import Tuple

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from nscache.namespace import namespace_composer

DEFAULT_CACHE_ALIAS = "default"


def get_cache_alias() -> str:
    return getattr(settings, "NSCACHE_CACHE_ALIAS", DEFAULT_CACHE_ALIAS)


def get_root_namespace() -> Tuple[str, ...]:
    return namespace_composer.normalize(getattr(settings, "NSCACHE_NAMESPACE", ()))


def get_allow_clear() -> bool:
    return bool(getattr(settings, "NSCACHE_ALLOW_CLEAR", True))


def validate_settings() -> None:
    """
    Check the nscache settings against the project configuration.

    Raises:
        ImproperlyConfigured: If the cache alias is not in CACHES or the
            root namespace is malformed
    """
    alias = get_cache_alias()
    if alias not in settings.CACHES:
        raise ImproperlyConfigured(
            f"NSCACHE_CACHE_ALIAS={alias!r} is not defined in CACHES"
        )

    try:
        get_root_namespace()
    except ValueError as e:
        raise ImproperlyConfigured(f"Invalid NSCACHE_NAMESPACE: {e}") from e


def build_redis_caches() -> dict:
    """
    Build a CACHES setting for a Redis-backed production store.

    Reads REDIS_URL and CACHE_KEY_PREFIX from the environment. Requires the
    django-redis package ("redis" extra).
    """
    return {
        "default": {
            "BACKEND": "django_redis.cache.RedisCache",
            "LOCATION": os.getenv("REDIS_URL", "redis://redis:6379/1"),
            "OPTIONS": {
                "CLIENT_CLASS": "django_redis.client.DefaultClient",
                "CONNECTION_POOL_KWARGS": {
                    "max_connections": 50,
                    "retry_on_timeout": True,
                },
                "SOCKET_CONNECT_TIMEOUT": 5,
                "SOCKET_TIMEOUT": 5,
            },
            "TIMEOUT": 300,
            "KEY_PREFIX": os.getenv("CACHE_KEY_PREFIX", "nscache"),
        },
        "local": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
            "TIMEOUT": 300,
        },
    }
