"""
Django app configuration for the namespaced cache.

Validates the nscache settings during Django startup.
"""

import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class NsCacheConfig(AppConfig):
    """
    Configuration for the nscache Django app.

    This app provides:
    - Namespace-scoped cache facades over any Django cache backend
    - SHA-256 storage keys derived from namespace path + logical key
    - Per-namespace hit/miss metrics
    """

    name = 'nscache'
    verbose_name = 'Namespaced Cache'

    def ready(self):
        """
        Check the nscache settings once Django has loaded.

        Misconfiguration is logged, not raised, so a bad cache setting never
        prevents the project from starting.
        """
        # Import here to avoid AppRegistryNotReady errors
        from nscache.conf import get_allow_clear, get_cache_alias, validate_settings

        try:
            validate_settings()
        except Exception as e:
            logger.error(f"Error validating nscache settings: {e}", exc_info=True)
            return

        logger.info(
            f"Namespaced cache configured - alias={get_cache_alias()}, "
            f"allow_clear={get_allow_clear()}"
        )
