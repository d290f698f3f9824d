import os
from unittest.mock import patch

from django.apps import apps
from django.conf import settings
from django.core.cache import cache, caches
from django.core.exceptions import ImproperlyConfigured
from django.test import SimpleTestCase, override_settings

from nscache import conf
from nscache.shortcuts import get_cache


class SettingsTests(SimpleTestCase):
    def test_defaults(self):
        self.assertEqual(conf.get_cache_alias(), "default")
        self.assertEqual(conf.get_root_namespace(), ())
        self.assertTrue(conf.get_allow_clear())

    @override_settings(NSCACHE_NAMESPACE="app::v1", NSCACHE_ALLOW_CLEAR=False)
    def test_overrides(self):
        self.assertEqual(conf.get_root_namespace(), ("app", "v1"))
        self.assertFalse(conf.get_allow_clear())

    @override_settings(NSCACHE_CACHE_ALIAS="missing")
    def test_unknown_alias_is_improperly_configured(self):
        with self.assertRaises(ImproperlyConfigured):
            conf.validate_settings()

    @override_settings(NSCACHE_NAMESPACE=42)
    def test_malformed_namespace_is_improperly_configured(self):
        with self.assertRaises(ImproperlyConfigured):
            conf.validate_settings()

    def test_valid_settings_pass(self):
        conf.validate_settings()


class RedisCacheSettingsTests(SimpleTestCase):
    def test_redis_caches_use_environment(self):
        with patch.dict(
            os.environ,
            {"REDIS_URL": "redis://redis:6379/9", "CACHE_KEY_PREFIX": "nstest"},
            clear=False,
        ):
            caches_setting = conf.build_redis_caches()

        self.assertEqual(caches_setting["default"]["BACKEND"], "django_redis.cache.RedisCache")
        self.assertEqual(caches_setting["default"]["LOCATION"], "redis://redis:6379/9")
        self.assertEqual(caches_setting["default"]["KEY_PREFIX"], "nstest")
        self.assertEqual(
            caches_setting["default"]["OPTIONS"]["CLIENT_CLASS"],
            "django_redis.client.DefaultClient",
        )

        with override_settings(CACHES=caches_setting):
            self.assertEqual(settings.CACHES["default"]["BACKEND"], "django_redis.cache.RedisCache")

    def test_redis_caches_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            caches_setting = conf.build_redis_caches()

        self.assertEqual(caches_setting["default"]["LOCATION"], "redis://redis:6379/1")
        self.assertEqual(caches_setting["default"]["KEY_PREFIX"], "nscache")
        self.assertEqual(
            caches_setting["local"]["BACKEND"],
            "django.core.cache.backends.locmem.LocMemCache",
        )


class AppConfigTests(SimpleTestCase):
    @patch('nscache.apps.logger')
    def test_ready_logs_configuration(self, mock_logger):
        apps.get_app_config("nscache").ready()

        log_message = mock_logger.info.call_args[0][0]
        assert "alias=default" in log_message

    @override_settings(NSCACHE_CACHE_ALIAS="missing")
    @patch('nscache.apps.logger')
    def test_ready_logs_invalid_settings(self, mock_logger):
        apps.get_app_config("nscache").ready()

        mock_logger.error.assert_called_once()
        mock_logger.info.assert_not_called()


class GetCacheTests(SimpleTestCase):
    def setUp(self):
        cache.clear()
        caches["secondary"].clear()

    def tearDown(self):
        cache.clear()
        caches["secondary"].clear()

    def test_uses_default_alias(self):
        facade = get_cache()
        self.assertIs(facade.pool.cache, caches["default"])
        self.assertEqual(facade.namespace, ())

    def test_namespace_is_appended_to_root(self):
        with override_settings(NSCACHE_NAMESPACE=["app"]):
            facade = get_cache("sessions")
        self.assertEqual(facade.namespace, ("app", "sessions"))

    def test_alias_argument(self):
        facade = get_cache(alias="secondary")
        self.assertIs(facade.pool.cache, caches["secondary"])

    @override_settings(NSCACHE_CACHE_ALIAS="secondary")
    def test_alias_setting(self):
        self.assertIs(get_cache().pool.cache, caches["secondary"])

    @override_settings(NSCACHE_ALLOW_CLEAR=False)
    def test_allow_clear_setting(self):
        facade = get_cache("ns")
        facade.set("k", "v")

        self.assertFalse(facade.clear())
        self.assertEqual(facade.get("k"), "v")

    def test_facades_from_factory_share_backend(self):
        get_cache("users").set("42", "v")
        self.assertEqual(get_cache("users").get("42"), "v")
        self.assertFalse(get_cache("posts").has("42"))
