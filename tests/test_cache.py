# tests/test_cache.py

"""
Tests for the in-process TTL cache.
"""

import time
from unittest.mock import Mock, patch

from core.cache import cache_clear, cache_delete, cache_get, cache_get_or_load, cache_invalidate, cache_set


def test_cache_set_and_get():
    cache_set("settings:system", {"general": {"app_name": "BMS"}}, ttl_seconds=60)
    assert cache_get("settings:system") == {"general": {"app_name": "BMS"}}
    assert cache_get("settings:missing") is None


def test_cache_expiration():
    cache_set("expiring_key", "value", ttl_seconds=1)
    assert cache_get("expiring_key") == "value"

    later = time.monotonic() + 5
    with patch("core.cache.time") as mock_time:
        mock_time.monotonic.return_value = later
        assert cache_get("expiring_key") is None


def test_get_or_load_calls_loader_once():
    loader = Mock(return_value={"enabled": True})
    assert cache_get_or_load("settings:system", loader, ttl_seconds=60) == {"enabled": True}
    assert cache_get_or_load("settings:system", loader, ttl_seconds=60) == {"enabled": True}
    loader.assert_called_once()


def test_cache_delete():
    cache_set("delete_key", "delete_value")
    cache_delete("delete_key")
    assert cache_get("delete_key") is None


def test_cache_invalidate_prefix_only():
    cache_set("settings:general", 1)
    cache_set("settings:security", 2)
    cache_set("subscriptions:stats", 3)

    assert cache_invalidate("settings:") == 2

    assert cache_get("settings:general") is None
    assert cache_get("settings:security") is None
    assert cache_get("subscriptions:stats") == 3


def test_cache_clear():
    cache_set("key1", "value1")
    cache_set("key2", "value2")

    cache_clear()

    assert cache_get("key1") is None
    assert cache_get("key2") is None
