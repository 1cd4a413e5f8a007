# core/cache.py

"""
In-process TTL cache.

Holds small, read-mostly values such as the system settings document.
Keys are namespaced ("settings:system") so a write can drop a whole
namespace with cache_invalidate("settings:"). Per worker; nothing is shared
between processes.
"""

import time
from threading import Lock
from typing import Any, Callable, Dict, Optional, Tuple

from core.logging_config import logger


DEFAULT_TTL_SECONDS = 300

# key -> (expires_at on the monotonic clock, value)
_entries: Dict[str, Tuple[float, Any]] = {}
_lock = Lock()


def cache_get(key: str) -> Optional[Any]:
    with _lock:
        entry = _entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if time.monotonic() >= expires_at:
            del _entries[key]
            return None
        return value


def cache_set(key: str, value: Any, ttl_seconds: int = DEFAULT_TTL_SECONDS):
    with _lock:
        _entries[key] = (time.monotonic() + ttl_seconds, value)


def cache_get_or_load(key: str, loader: Callable[[], Any], ttl_seconds: int = DEFAULT_TTL_SECONDS) -> Any:
    """Return the cached value, calling loader() and caching its result on a miss."""
    value = cache_get(key)
    if value is None:
        value = loader()
        cache_set(key, value, ttl_seconds)
    return value


def cache_delete(key: str):
    with _lock:
        _entries.pop(key, None)


def cache_invalidate(prefix: str) -> int:
    with _lock:
        keys = [k for k in _entries if k.startswith(prefix)]
        for k in keys:
            del _entries[k]
    if keys:
        logger.debug(f"Cache invalidated {len(keys)} key(s) under '{prefix}'")
    return len(keys)


def cache_clear():
    with _lock:
        _entries.clear()
