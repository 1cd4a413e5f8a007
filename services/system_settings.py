# services/system_settings.py

"""
Platform-wide settings stored as a single document.

Reads always return the defaults deep-merged with whatever is stored, so new
keys appear without a migration.
"""

import copy
from typing import Optional

from core.cache import cache_get_or_load, cache_invalidate
from core.errors import ValidationError
from core.logging_config import logger
from core.mongo_client import get_db
from core.utils import utcnow


COLLECTION = "system_settings"
SETTINGS_ID = "system"
CACHE_NAMESPACE = "settings:"
CACHE_KEY = CACHE_NAMESPACE + "system"
CACHE_TTL_SECONDS = 60


def _provider_defaults(*keys: str) -> dict:
    provider = {"enabled": False, "webhook_secret": None}
    provider.update({key: None for key in keys})
    return provider


DEFAULT_SETTINGS = {
    "general": {
        "app_name": "BMS",
        "app_url": None,
        "support_email": None,
        "support_phone": None,
        "default_currency": "ETB",
        "default_language": "en",
    },
    "security": {
        "session_timeout_hours": 24,
        "require_mfa": False,
        "password_min_length": 8,
        "password_require_uppercase": True,
        "password_require_numbers": True,
        "password_require_symbols": False,
    },
    "notifications": {
        "email_enabled": True,
        "sms_enabled": False,
        "payment_reminders_enabled": True,
    },
    "maintenance": {
        "enabled": False,
        "message": None,
    },
    "integrations": {
        "payment_providers": {
            "telebirr": _provider_defaults("app_id", "app_key", "short_code"),
            "cbe_birr": _provider_defaults("merchant_id", "api_key"),
            "chapa": _provider_defaults("public_key", "secret_key"),
            "hello_cash": _provider_defaults("principal", "system_token"),
            "bank_transfer": _provider_defaults(),
        },
    },
    "feature_flags": {},
}

SECTIONS = list(DEFAULT_SETTINGS.keys())

# Webhook provider names → settings keys
PROVIDER_KEYS = {
    "telebirr": "telebirr",
    "cbe_birr": "cbe_birr",
    "chapa": "chapa",
    "hellocash": "hello_cash",
    "hello_cash": "hello_cash",
    "bank_transfer": "bank_transfer",
}


def deep_merge(base: dict, override: dict) -> dict:
    result = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _flatten(prefix: str, values: dict) -> dict:
    """{"a": {"b": 1}} → {"prefix.a.b": 1} so partial updates don't clobber siblings."""
    flat = {}
    for key, value in values.items():
        path = f"{prefix}.{key}"
        if isinstance(value, dict) and value:
            flat.update(_flatten(path, value))
        else:
            flat[path] = value
    return flat


# -----------------------------------------------------
# Read
# -----------------------------------------------------
def _load_settings() -> dict:
    stored = get_db()[COLLECTION].find_one({"_id": SETTINGS_ID}) or {}
    stored = {k: v for k, v in stored.items() if k != "_id"}
    return deep_merge(DEFAULT_SETTINGS, stored)


def get_system_settings() -> dict:
    # Callers get their own copy; the cached dict is never handed out
    return copy.deepcopy(cache_get_or_load(CACHE_KEY, _load_settings, CACHE_TTL_SECONDS))


def get_provider_config(provider: str) -> Optional[dict]:
    key = PROVIDER_KEYS.get(provider)
    if key is None:
        return None
    return get_system_settings()["integrations"]["payment_providers"].get(key)


def is_provider_enabled(provider: str) -> bool:
    config = get_provider_config(provider)
    return bool(config and config.get("enabled"))


# -----------------------------------------------------
# Write
# -----------------------------------------------------
def update_system_settings(partial: dict, updated_by: Optional[str] = None) -> dict:
    unknown = [key for key in partial if key not in SECTIONS]
    if unknown:
        raise ValidationError(f"Unknown settings section: {', '.join(unknown)}")

    flat = {}
    for section, values in partial.items():
        if values is None:
            continue
        if not isinstance(values, dict):
            raise ValidationError(f"Settings section '{section}' must be an object")
        flat.update(_flatten(section, values))

    flat["updated_at"] = utcnow()
    flat["updated_by"] = updated_by

    get_db()[COLLECTION].update_one({"_id": SETTINGS_ID}, {"$set": flat}, upsert=True)
    cache_invalidate(CACHE_NAMESPACE)

    logger.info(f"System settings updated by {updated_by}: {sorted(k for k in partial if partial[k] is not None)}")
    return get_system_settings()


def update_settings_section(section: str, values: dict, updated_by: Optional[str] = None) -> dict:
    if section not in SECTIONS:
        raise ValidationError("Unknown settings section")
    return update_system_settings({section: values}, updated_by)
