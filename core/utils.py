# core/utils.py

from datetime import datetime, date, timezone
from typing import Optional


def utcnow() -> datetime:
    """Naive UTC timestamp. All stored datetimes are naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value):
    """
    Normalize datetimes for storage:
    - aware datetimes → naive UTC
    - plain dates → midnight datetimes
    - everything else untouched
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return value


def sanitize(data: dict) -> dict:
    """
    Sanitize dictionary data before it is written:
    - Empty strings → None
    - Strip string whitespace
    - Dates/datetimes → naive UTC datetimes
    - Enums → their string value
    - Nested dicts and lists are sanitized recursively
    """
    clean = {}

    for k, v in data.items():
        clean[k] = _sanitize_value(v)

    return clean


def _sanitize_value(v):
    if v is None or isinstance(v, bool):
        return v

    if isinstance(v, str):
        # str enums land here too; keep the raw value
        stripped = str(getattr(v, "value", v)).strip()
        return stripped if stripped != "" else None

    if isinstance(v, (datetime, date)):
        return to_naive_utc(v)

    if isinstance(v, dict):
        return sanitize(v)

    if isinstance(v, list):
        return [_sanitize_value(item) for item in v]

    return v


def round_money(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    return round(float(value), 2)
