# models/settings.py

from typing import Any, Dict, Optional
from pydantic import BaseModel


class SettingsUpdate(BaseModel):
    """Partial update; each key is a section name and is deep-merged into storage."""
    general: Optional[Dict[str, Any]] = None
    security: Optional[Dict[str, Any]] = None
    notifications: Optional[Dict[str, Any]] = None
    maintenance: Optional[Dict[str, Any]] = None
    integrations: Optional[Dict[str, Any]] = None
    feature_flags: Optional[Dict[str, Any]] = None
