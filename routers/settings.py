# routers/settings.py

import copy
from fastapi import APIRouter, Depends, HTTPException
from typing import Any, Dict
from pymongo.errors import PyMongoError

from dependencies.auth import get_current_user, CurrentUser
from core.errors import handle_db_error
from core.permission_helpers import is_admin, require_admin
from models.settings import SettingsUpdate
from services import system_settings as settings_service


router = APIRouter(
    prefix="/settings",
    tags=["System Settings"],
)

MASK = "********"


def _mask_secrets(data: dict) -> dict:
    """Org admins may read settings but never provider credentials."""
    masked = copy.deepcopy(data)
    providers = masked.get("integrations", {}).get("payment_providers", {})
    for config in providers.values():
        for key in ("webhook_secret", "secret_key", "api_key", "app_key", "system_token"):
            if config.get(key):
                config[key] = MASK
    return masked


@router.get("", summary="Get System Settings")
def get_settings(current_user: CurrentUser = Depends(get_current_user)):
    if current_user.role not in ("super_admin", "org_admin"):
        raise HTTPException(403, "Insufficient permissions: 'settings:read' required")
    try:
        data = settings_service.get_system_settings()
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to load settings")
    return {"success": True, "data": data if is_admin(current_user) else _mask_secrets(data)}


@router.patch(
    "",
    summary="Update System Settings",
    description="Partial update. Nested keys are merged; untouched keys keep their stored value.",
)
def update_settings(payload: SettingsUpdate, current_user: CurrentUser = Depends(get_current_user)):
    require_admin(current_user)
    try:
        data = settings_service.update_system_settings(payload.model_dump(exclude_none=True), updated_by=current_user.id)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to update settings")
    return {"success": True, "data": data}


@router.patch("/{section}", summary="Update One Settings Section")
def update_settings_section(section: str, values: Dict[str, Any], current_user: CurrentUser = Depends(get_current_user)):
    require_admin(current_user)
    try:
        data = settings_service.update_settings_section(section, values, updated_by=current_user.id)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to update settings")
    return {"success": True, "data": data}
