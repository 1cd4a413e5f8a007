# routers/units.py

from fastapi import APIRouter, Depends, Query
from typing import Optional
from pymongo.errors import PyMongoError

from dependencies.auth import get_current_user, CurrentUser
from core.errors import handle_db_error
from core.permission_helpers import requires_permission, resolve_organization_id
from core.utils import sanitize
from models.unit import UnitCreate, UnitUpdate
from services import units as units_service
from services import leases as leases_service


router = APIRouter(
    prefix="/units",
    tags=["Units"],
)


# -------------------------------------------------------------
# LIST Units
# -------------------------------------------------------------
@router.get("", dependencies=[Depends(requires_permission("units:read"))])
def list_units(
    building_id: Optional[str] = None,
    status: Optional[str] = None,
    unit_type: Optional[str] = None,
    limit: int = Query(200, ge=1, le=1000),
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = units_service.list_units(org_id, building_id=building_id, status=status, unit_type=unit_type, limit=limit)
    except PyMongoError as e:
        raise handle_db_error(e, "Unable to fetch units")
    return {"success": True, "data": data}


# -------------------------------------------------------------
# CREATE Unit
# -------------------------------------------------------------
@router.post("", status_code=201, dependencies=[Depends(requires_permission("units:create"))])
def create_unit(
    payload: UnitCreate,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = units_service.create_unit(org_id, sanitize(payload.model_dump()))
    except PyMongoError as e:
        raise handle_db_error(e, "Unit creation failed")
    return {"success": True, "data": data}


# -------------------------------------------------------------
# GET Unit (with effective rent + current lease)
# -------------------------------------------------------------
@router.get("/{unit_id}", dependencies=[Depends(requires_permission("units:read"))])
def get_unit(unit_id: str, organization_id: Optional[str] = None, current_user: CurrentUser = Depends(get_current_user)):
    org_id = resolve_organization_id(current_user, organization_id)
    unit = units_service.get_unit(org_id, unit_id)

    rent, source = units_service.resolve_unit_rent(unit)
    unit["effective_rent"] = rent
    unit["effective_rent_source"] = source

    active = leases_service.find_active_lease_for_unit(org_id, unit_id)
    unit["active_lease_id"] = active["id"] if active else None
    return {"success": True, "data": unit}


# -------------------------------------------------------------
# UPDATE Unit
# -------------------------------------------------------------
@router.patch("/{unit_id}", dependencies=[Depends(requires_permission("units:update"))])
def update_unit(
    unit_id: str,
    payload: UnitUpdate,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = units_service.update_unit(org_id, unit_id, sanitize(payload.model_dump(exclude_unset=True)))
    except PyMongoError as e:
        raise handle_db_error(e, "Unit update failed")
    return {"success": True, "data": data}


# -------------------------------------------------------------
# DELETE Unit (soft, status maintenance)
# -------------------------------------------------------------
@router.delete("/{unit_id}", dependencies=[Depends(requires_permission("units:delete"))])
def delete_unit(unit_id: str, organization_id: Optional[str] = None, current_user: CurrentUser = Depends(get_current_user)):
    org_id = resolve_organization_id(current_user, organization_id)
    return {"success": True, "data": units_service.delete_unit(org_id, unit_id)}
