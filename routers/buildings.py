# routers/buildings.py

from fastapi import APIRouter, Depends, Query
from typing import Optional
from pymongo.errors import PyMongoError

from dependencies.auth import get_current_user, CurrentUser
from core.errors import handle_db_error
from core.permission_helpers import requires_permission, resolve_organization_id
from core.utils import sanitize
from models.building import BuildingCreate, BuildingUpdate
from services import buildings as buildings_service
from services import units as units_service


router = APIRouter(
    prefix="/buildings",
    tags=["Buildings"]
)


# ============================================================
# LIST BUILDINGS
# ============================================================
@router.get(
    "",
    summary="List Buildings",
    description="""
    Buildings of the caller's organization.

    **Permissions:** Requires `buildings:read`.
    **Query Parameters:**
    - `status`: active | under-construction | inactive
    - `building_type`: residential | commercial | mixed
    - `organization_id`: super admins only
    """,
    dependencies=[Depends(requires_permission("buildings:read"))],
)
def list_buildings(
    status: Optional[str] = None,
    building_type: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = buildings_service.list_buildings(org_id, status=status, building_type=building_type, limit=limit)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to fetch buildings")
    return {"success": True, "data": data}


# ============================================================
# CREATE BUILDING
# ============================================================
@router.post(
    "",
    summary="Create Building",
    status_code=201,
    dependencies=[Depends(requires_permission("buildings:create"))],
)
def create_building(
    payload: BuildingCreate,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = buildings_service.create_building(org_id, sanitize(payload.model_dump()))
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to create building")
    return {"success": True, "data": data}


# ============================================================
# GET BUILDING
# ============================================================
@router.get(
    "/{building_id}",
    summary="Get Building",
    dependencies=[Depends(requires_permission("buildings:read"))],
)
def get_building(building_id: str, organization_id: Optional[str] = None, current_user: CurrentUser = Depends(get_current_user)):
    org_id = resolve_organization_id(current_user, organization_id)
    return {"success": True, "data": buildings_service.get_building(org_id, building_id)}


# ============================================================
# UPDATE BUILDING
# ============================================================
@router.patch(
    "/{building_id}",
    summary="Update Building",
    dependencies=[Depends(requires_permission("buildings:update"))],
)
def update_building(
    building_id: str,
    payload: BuildingUpdate,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = buildings_service.update_building(org_id, building_id, sanitize(payload.model_dump(exclude_unset=True)))
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to update building")
    return {"success": True, "data": data}


# ============================================================
# DELETE BUILDING (soft, status inactive)
# ============================================================
@router.delete(
    "/{building_id}",
    summary="Deactivate Building",
    dependencies=[Depends(requires_permission("buildings:delete"))],
)
def delete_building(building_id: str, organization_id: Optional[str] = None, current_user: CurrentUser = Depends(get_current_user)):
    org_id = resolve_organization_id(current_user, organization_id)
    return {"success": True, "data": buildings_service.delete_building(org_id, building_id)}


# ============================================================
# GET UNITS FOR BUILDING
# ============================================================
@router.get(
    "/{building_id}/units",
    summary="List Units in Building",
    dependencies=[Depends(requires_permission("units:read"))],
)
def get_building_units(
    building_id: str,
    status: Optional[str] = None,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    buildings_service.get_building(org_id, building_id)
    try:
        data = units_service.list_units(org_id, building_id=building_id, status=status)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to fetch units")
    return {"success": True, "data": data}
