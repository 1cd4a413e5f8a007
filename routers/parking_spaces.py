# routers/parking_spaces.py

from fastapi import APIRouter, Depends, Query
from typing import Optional
from pymongo.errors import PyMongoError

from dependencies.auth import get_current_user, CurrentUser
from core.errors import handle_db_error
from core.permission_helpers import requires_permission, resolve_organization_id
from core.utils import sanitize
from models.parking_space import ParkingSpaceCreate, ParkingSpaceUpdate, ParkingSpaceAssign
from services import parking_spaces as parking_spaces_service


router = APIRouter(
    prefix="/parking-spaces",
    tags=["Parking Spaces"],
)


@router.get("", summary="List Parking Spaces", dependencies=[Depends(requires_permission("parking_spaces:read"))])
def list_parking_spaces(
    building_id: Optional[str] = None,
    status: Optional[str] = None,
    space_type: Optional[str] = None,
    assigned_to: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = parking_spaces_service.list_parking_spaces(
            org_id,
            building_id=building_id,
            status=status,
            space_type=space_type,
            assigned_to=assigned_to,
            limit=limit,
        )
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to fetch parking spaces")
    return {"success": True, "data": data}


@router.post("", summary="Create Parking Space", status_code=201, dependencies=[Depends(requires_permission("parking_spaces:create"))])
def create_parking_space(
    payload: ParkingSpaceCreate,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = parking_spaces_service.create_parking_space(org_id, sanitize(payload.model_dump()))
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to create parking space")
    return {"success": True, "data": data}


@router.get("/{parking_space_id}", summary="Get Parking Space", dependencies=[Depends(requires_permission("parking_spaces:read"))])
def get_parking_space(parking_space_id: str, organization_id: Optional[str] = None, current_user: CurrentUser = Depends(get_current_user)):
    org_id = resolve_organization_id(current_user, organization_id)
    return {"success": True, "data": parking_spaces_service.get_parking_space(org_id, parking_space_id)}


@router.patch("/{parking_space_id}", summary="Update Parking Space", dependencies=[Depends(requires_permission("parking_spaces:update"))])
def update_parking_space(
    parking_space_id: str,
    payload: ParkingSpaceUpdate,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = parking_spaces_service.update_parking_space(
            org_id, parking_space_id, sanitize(payload.model_dump(exclude_unset=True))
        )
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to update parking space")
    return {"success": True, "data": data}


@router.delete("/{parking_space_id}", summary="Retire Parking Space", dependencies=[Depends(requires_permission("parking_spaces:delete"))])
def delete_parking_space(parking_space_id: str, organization_id: Optional[str] = None, current_user: CurrentUser = Depends(get_current_user)):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = parking_spaces_service.delete_parking_space(org_id, parking_space_id)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to retire parking space")
    return {"success": True, "data": data}


# ============================================================
# ASSIGNMENT
# ============================================================
@router.post("/{parking_space_id}/assign", summary="Assign Parking Space", dependencies=[Depends(requires_permission("parking_spaces:assign"))])
def assign_parking_space(
    parking_space_id: str,
    payload: ParkingSpaceAssign,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    body = sanitize(payload.model_dump())
    try:
        data = parking_spaces_service.assign_parking_space(
            org_id, parking_space_id, body["tenant_id"], vehicle_id=body.get("vehicle_id")
        )
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to assign parking space")
    return {"success": True, "data": data}


@router.post("/{parking_space_id}/release", summary="Release Parking Space", dependencies=[Depends(requires_permission("parking_spaces:assign"))])
def release_parking_space(parking_space_id: str, organization_id: Optional[str] = None, current_user: CurrentUser = Depends(get_current_user)):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = parking_spaces_service.release_parking_space(org_id, parking_space_id)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to release parking space")
    return {"success": True, "data": data}
