# routers/vehicles.py

from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional
from pymongo.errors import PyMongoError

from dependencies.auth import get_current_user, CurrentUser
from core.errors import handle_db_error
from core.permission_helpers import requires_permission, resolve_organization_id
from core.utils import sanitize
from models.vehicle import VehicleCreate, VehicleUpdate
from services import vehicles as vehicles_service


router = APIRouter(
    prefix="/vehicles",
    tags=["Vehicles"],
)


@router.get("", summary="List Vehicles", dependencies=[Depends(requires_permission("vehicles:read"))])
def list_vehicles(
    tenant_id: Optional[str] = None,
    status: Optional[str] = None,
    is_temporary: Optional[bool] = None,
    limit: int = Query(100, ge=1, le=1000),
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = vehicles_service.list_vehicles(org_id, tenant_id=tenant_id, status=status, is_temporary=is_temporary, limit=limit)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to fetch vehicles")
    return {"success": True, "data": data}


@router.get("/by-plate/{plate_number}", summary="Look Up Vehicle by Plate", dependencies=[Depends(requires_permission("vehicles:read"))])
def get_vehicle_by_plate(plate_number: str, organization_id: Optional[str] = None, current_user: CurrentUser = Depends(get_current_user)):
    org_id = resolve_organization_id(current_user, organization_id)
    vehicle = vehicles_service.find_vehicle_by_plate(org_id, plate_number)
    if not vehicle:
        raise HTTPException(404, "Vehicle not found")
    return {"success": True, "data": vehicle}


@router.post("", summary="Register Vehicle", status_code=201, dependencies=[Depends(requires_permission("vehicles:create"))])
def create_vehicle(
    payload: VehicleCreate,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = vehicles_service.create_vehicle(org_id, sanitize(payload.model_dump()))
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to register vehicle")
    return {"success": True, "data": data}


@router.get("/{vehicle_id}", summary="Get Vehicle", dependencies=[Depends(requires_permission("vehicles:read"))])
def get_vehicle(vehicle_id: str, organization_id: Optional[str] = None, current_user: CurrentUser = Depends(get_current_user)):
    org_id = resolve_organization_id(current_user, organization_id)
    return {"success": True, "data": vehicles_service.get_vehicle(org_id, vehicle_id)}


@router.patch("/{vehicle_id}", summary="Update Vehicle", dependencies=[Depends(requires_permission("vehicles:update"))])
def update_vehicle(
    vehicle_id: str,
    payload: VehicleUpdate,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = vehicles_service.update_vehicle(org_id, vehicle_id, sanitize(payload.model_dump(exclude_unset=True)))
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to update vehicle")
    return {"success": True, "data": data}


@router.delete("/{vehicle_id}", summary="Deactivate Vehicle", dependencies=[Depends(requires_permission("vehicles:delete"))])
def delete_vehicle(vehicle_id: str, organization_id: Optional[str] = None, current_user: CurrentUser = Depends(get_current_user)):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = vehicles_service.delete_vehicle(org_id, vehicle_id)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to deactivate vehicle")
    return {"success": True, "data": data}
