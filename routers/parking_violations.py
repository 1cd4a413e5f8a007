# routers/parking_violations.py

from fastapi import APIRouter, Depends, Query
from typing import Optional
from pymongo.errors import PyMongoError

from dependencies.auth import get_current_user, CurrentUser
from core.errors import handle_db_error
from core.permission_helpers import requires_permission, resolve_organization_id
from core.utils import sanitize
from models.parking_violation import ViolationCreate, ViolationResolve, ViolationAppeal
from services import parking_violations as violations_service


router = APIRouter(
    prefix="/parking-violations",
    tags=["Parking"],
)


@router.get("", summary="List Parking Violations", dependencies=[Depends(requires_permission("parking:read"))])
def list_violations(
    building_id: Optional[str] = None,
    status: Optional[str] = None,
    plate_number: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = violations_service.list_violations(org_id, building_id=building_id, status=status, plate_number=plate_number, limit=limit)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to fetch parking violations")
    return {"success": True, "data": data}


@router.post(
    "",
    summary="Report Parking Violation",
    status_code=201,
    description="Either `vehicle_id` or `plate_number` is required. `fine` severity requires `fine_amount`.",
    dependencies=[Depends(requires_permission("parking:create"))],
)
def create_violation(
    payload: ViolationCreate,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = violations_service.create_violation(org_id, sanitize(payload.model_dump()), reported_by=current_user.id)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to report parking violation")
    return {"success": True, "data": data}


@router.get("/{violation_id}", summary="Get Parking Violation", dependencies=[Depends(requires_permission("parking:read"))])
def get_violation(violation_id: str, organization_id: Optional[str] = None, current_user: CurrentUser = Depends(get_current_user)):
    org_id = resolve_organization_id(current_user, organization_id)
    return {"success": True, "data": violations_service.get_violation(org_id, violation_id)}


@router.post("/{violation_id}/resolve", summary="Resolve Parking Violation", dependencies=[Depends(requires_permission("parking:update"))])
def resolve_violation(
    violation_id: str,
    payload: Optional[ViolationResolve] = None,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    notes = payload.resolution_notes if payload else None
    try:
        data = violations_service.resolve_violation(org_id, violation_id, current_user.id, notes=notes)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to resolve parking violation")
    return {"success": True, "data": data}


@router.post("/{violation_id}/appeal", summary="Appeal Parking Violation", dependencies=[Depends(requires_permission("parking:update"))])
def appeal_violation(
    violation_id: str,
    payload: ViolationAppeal,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = violations_service.appeal_violation(org_id, violation_id, payload.reason.strip())
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to appeal parking violation")
    return {"success": True, "data": data}
