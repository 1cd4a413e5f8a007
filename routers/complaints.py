# routers/complaints.py

from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional
from pymongo.errors import PyMongoError

from dependencies.auth import get_current_user, CurrentUser
from core.errors import handle_db_error
from core.permission_helpers import (
    requires_permission,
    resolve_organization_id,
    is_tenant_user,
    require_tenant_link,
)
from core.utils import sanitize
from models.complaint import ComplaintCreate, ComplaintUpdate, ComplaintConvert
from services import complaints as complaints_service


router = APIRouter(
    prefix="/complaints",
    tags=["Complaints"],
)


@router.get("", summary="List Complaints", dependencies=[Depends(requires_permission("complaints:read"))])
def list_complaints(
    status: Optional[str] = None,
    tenant_id: Optional[str] = None,
    building_id: Optional[str] = None,
    type: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    if is_tenant_user(current_user):
        tenant_id = require_tenant_link(current_user)
    try:
        data = complaints_service.list_complaints(
            org_id,
            status=status,
            tenant_id=tenant_id,
            building_id=building_id,
            complaint_type=type,
            limit=limit,
        )
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to fetch complaints")
    return {"success": True, "data": data}


@router.post(
    "",
    summary="File Complaint",
    status_code=201,
    description="Tenant users always file against their own tenant record.",
    dependencies=[Depends(requires_permission("complaints:create"))],
)
def create_complaint(
    payload: ComplaintCreate,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    data = sanitize(payload.model_dump())

    if is_tenant_user(current_user):
        data["tenant_id"] = require_tenant_link(current_user)
    elif not data.get("tenant_id"):
        raise HTTPException(400, "tenant_id is required")

    try:
        complaint = complaints_service.create_complaint(org_id, data)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to create complaint")
    return {"success": True, "data": complaint}


@router.get("/{complaint_id}", summary="Get Complaint", dependencies=[Depends(requires_permission("complaints:read"))])
def get_complaint(complaint_id: str, organization_id: Optional[str] = None, current_user: CurrentUser = Depends(get_current_user)):
    org_id = resolve_organization_id(current_user, organization_id)
    tenant_id = require_tenant_link(current_user) if is_tenant_user(current_user) else None
    return {"success": True, "data": complaints_service.get_complaint(org_id, complaint_id, tenant_id=tenant_id)}


@router.patch("/{complaint_id}", summary="Update Complaint", dependencies=[Depends(requires_permission("complaints:update"))])
def update_complaint(
    complaint_id: str,
    payload: ComplaintUpdate,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = complaints_service.update_complaint(org_id, complaint_id, sanitize(payload.model_dump(exclude_unset=True)))
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to update complaint")
    return {"success": True, "data": data}


@router.post(
    "/{complaint_id}/convert-to-work-order",
    summary="Convert Complaint to Work Order",
    status_code=201,
    dependencies=[Depends(requires_permission("complaints:convert"))],
)
def convert_complaint(
    complaint_id: str,
    payload: Optional[ComplaintConvert] = None,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    overrides = sanitize(payload.model_dump()) if payload else {}
    try:
        data = complaints_service.convert_complaint_to_work_order(
            org_id,
            complaint_id,
            created_by=current_user.id,
            overrides=overrides,
        )
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to convert complaint")
    return {"success": True, "data": data}
