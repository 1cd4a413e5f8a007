# routers/leases.py

from fastapi import APIRouter, Depends, Query
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
from models.lease import LeaseCreate, LeaseUpdate, LeaseTerminate
from services import leases as leases_service


router = APIRouter(
    prefix="/leases",
    tags=["Leases"],
)


# ============================================================
# LIST LEASES
# ============================================================
@router.get(
    "",
    summary="List Leases",
    description="""
    Leases of the caller's organization.
    Tenant users only ever see their own leases.
    """,
    dependencies=[Depends(requires_permission("leases:read"))],
)
def list_leases(
    tenant_id: Optional[str] = None,
    unit_id: Optional[str] = None,
    status: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    if is_tenant_user(current_user):
        tenant_id = require_tenant_link(current_user)

    try:
        data = leases_service.list_leases(org_id, tenant_id=tenant_id, unit_id=unit_id, status=status, limit=limit)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to fetch leases")
    return {"success": True, "data": data}


# ============================================================
# CREATE LEASE
# ============================================================
@router.post(
    "",
    summary="Create Lease",
    status_code=201,
    description="""
    Validates tenant/unit membership, unit availability, date order and due day.
    When `rent_amount` is omitted it is derived from the unit.
    An active lease marks the unit occupied.
    """,
    dependencies=[Depends(requires_permission("leases:create"))],
)
def create_lease(
    payload: LeaseCreate,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = leases_service.create_lease(org_id, sanitize(payload.model_dump()))
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to create lease")
    return {"success": True, "data": data}


# ============================================================
# GET LEASE
# ============================================================
@router.get(
    "/{lease_id}",
    summary="Get Lease",
    dependencies=[Depends(requires_permission("leases:read"))],
)
def get_lease(lease_id: str, organization_id: Optional[str] = None, current_user: CurrentUser = Depends(get_current_user)):
    org_id = resolve_organization_id(current_user, organization_id)
    tenant_id = require_tenant_link(current_user) if is_tenant_user(current_user) else None
    return {"success": True, "data": leases_service.get_lease(org_id, lease_id, tenant_id=tenant_id)}


# ============================================================
# UPDATE LEASE
# ============================================================
@router.patch(
    "/{lease_id}",
    summary="Update Lease",
    dependencies=[Depends(requires_permission("leases:update"))],
)
def update_lease(
    lease_id: str,
    payload: LeaseUpdate,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = leases_service.update_lease(org_id, lease_id, sanitize(payload.model_dump(exclude_unset=True)))
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to update lease")
    return {"success": True, "data": data}


# ============================================================
# TERMINATE LEASE
# ============================================================
@router.post(
    "/{lease_id}/terminate",
    summary="Terminate Lease",
    dependencies=[Depends(requires_permission("leases:terminate"))],
)
def terminate_lease(
    lease_id: str,
    payload: LeaseTerminate,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    body = sanitize(payload.model_dump())
    try:
        data = leases_service.terminate_lease(
            org_id,
            lease_id,
            reason=body.get("reason"),
            termination_date=body.get("termination_date"),
        )
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to terminate lease")
    return {"success": True, "data": data}


# ============================================================
# ACCEPT TERMS (tenant portal)
# ============================================================
@router.post(
    "/{lease_id}/accept-terms",
    summary="Accept Lease Terms",
    dependencies=[Depends(requires_permission("leases:accept_terms"))],
)
def accept_lease_terms(lease_id: str, organization_id: Optional[str] = None, current_user: CurrentUser = Depends(get_current_user)):
    org_id = resolve_organization_id(current_user, organization_id)
    tenant_id = require_tenant_link(current_user) if is_tenant_user(current_user) else None
    try:
        data = leases_service.accept_lease_terms(org_id, lease_id, current_user.id, tenant_id=tenant_id)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to accept lease terms")
    return {"success": True, "data": data}
