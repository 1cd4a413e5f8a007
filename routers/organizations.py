# routers/organizations.py

from fastapi import APIRouter, Depends, Query, HTTPException
from typing import Optional
from pymongo.errors import PyMongoError

from dependencies.auth import get_current_user, CurrentUser
from core.errors import handle_db_error
from core.permission_helpers import requires_permission, is_admin, require_admin
from core.utils import sanitize
from models.organization import OrganizationCreate, OrganizationUpdate
from services import organizations as organizations_service


router = APIRouter(
    prefix="/organizations",
    tags=["Organizations"],
)


def _require_same_org(current_user: CurrentUser, organization_id: str):
    if not is_admin(current_user) and current_user.organization_id != organization_id:
        raise HTTPException(403, "You do not have access to this organization")


# ============================================================
# LIST ORGANIZATIONS (super admin)
# ============================================================
@router.get("", summary="List Organizations")
def list_organizations(
    status: Optional[str] = None,
    limit: int = Query(100, ge=1, le=500),
    current_user: CurrentUser = Depends(get_current_user),
):
    require_admin(current_user)
    try:
        data = organizations_service.list_organizations(status=status, limit=limit)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to fetch organizations")
    return {"success": True, "data": data}


# ============================================================
# CREATE ORGANIZATION (super admin)
# ============================================================
@router.post("", summary="Create Organization", status_code=201)
def create_organization(payload: OrganizationCreate, current_user: CurrentUser = Depends(get_current_user)):
    require_admin(current_user)
    try:
        data = organizations_service.create_organization(sanitize(payload.model_dump()))
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to create organization")
    return {"success": True, "data": data}


# ============================================================
# GET ORGANIZATION
# ============================================================
@router.get(
    "/{organization_id}",
    summary="Get Organization",
    dependencies=[Depends(requires_permission("organizations:read"))],
)
def get_organization(organization_id: str, current_user: CurrentUser = Depends(get_current_user)):
    _require_same_org(current_user, organization_id)
    return {"success": True, "data": organizations_service.get_organization(organization_id)}


# ============================================================
# UPDATE ORGANIZATION
# ============================================================
@router.patch(
    "/{organization_id}",
    summary="Update Organization",
    dependencies=[Depends(requires_permission("organizations:update"))],
)
def update_organization(
    organization_id: str,
    payload: OrganizationUpdate,
    current_user: CurrentUser = Depends(get_current_user),
):
    _require_same_org(current_user, organization_id)
    changes = sanitize(payload.model_dump(exclude_unset=True))
    # Only platform admins may change an organization's status
    if not is_admin(current_user):
        changes.pop("status", None)
    try:
        data = organizations_service.update_organization(organization_id, changes)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to update organization")
    return {"success": True, "data": data}


# ============================================================
# DELETE ORGANIZATION (soft, status inactive)
# ============================================================
@router.delete("/{organization_id}", summary="Deactivate Organization")
def delete_organization(organization_id: str, current_user: CurrentUser = Depends(get_current_user)):
    require_admin(current_user)
    return {"success": True, "data": organizations_service.delete_organization(organization_id)}
