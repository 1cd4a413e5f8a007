# routers/tenants.py

from fastapi import APIRouter, Depends, Query
from typing import Optional
from pymongo.errors import PyMongoError

from dependencies.auth import get_current_user, CurrentUser
from core.errors import handle_db_error
from core.permission_helpers import requires_permission, resolve_organization_id
from core.utils import sanitize
from models.tenant import TenantCreate, TenantUpdate
from services import tenants as tenants_service


router = APIRouter(
    prefix="/tenants",
    tags=["Tenants"],
)


@router.get("", dependencies=[Depends(requires_permission("tenants:read"))])
def list_tenants(
    status: Optional[str] = None,
    search: Optional[str] = Query(None, description="Name or phone fragment"),
    limit: int = Query(100, ge=1, le=1000),
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = tenants_service.list_tenants(org_id, status=status, search=search, limit=limit)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to fetch tenants")
    return {"success": True, "data": data}


@router.post("", status_code=201, dependencies=[Depends(requires_permission("tenants:create"))])
def create_tenant(
    payload: TenantCreate,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = tenants_service.create_tenant(org_id, sanitize(payload.model_dump()))
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to create tenant")
    return {"success": True, "data": data}


@router.get("/{tenant_id}", dependencies=[Depends(requires_permission("tenants:read"))])
def get_tenant(tenant_id: str, organization_id: Optional[str] = None, current_user: CurrentUser = Depends(get_current_user)):
    org_id = resolve_organization_id(current_user, organization_id)
    return {"success": True, "data": tenants_service.get_tenant(org_id, tenant_id)}


@router.patch("/{tenant_id}", dependencies=[Depends(requires_permission("tenants:update"))])
def update_tenant(
    tenant_id: str,
    payload: TenantUpdate,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = tenants_service.update_tenant(org_id, tenant_id, sanitize(payload.model_dump(exclude_unset=True)))
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to update tenant")
    return {"success": True, "data": data}


@router.delete("/{tenant_id}", dependencies=[Depends(requires_permission("tenants:delete"))])
def delete_tenant(tenant_id: str, organization_id: Optional[str] = None, current_user: CurrentUser = Depends(get_current_user)):
    org_id = resolve_organization_id(current_user, organization_id)
    return {"success": True, "data": tenants_service.delete_tenant(org_id, tenant_id)}
