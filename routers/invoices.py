# routers/invoices.py

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
from models.invoice import InvoiceCreate, InvoiceUpdate, InvoiceStatusUpdate
from services import invoices as invoices_service


router = APIRouter(
    prefix="/invoices",
    tags=["Invoices"],
)


@router.get("", summary="List Invoices", dependencies=[Depends(requires_permission("invoices:read"))])
def list_invoices(
    status: Optional[str] = None,
    tenant_id: Optional[str] = None,
    lease_id: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    if is_tenant_user(current_user):
        tenant_id = require_tenant_link(current_user)
    try:
        data = invoices_service.list_invoices(org_id, status=status, tenant_id=tenant_id, lease_id=lease_id, limit=limit)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to fetch invoices")
    return {"success": True, "data": data}


@router.get("/overdue", summary="List Overdue Invoices", dependencies=[Depends(requires_permission("invoices:read"))])
def list_overdue_invoices(organization_id: Optional[str] = None, current_user: CurrentUser = Depends(get_current_user)):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = invoices_service.find_overdue_invoices(organization_id=org_id)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to fetch overdue invoices")
    return {"success": True, "data": data}


@router.post("", summary="Create Invoice", status_code=201, dependencies=[Depends(requires_permission("invoices:create"))])
def create_invoice(
    payload: InvoiceCreate,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = invoices_service.create_invoice(org_id, sanitize(payload.model_dump()))
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to create invoice")
    return {"success": True, "data": data}


@router.get("/{invoice_id}", summary="Get Invoice", dependencies=[Depends(requires_permission("invoices:read"))])
def get_invoice(invoice_id: str, organization_id: Optional[str] = None, current_user: CurrentUser = Depends(get_current_user)):
    org_id = resolve_organization_id(current_user, organization_id)
    tenant_id = require_tenant_link(current_user) if is_tenant_user(current_user) else None
    return {"success": True, "data": invoices_service.get_invoice(org_id, invoice_id, tenant_id=tenant_id)}


@router.patch("/{invoice_id}", summary="Update Draft Invoice", dependencies=[Depends(requires_permission("invoices:update"))])
def update_invoice(
    invoice_id: str,
    payload: InvoiceUpdate,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = invoices_service.update_invoice(org_id, invoice_id, sanitize(payload.model_dump(exclude_unset=True)))
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to update invoice")
    return {"success": True, "data": data}


@router.patch("/{invoice_id}/status", summary="Update Invoice Status", dependencies=[Depends(requires_permission("invoices:update"))])
def update_invoice_status(
    invoice_id: str,
    payload: InvoiceStatusUpdate,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = invoices_service.update_invoice_status(org_id, invoice_id, payload.status.value)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to update invoice status")
    return {"success": True, "data": data}


@router.post("/{invoice_id}/cancel", summary="Cancel Invoice", dependencies=[Depends(requires_permission("invoices:cancel"))])
def cancel_invoice(invoice_id: str, organization_id: Optional[str] = None, current_user: CurrentUser = Depends(get_current_user)):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = invoices_service.cancel_invoice(org_id, invoice_id)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to cancel invoice")
    return {"success": True, "data": data}
