# routers/payments.py

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
from models.payment import (
    PaymentCreate,
    PaymentUpdate,
    PaymentRefund,
    ReconcileRequest,
    BulkReconcileRequest,
    PaymentIntentCreate,
)
from services import payments as payments_service


router = APIRouter(
    prefix="/payments",
    tags=["Payments"],
)


# ============================================================
# LIST PAYMENTS
# ============================================================
@router.get("", summary="List Payments", dependencies=[Depends(requires_permission("payments:read"))])
def list_payments(
    status: Optional[str] = None,
    tenant_id: Optional[str] = None,
    invoice_id: Optional[str] = None,
    payment_method: Optional[str] = None,
    reconciliation_status: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    if is_tenant_user(current_user):
        tenant_id = require_tenant_link(current_user)
    try:
        data = payments_service.list_payments(
            org_id,
            status=status,
            tenant_id=tenant_id,
            invoice_id=invoice_id,
            payment_method=payment_method,
            reconciliation_status=reconciliation_status,
            limit=limit,
        )
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to fetch payments")
    return {"success": True, "data": data}


# ============================================================
# RECONCILIATION
# (declared before /{payment_id} so the static paths win)
# ============================================================
@router.get(
    "/reconciliation",
    summary="List Payments Awaiting Reconciliation",
    dependencies=[Depends(requires_permission("payments:reconcile"))],
)
def list_unreconciled(
    reconciliation_status: str = "pending",
    payment_method: Optional[str] = None,
    limit: int = Query(50, ge=1, le=500),
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = payments_service.list_unreconciled_payments(
            org_id,
            reconciliation_status=reconciliation_status,
            payment_method=payment_method,
            limit=limit,
        )
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to fetch unreconciled payments")
    return {"success": True, "data": data}


@router.get(
    "/reconciliation/summary",
    summary="Reconciliation Summary",
    dependencies=[Depends(requires_permission("payments:reconcile"))],
)
def reconciliation_summary(organization_id: Optional[str] = None, current_user: CurrentUser = Depends(get_current_user)):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = payments_service.get_reconciliation_summary(org_id)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to build reconciliation summary")
    return {"success": True, "data": data}


@router.post(
    "/reconciliation/bulk",
    summary="Bulk Reconcile Payments",
    description="Per-payment failures are reported in `results`; the request itself succeeds.",
    dependencies=[Depends(requires_permission("payments:reconcile"))],
)
def bulk_reconcile(
    payload: BulkReconcileRequest,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = payments_service.bulk_reconcile(
            org_id,
            payload.payment_ids,
            current_user.id,
            bank_statement_reference=payload.bank_statement_reference,
            notes=payload.reconciliation_notes,
        )
    except PyMongoError as e:
        raise handle_db_error(e, "Bulk reconciliation failed")
    return {"success": True, "data": data}


# ============================================================
# PAYMENT INTENTS
# ============================================================
@router.post(
    "/intents",
    summary="Create Payment Intent",
    status_code=201,
    description="Registers a pending provider checkout. The provider webhook later turns it into a payment.",
    dependencies=[Depends(requires_permission("payments:create"))],
)
def create_payment_intent(
    payload: PaymentIntentCreate,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = payments_service.create_payment_intent(org_id, sanitize(payload.model_dump()))
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to create payment intent")
    return {"success": True, "data": data}


# ============================================================
# CREATE PAYMENT
# ============================================================
@router.post("", summary="Record Payment", status_code=201, dependencies=[Depends(requires_permission("payments:create"))])
def create_payment(
    payload: PaymentCreate,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = payments_service.create_payment(org_id, sanitize(payload.model_dump()), processed_by=current_user.id)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to record payment")
    return {"success": True, "data": data}


@router.get("/{payment_id}", summary="Get Payment", dependencies=[Depends(requires_permission("payments:read"))])
def get_payment(payment_id: str, organization_id: Optional[str] = None, current_user: CurrentUser = Depends(get_current_user)):
    org_id = resolve_organization_id(current_user, organization_id)
    tenant_id = require_tenant_link(current_user) if is_tenant_user(current_user) else None
    return {"success": True, "data": payments_service.get_payment(org_id, payment_id, tenant_id=tenant_id)}


@router.patch("/{payment_id}", summary="Update Payment", dependencies=[Depends(requires_permission("payments:update"))])
def update_payment(
    payment_id: str,
    payload: PaymentUpdate,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = payments_service.update_payment(org_id, payment_id, sanitize(payload.model_dump(exclude_unset=True)))
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to update payment")
    return {"success": True, "data": data}


@router.post("/{payment_id}/refund", summary="Refund Payment", dependencies=[Depends(requires_permission("payments:refund"))])
def refund_payment(
    payment_id: str,
    payload: PaymentRefund,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = payments_service.refund_payment(org_id, payment_id, reason=payload.reason, refunded_by=current_user.id)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to refund payment")
    return {"success": True, "data": data}


@router.post("/{payment_id}/reconcile", summary="Reconcile Payment", dependencies=[Depends(requires_permission("payments:reconcile"))])
def reconcile_payment(
    payment_id: str,
    payload: ReconcileRequest,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = payments_service.reconcile_payment(
            org_id,
            payment_id,
            current_user.id,
            reconciliation_status=payload.reconciliation_status.value,
            notes=payload.reconciliation_notes,
            bank_statement_reference=payload.bank_statement_reference,
        )
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to reconcile payment")
    return {"success": True, "data": data}
