# services/payments.py

"""
Payments, invoice settlement and bank reconciliation.

An invoice is settled when the sum of its *completed* payments reaches the
invoice total. Refunds can un-settle it again (back to "sent").
"""

import uuid
from datetime import datetime
from typing import Optional, List

from core.config import settings
from core.errors import BMSError, ConflictError, NotFoundError, ValidationError
from core.logging_config import logger
from core.mongo_client import get_db, serialize_doc, serialize_docs
from core.utils import utcnow, round_money
from services.common import find_in_org, insert_document, reject_nulls, update_document
from services.invoices import update_invoice_status


COLLECTION = "payments"
INTENTS = "payment_intents"

BULK_NOTE_PREFIX = "[Bulk Reconciliation]"
REQUIRED_FIELDS = ("amount", "payment_method", "payment_date", "status")


# -----------------------------------------------------
# Invoice settlement
# -----------------------------------------------------
def completed_total_for_invoice(invoice_id: str) -> float:
    payments = get_db()[COLLECTION].find({"invoice_id": invoice_id, "status": "completed"}, {"amount": 1})
    return round_money(sum(float(p.get("amount") or 0) for p in payments))


def settle_invoice(invoice_id: str) -> bool:
    """Mark the invoice paid once completed payments cover it. Returns True when it flipped."""
    invoice = find_in_org("invoices", invoice_id, None, "Invoice")
    if invoice.get("status") in ("paid", "cancelled"):
        return False

    paid = completed_total_for_invoice(invoice_id)
    if paid >= float(invoice.get("total") or 0):
        update_invoice_status(None, invoice_id, "paid")
        logger.info(f"Invoice {invoice.get('invoice_number')} settled ({paid} >= {invoice.get('total')})")
        return True
    return False


def _unsettle_invoice(invoice_id: str):
    invoice = find_in_org("invoices", invoice_id, None, "Invoice")
    if invoice.get("status") != "paid":
        return
    if completed_total_for_invoice(invoice_id) < float(invoice.get("total") or 0):
        update_invoice_status(None, invoice_id, "sent")
        logger.info(f"Invoice {invoice.get('invoice_number')} reverted to sent after refund")


def _ensure_unique_reference(organization_id: str, reference: str, exclude_id=None):
    query = {"organization_id": organization_id, "reference_number": reference}
    if exclude_id is not None:
        query["_id"] = {"$ne": exclude_id}
    if get_db()[COLLECTION].find_one(query):
        raise ConflictError(f'Payment with reference number "{reference}" already exists')


def _validate_amount(amount):
    if amount is None or float(amount) <= 0:
        raise ValidationError("Payment amount must be greater than zero")


# -----------------------------------------------------
# Create
# -----------------------------------------------------
def create_payment(
    organization_id: str,
    data: dict,
    processed_by: Optional[str] = None,
    now: Optional[datetime] = None,
) -> dict:
    now = now or utcnow()

    tenant_id = data.get("tenant_id")
    find_in_org("tenants", tenant_id, organization_id, "Tenant")
    _validate_amount(data.get("amount"))

    reference = data.get("reference_number")
    if reference:
        _ensure_unique_reference(organization_id, reference)

    invoice_id = data.get("invoice_id")
    if invoice_id:
        invoice = find_in_org("invoices", invoice_id, organization_id, "Invoice")
        if invoice.get("tenant_id") != tenant_id:
            raise ValidationError("Invoice does not belong to this tenant")

    doc = dict(data)
    doc.update({
        "organization_id": organization_id,
        "amount": round_money(data["amount"]),
        "currency": data.get("currency") or settings.DEFAULT_CURRENCY,
        "payment_date": data.get("payment_date") or now,
        "status": data.get("status") or "completed",
        "reconciliation_status": "pending",
        "processed_by": processed_by,
    })
    doc = insert_document(COLLECTION, doc)
    logger.info(f"Payment recorded: {doc['amount']} {doc['currency']} via {doc.get('payment_method')} (tenant {tenant_id})")

    if doc["status"] == "completed" and invoice_id:
        settle_invoice(invoice_id)

    return serialize_doc(doc)


# -----------------------------------------------------
# Read
# -----------------------------------------------------
def get_payment(organization_id: Optional[str], payment_id: str, tenant_id: Optional[str] = None) -> dict:
    doc = find_in_org(COLLECTION, payment_id, organization_id, "Payment")
    if tenant_id is not None and doc.get("tenant_id") != tenant_id:
        raise NotFoundError("Payment not found")
    return serialize_doc(doc)


def list_payments(
    organization_id: str,
    status: Optional[str] = None,
    tenant_id: Optional[str] = None,
    invoice_id: Optional[str] = None,
    payment_method: Optional[str] = None,
    reconciliation_status: Optional[str] = None,
    limit: int = 100,
) -> list:
    query = {"organization_id": organization_id}
    if status:
        query["status"] = status
    if tenant_id:
        query["tenant_id"] = tenant_id
    if invoice_id:
        query["invoice_id"] = invoice_id
    if payment_method:
        query["payment_method"] = payment_method
    if reconciliation_status:
        query["reconciliation_status"] = reconciliation_status
    cursor = get_db()[COLLECTION].find(query).sort("payment_date", -1).limit(limit)
    return serialize_docs(cursor)


# -----------------------------------------------------
# Update / refund
# -----------------------------------------------------
def update_payment(organization_id: str, payment_id: str, changes: dict) -> dict:
    payment = find_in_org(COLLECTION, payment_id, organization_id, "Payment")
    changes = dict(changes)
    reject_nulls(changes, REQUIRED_FIELDS)
    new_status = changes.get("status")

    if payment.get("status") != "pending" and new_status not in ("completed", "failed"):
        raise ValidationError("Only pending payments can be modified")

    if "amount" in changes:
        _validate_amount(changes["amount"])
        changes["amount"] = round_money(changes["amount"])

    reference = changes.get("reference_number")
    if reference and reference != payment.get("reference_number"):
        _ensure_unique_reference(organization_id, reference, exclude_id=payment["_id"])

    updated = update_document(COLLECTION, payment["_id"], changes)

    if new_status == "completed" and payment.get("status") != "completed" and updated.get("invoice_id"):
        settle_invoice(updated["invoice_id"])

    return serialize_doc(updated)


def refund_payment(
    organization_id: str,
    payment_id: str,
    reason: Optional[str] = None,
    refunded_by: Optional[str] = None,
) -> dict:
    payment = find_in_org(COLLECTION, payment_id, organization_id, "Payment")
    if payment.get("status") != "completed":
        raise ValidationError("Only completed payments can be refunded")

    updated = update_document(COLLECTION, payment["_id"], {
        "status": "refunded",
        "refund_reason": reason,
        "refunded_at": utcnow(),
        "refunded_by": refunded_by,
    })
    logger.info(f"Payment {payment_id} refunded ({reason or 'no reason given'})")

    if payment.get("invoice_id"):
        _unsettle_invoice(payment["invoice_id"])

    return serialize_doc(updated)


# -----------------------------------------------------
# Reconciliation
# -----------------------------------------------------
def list_unreconciled_payments(
    organization_id: str,
    reconciliation_status: str = "pending",
    payment_method: Optional[str] = None,
    limit: int = 50,
) -> list:
    query = {
        "organization_id": organization_id,
        "status": "completed",
        "reconciliation_status": reconciliation_status,
    }
    if payment_method:
        query["payment_method"] = payment_method
    cursor = get_db()[COLLECTION].find(query).sort("payment_date", -1).limit(limit)
    return serialize_docs(cursor)


def reconcile_payment(
    organization_id: str,
    payment_id: str,
    reconciled_by: str,
    reconciliation_status: str = "reconciled",
    notes: Optional[str] = None,
    bank_statement_reference: Optional[str] = None,
) -> dict:
    payment = find_in_org(COLLECTION, payment_id, organization_id, "Payment")
    if payment.get("status") != "completed":
        raise ValidationError("Only completed payments can be reconciled")

    now = utcnow()
    provider_response = dict(payment.get("provider_response") or {})
    provider_response.update({
        "bank_statement_reference": bank_statement_reference,
        "reconciled_at": now.isoformat(),
        "reconciled_by": reconciled_by,
    })

    updated = update_document(COLLECTION, payment["_id"], {
        "reconciliation_status": reconciliation_status,
        "reconciliation_notes": notes,
        "reconciled_at": now,
        "reconciled_by": reconciled_by,
        "provider_response": provider_response,
    })
    logger.info(f"Payment {payment_id} marked {reconciliation_status} by {reconciled_by}")
    return serialize_doc(updated)


def bulk_reconcile(
    organization_id: str,
    payment_ids: List[str],
    reconciled_by: str,
    bank_statement_reference: Optional[str] = None,
    notes: Optional[str] = None,
) -> dict:
    """Reconcile many payments; individual failures are reported, not raised."""
    if not isinstance(payment_ids, list) or not payment_ids:
        raise ValidationError("payment_ids must be a non-empty list")

    bulk_notes = f"{BULK_NOTE_PREFIX} {notes}" if notes else BULK_NOTE_PREFIX

    results = []
    for payment_id in payment_ids:
        try:
            reconcile_payment(
                organization_id,
                payment_id,
                reconciled_by,
                "reconciled",
                bulk_notes,
                bank_statement_reference,
            )
            results.append({"payment_id": payment_id, "success": True})
        except BMSError as e:
            results.append({"payment_id": payment_id, "success": False, "error": e.message})

    succeeded = sum(1 for r in results if r["success"])
    summary = {"total": len(results), "succeeded": succeeded, "failed": len(results) - succeeded}
    logger.info(f"Bulk reconciliation by {reconciled_by}: {summary}")
    return {"results": results, "summary": summary}


def get_reconciliation_summary(organization_id: str) -> dict:
    """Counts and amounts of completed payments per reconciliation status."""
    summary = {
        status: {"count": 0, "amount": 0.0}
        for status in ("pending", "reconciled", "disputed")
    }
    cursor = get_db()[COLLECTION].find(
        {"organization_id": organization_id, "status": "completed"},
        {"reconciliation_status": 1, "amount": 1},
    )
    for p in cursor:
        bucket = summary.setdefault(p.get("reconciliation_status") or "pending", {"count": 0, "amount": 0.0})
        bucket["count"] += 1
        bucket["amount"] = round_money(bucket["amount"] + float(p.get("amount") or 0))
    return summary


# -----------------------------------------------------
# Payment intents (provider checkout, settled by webhooks)
# -----------------------------------------------------
def create_payment_intent(organization_id: str, data: dict) -> dict:
    tenant_id = data.get("tenant_id")
    find_in_org("tenants", tenant_id, organization_id, "Tenant")
    _validate_amount(data.get("amount"))

    invoice_id = data.get("invoice_id")
    if invoice_id:
        invoice = find_in_org("invoices", invoice_id, organization_id, "Invoice")
        if invoice.get("tenant_id") != tenant_id:
            raise ValidationError("Invoice does not belong to this tenant")

    reference = data.get("reference") or f"BMS-{uuid.uuid4().hex[:16].upper()}"
    if get_db()[INTENTS].find_one({"reference": reference}):
        raise ConflictError(f'Payment intent with reference "{reference}" already exists')

    doc = dict(data)
    doc.update({
        "organization_id": organization_id,
        "reference": reference,
        "amount": round_money(data["amount"]),
        "currency": settings.DEFAULT_CURRENCY,
        "status": "pending",
        "payment_id": None,
    })
    return serialize_doc(insert_document(INTENTS, doc))
