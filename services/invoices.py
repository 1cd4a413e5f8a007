# services/invoices.py

import re
from datetime import datetime
from typing import Optional, List

from core.errors import NotFoundError, ValidationError
from core.logging_config import logger
from core.mongo_client import get_db, serialize_doc, serialize_docs
from core.utils import utcnow, round_money
from services.common import find_in_org, insert_document, reject_nulls, update_document


COLLECTION = "invoices"

OPEN_STATUSES = ["draft", "sent"]
REQUIRED_FIELDS = ("due_date", "period_start", "period_end", "items", "tax")


# -----------------------------------------------------
# Numbering: INV-<year>-<NNN>, sequence per organization and year
# -----------------------------------------------------
def next_invoice_number(organization_id: str, year: int) -> str:
    prefix = f"INV-{year}-"
    pattern = re.compile("^" + re.escape(prefix) + r"(\d+)$")

    highest = 0
    cursor = get_db()[COLLECTION].find(
        {"organization_id": organization_id, "invoice_number": {"$regex": "^" + re.escape(prefix)}},
        {"invoice_number": 1},
    )
    for doc in cursor:
        match = pattern.match(doc.get("invoice_number") or "")
        if match:
            highest = max(highest, int(match.group(1)))

    return f"{prefix}{highest + 1:03d}"


def calculate_totals(items: List[dict], tax: Optional[float] = 0) -> dict:
    subtotal = round_money(sum(float(item.get("amount") or 0) for item in items))
    tax = round_money(tax or 0)
    return {"subtotal": subtotal, "tax": tax, "total": round_money(subtotal + tax)}


def _validate_period(period_start, period_end):
    if period_start and period_end and period_end < period_start:
        raise ValidationError("Period end date must be after period start date")


# -----------------------------------------------------
# Create
# -----------------------------------------------------
def create_invoice(organization_id: str, data: dict, now: Optional[datetime] = None) -> dict:
    now = now or utcnow()

    lease = find_in_org("leases", data.get("lease_id"), organization_id, "Lease")
    if data.get("tenant_id") != lease.get("tenant_id"):
        raise ValidationError("Tenant ID does not match the lease")
    if data.get("unit_id") != lease.get("unit_id"):
        raise ValidationError("Unit ID does not match the lease")

    items = data.get("items") or []
    if not items:
        raise ValidationError("Invoice must have at least one item")

    _validate_period(data.get("period_start"), data.get("period_end"))

    issue_date = data.get("issue_date") or now
    status = data.get("status") or "draft"

    doc = dict(data)
    doc.update(calculate_totals(items, data.get("tax")))
    doc.update({
        "organization_id": organization_id,
        "invoice_number": next_invoice_number(organization_id, issue_date.year),
        "issue_date": issue_date,
        "status": status,
        "paid_at": now if status == "paid" else None,
    })
    doc = insert_document(COLLECTION, doc)

    logger.info(f"Invoice {doc['invoice_number']} created for lease {doc['lease_id']} total={doc['total']}")
    return serialize_doc(doc)


# -----------------------------------------------------
# Read
# -----------------------------------------------------
def get_invoice(organization_id: Optional[str], invoice_id: str, tenant_id: Optional[str] = None) -> dict:
    doc = find_in_org(COLLECTION, invoice_id, organization_id, "Invoice")
    if tenant_id is not None and doc.get("tenant_id") != tenant_id:
        raise NotFoundError("Invoice not found")
    return serialize_doc(doc)


def list_invoices(
    organization_id: str,
    status: Optional[str] = None,
    tenant_id: Optional[str] = None,
    lease_id: Optional[str] = None,
    limit: int = 100,
) -> list:
    query = {"organization_id": organization_id}
    if status:
        query["status"] = status
    if tenant_id:
        query["tenant_id"] = tenant_id
    if lease_id:
        query["lease_id"] = lease_id
    cursor = get_db()[COLLECTION].find(query).sort("issue_date", -1).limit(limit)
    return serialize_docs(cursor)


def find_overdue_invoices(as_of: Optional[datetime] = None, organization_id: Optional[str] = None) -> list:
    as_of = as_of or utcnow()
    query = {"status": {"$in": OPEN_STATUSES}, "due_date": {"$lt": as_of}}
    if organization_id:
        query["organization_id"] = organization_id
    return serialize_docs(get_db()[COLLECTION].find(query).sort("due_date", 1))


# -----------------------------------------------------
# Update
# -----------------------------------------------------
def update_invoice(organization_id: str, invoice_id: str, changes: dict) -> dict:
    doc = find_in_org(COLLECTION, invoice_id, organization_id, "Invoice")
    if doc.get("status") != "draft":
        raise ValidationError("Only draft invoices can be modified. Use status update for other changes.")

    changes = dict(changes)
    reject_nulls(changes, REQUIRED_FIELDS)
    _validate_period(
        changes.get("period_start", doc.get("period_start")),
        changes.get("period_end", doc.get("period_end")),
    )

    if "items" in changes or "tax" in changes:
        items = changes.get("items", doc.get("items")) or []
        if not items:
            raise ValidationError("Invoice must have at least one item")
        tax = changes["tax"] if changes.get("tax") is not None else doc.get("tax", 0)
        changes.update(calculate_totals(items, tax))

    return serialize_doc(update_document(COLLECTION, doc["_id"], changes))


def update_invoice_status(organization_id: Optional[str], invoice_id: str, status: str) -> dict:
    doc = find_in_org(COLLECTION, invoice_id, organization_id, "Invoice")
    changes = {"status": status}

    if status == "paid" and doc.get("status") != "paid":
        changes["paid_at"] = utcnow()
    elif status != "paid" and doc.get("status") == "paid":
        changes["paid_at"] = None

    logger.info(f"Invoice {doc.get('invoice_number')} status {doc.get('status')} → {status}")
    return serialize_doc(update_document(COLLECTION, doc["_id"], changes))


def cancel_invoice(organization_id: str, invoice_id: str) -> dict:
    doc = find_in_org(COLLECTION, invoice_id, organization_id, "Invoice")
    if doc.get("status") == "paid":
        raise ValidationError("Cannot cancel a paid invoice")
    return update_invoice_status(organization_id, invoice_id, "cancelled")


def mark_overdue_invoices(as_of: Optional[datetime] = None, organization_id: Optional[str] = None) -> int:
    as_of = as_of or utcnow()
    query = {"status": {"$in": OPEN_STATUSES}, "due_date": {"$lt": as_of}}
    if organization_id:
        query["organization_id"] = organization_id
    result = get_db()[COLLECTION].update_many(query, {"$set": {"status": "overdue", "updated_at": utcnow()}})
    if result.modified_count:
        logger.info(f"Marked {result.modified_count} invoice(s) overdue")
    return result.modified_count
