# services/leases.py

"""
Lease lifecycle.

A lease is *active* when its status is "active" and it has no end date or
an end date that has not passed yet. A unit may carry at most one active
lease; this is checked with a query before every write that could create a
second one (there is no database constraint).

Unit status mirrors lease transitions on a best-effort basis: failures to
update the unit are logged, never raised, so the lease write always stands.
"""

from datetime import datetime
from typing import Optional

from pymongo.errors import PyMongoError

from core.errors import ConflictError, NotFoundError, ValidationError
from core.logging_config import logger
from core.mongo_client import get_db, serialize_doc, serialize_docs
from core.utils import utcnow
from services.common import find_in_org, insert_document, reject_nulls, update_document
from services.units import resolve_unit_rent, update_unit_status


COLLECTION = "leases"

REQUIRED_FIELDS = ("tenant_id", "unit_id", "start_date", "billing_cycle", "due_day", "status", "additional_charges")


# -----------------------------------------------------
# Validation helpers
# -----------------------------------------------------
def _validate_dates(start_date, end_date):
    if not isinstance(start_date, datetime):
        raise ValidationError("Invalid start date")
    if end_date is not None:
        if not isinstance(end_date, datetime):
            raise ValidationError("Invalid end date")
        if end_date <= start_date:
            raise ValidationError("End date must be after start date")


def _validate_due_day(due_day):
    if not isinstance(due_day, int) or isinstance(due_day, bool) or not 1 <= due_day <= 31:
        raise ValidationError("Due day must be between 1 and 31")


def _validate_rent(amount):
    if amount is None:
        raise ValidationError("Rent amount is required")
    if float(amount) <= 0:
        raise ValidationError("Rent amount must be greater than zero")


def _active_lease_query(organization_id: str, unit_id: str, now: datetime, exclude_id=None) -> dict:
    query = {
        "organization_id": organization_id,
        "unit_id": unit_id,
        "status": "active",
        "$or": [{"end_date": None}, {"end_date": {"$gte": now}}],
    }
    if exclude_id is not None:
        query["_id"] = {"$ne": exclude_id}
    return query


def _ensure_unit_free(organization_id: str, unit_id: str, now: datetime, exclude_id=None):
    if get_db()[COLLECTION].find_one(_active_lease_query(organization_id, unit_id, now, exclude_id)):
        raise ConflictError("Unit already has an active lease")


def _set_unit_status(unit_id: str, status: str):
    try:
        if not update_unit_status(unit_id, status):
            logger.warning(f"Unit {unit_id} not found while setting status '{status}'")
    except PyMongoError as e:
        logger.warning(f"Failed to set unit {unit_id} to '{status}': {e}")


# -----------------------------------------------------
# Queries
# -----------------------------------------------------
def find_active_lease_for_unit(organization_id: str, unit_id: str, now: Optional[datetime] = None) -> Optional[dict]:
    now = now or utcnow()
    return serialize_doc(get_db()[COLLECTION].find_one(_active_lease_query(organization_id, unit_id, now)))


def get_lease(organization_id: Optional[str], lease_id: str, tenant_id: Optional[str] = None) -> dict:
    doc = find_in_org(COLLECTION, lease_id, organization_id, "Lease")
    # Tenant users may only see their own leases
    if tenant_id is not None and doc.get("tenant_id") != tenant_id:
        raise NotFoundError("Lease not found")
    return serialize_doc(doc)


def list_leases(
    organization_id: str,
    tenant_id: Optional[str] = None,
    unit_id: Optional[str] = None,
    status: Optional[str] = None,
    limit: int = 100,
) -> list:
    query = {"organization_id": organization_id}
    if tenant_id:
        query["tenant_id"] = tenant_id
    if unit_id:
        query["unit_id"] = unit_id
    if status:
        query["status"] = status
    cursor = get_db()[COLLECTION].find(query).sort("start_date", -1).limit(limit)
    return serialize_docs(cursor)


# -----------------------------------------------------
# Create
# -----------------------------------------------------
def create_lease(organization_id: str, data: dict, now: Optional[datetime] = None) -> dict:
    now = now or utcnow()

    find_in_org("tenants", data.get("tenant_id"), organization_id, "Tenant")
    unit = find_in_org("units", data.get("unit_id"), organization_id, "Unit")

    start_date = data.get("start_date")
    end_date = data.get("end_date")
    _validate_dates(start_date, end_date)

    due_day = data.get("due_day", 1)
    _validate_due_day(due_day)

    _ensure_unit_free(organization_id, data["unit_id"], now)

    if data.get("rent_amount") is not None:
        rent_amount, rent_source = round(float(data["rent_amount"]), 2), "manual"
    else:
        rent_amount, rent_source = resolve_unit_rent(unit)
    _validate_rent(rent_amount)

    doc = dict(data)
    doc.update({
        "organization_id": organization_id,
        "rent_amount": rent_amount,
        "rent_source": rent_source,
        "due_day": due_day,
        "billing_cycle": data.get("billing_cycle") or "monthly",
        "additional_charges": data.get("additional_charges") or [],
        "status": data.get("status") or "active",
        "terms_accepted": False,
        "terms_accepted_at": None,
        "terms_accepted_by": None,
        "next_invoice_date": start_date,
        "last_invoiced_at": None,
    })
    doc = insert_document(COLLECTION, doc)

    logger.info(f"Lease created: {doc['_id']} unit={doc['unit_id']} tenant={doc['tenant_id']} rent={rent_amount} ({rent_source})")

    if doc["status"] == "active":
        _set_unit_status(doc["unit_id"], "occupied")

    return serialize_doc(doc)


# -----------------------------------------------------
# Update
# -----------------------------------------------------
def update_lease(organization_id: str, lease_id: str, changes: dict, now: Optional[datetime] = None) -> dict:
    now = now or utcnow()
    lease = find_in_org(COLLECTION, lease_id, organization_id, "Lease")
    changes = dict(changes)
    reject_nulls(changes, REQUIRED_FIELDS)

    if "tenant_id" in changes and changes["tenant_id"] != lease.get("tenant_id"):
        find_in_org("tenants", changes["tenant_id"], organization_id, "Tenant")

    old_unit_id = lease["unit_id"]
    new_unit_id = changes.get("unit_id") or old_unit_id
    if new_unit_id != old_unit_id:
        find_in_org("units", new_unit_id, organization_id, "Unit")

    if "start_date" in changes or "end_date" in changes:
        start_date = changes.get("start_date", lease.get("start_date"))
        end_date = changes["end_date"] if "end_date" in changes else lease.get("end_date")
        _validate_dates(start_date, end_date)

    if "due_day" in changes:
        _validate_due_day(changes["due_day"])

    if changes.get("rent_amount") is not None:
        _validate_rent(changes["rent_amount"])
        changes["rent_amount"] = round(float(changes["rent_amount"]), 2)
        changes["rent_source"] = "manual"
    else:
        changes.pop("rent_amount", None)

    old_status = lease.get("status")
    new_status = changes.get("status") or old_status

    # Becoming active on a (possibly new) unit needs that unit to be free
    if new_status == "active" and (old_status != "active" or new_unit_id != old_unit_id):
        _ensure_unit_free(organization_id, new_unit_id, now, exclude_id=lease["_id"])

    if new_status == "terminated" and old_status != "terminated":
        changes.setdefault("termination_date", now)

    updated = update_document(COLLECTION, lease["_id"], changes)

    # Mirror the transition onto unit status
    if old_status == "active" and new_status == "active":
        if new_unit_id != old_unit_id:
            _set_unit_status(old_unit_id, "available")
            _set_unit_status(new_unit_id, "occupied")
    elif old_status == "active":
        _set_unit_status(old_unit_id, "available")
    elif new_status == "active":
        _set_unit_status(new_unit_id, "occupied")

    if old_status != new_status:
        logger.info(f"Lease {lease_id} status {old_status} → {new_status}")

    return serialize_doc(updated)


# -----------------------------------------------------
# Terminate
# -----------------------------------------------------
def terminate_lease(
    organization_id: str,
    lease_id: str,
    reason: Optional[str] = None,
    termination_date: Optional[datetime] = None,
) -> dict:
    lease = find_in_org(COLLECTION, lease_id, organization_id, "Lease")
    if lease.get("status") == "terminated":
        raise ValidationError("Lease is already terminated")

    when = termination_date or utcnow()
    updated = update_document(COLLECTION, lease["_id"], {
        "status": "terminated",
        "end_date": when,
        "termination_date": when,
        "termination_reason": reason,
    })

    if lease.get("status") == "active":
        _set_unit_status(lease["unit_id"], "available")

    logger.info(f"Lease {lease_id} terminated ({reason or 'no reason given'})")
    return serialize_doc(updated)


# -----------------------------------------------------
# Terms acceptance
# -----------------------------------------------------
def accept_lease_terms(
    organization_id: str,
    lease_id: str,
    user_id: str,
    tenant_id: Optional[str] = None,
) -> dict:
    lease = find_in_org(COLLECTION, lease_id, organization_id, "Lease")
    if tenant_id is not None and lease.get("tenant_id") != tenant_id:
        raise NotFoundError("Lease not found")
    if lease.get("terms_accepted"):
        raise ConflictError("Lease terms already accepted")

    updated = update_document(COLLECTION, lease["_id"], {
        "terms_accepted": True,
        "terms_accepted_at": utcnow(),
        "terms_accepted_by": user_id,
    })
    logger.info(f"Lease {lease_id} terms accepted by {user_id}")
    return serialize_doc(updated)


# -----------------------------------------------------
# Scheduled expiry
# -----------------------------------------------------
def expire_leases(as_of: Optional[datetime] = None) -> int:
    """Mark active leases whose end date has passed as expired and free their units."""
    as_of = as_of or utcnow()
    db = get_db()
    expired = 0

    for lease in db[COLLECTION].find({"status": "active", "end_date": {"$ne": None, "$lt": as_of}}):
        db[COLLECTION].update_one(
            {"_id": lease["_id"], "status": "active"},
            {"$set": {"status": "expired", "updated_at": utcnow()}},
        )
        _set_unit_status(lease["unit_id"], "available")
        expired += 1

    if expired:
        logger.info(f"Expired {expired} lease(s) as of {as_of.isoformat()}")
    return expired
