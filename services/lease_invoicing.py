# services/lease_invoicing.py

"""
Scheduled billing: turn active leases into invoices and apply late fees.

Each lease carries a `next_invoice_date` pointer. A run bills every active
lease whose pointer is due, then advances the pointer by one billing cycle.
Invoices are never duplicated for the same lease and period start.
"""

from datetime import datetime
from typing import Optional

from core.errors import BMSError
from core.logging_config import logger
from core.mongo_client import get_db, to_object_id
from core.utils import utcnow, round_money
from services.billing import add_billing_cycle, billing_period_end, compute_due_date, days_late
from services.invoices import create_invoice, calculate_totals


PENALTY_STATUSES = ["draft", "sent", "overdue"]


# -----------------------------------------------------
# Invoice composition
# -----------------------------------------------------
def build_invoice_items(lease: dict, period_start: datetime, is_first: bool) -> list:
    cycle = lease.get("billing_cycle") or "monthly"
    items = [{
        "description": f"Rent {period_start.strftime('%b %Y')}",
        "amount": round_money(lease["rent_amount"]),
        "type": "rent",
    }]

    for charge in lease.get("additional_charges") or []:
        frequency = charge.get("frequency") or "monthly"
        if frequency == cycle or (frequency == "one-time" and is_first):
            items.append({
                "description": charge.get("name") or "Charge",
                "amount": round_money(charge.get("amount") or 0),
                "type": "charge",
            })

    if is_first and lease.get("deposit_amount"):
        items.append({
            "description": "Security deposit",
            "amount": round_money(lease["deposit_amount"]),
            "type": "deposit",
        })

    return items


def _invoice_lease(lease: dict, as_of: datetime) -> Optional[dict]:
    """Create the invoice for the lease's current period. Returns None when skipped."""
    db = get_db()
    period_start = lease.get("next_invoice_date") or lease["start_date"]
    end_date = lease.get("end_date")
    cycle = lease.get("billing_cycle") or "monthly"

    if end_date is not None and period_start >= end_date:
        return None

    lease_id = str(lease["_id"])
    next_start = add_billing_cycle(period_start, cycle)

    existing = db.invoices.find_one({"lease_id": lease_id, "period_start": period_start})
    if existing:
        # Already billed (e.g. created manually); only move the pointer on
        db.leases.update_one(
            {"_id": lease["_id"]},
            {"$set": {"next_invoice_date": next_start, "updated_at": utcnow()}},
        )
        return None

    is_first = lease.get("last_invoiced_at") is None
    items = build_invoice_items(lease, period_start, is_first)

    tax = 0
    if lease.get("vat_rate"):
        taxable = calculate_totals([i for i in items if i["type"] != "deposit"])["subtotal"]
        tax = round_money(taxable * float(lease["vat_rate"]))

    invoice = create_invoice(lease["organization_id"], {
        "tenant_id": lease["tenant_id"],
        "unit_id": lease["unit_id"],
        "lease_id": lease_id,
        "issue_date": as_of,
        "due_date": compute_due_date(period_start, lease.get("due_day") or 1),
        "period_start": period_start,
        "period_end": billing_period_end(period_start, cycle, end_date),
        "items": items,
        "tax": tax,
        "status": "sent",
    }, now=as_of)

    db.leases.update_one(
        {"_id": lease["_id"]},
        {"$set": {"next_invoice_date": next_start, "last_invoiced_at": as_of, "updated_at": utcnow()}},
    )
    return invoice


def generate_lease_invoices(as_of: Optional[datetime] = None, organization_id: Optional[str] = None) -> dict:
    as_of = as_of or utcnow()
    query = {"status": "active", "next_invoice_date": {"$lte": as_of}}
    if organization_id:
        query["organization_id"] = organization_id

    summary = {"processed": 0, "created": 0, "skipped": 0, "errors": []}

    for lease in get_db().leases.find(query):
        summary["processed"] += 1
        try:
            invoice = _invoice_lease(lease, as_of)
        except BMSError as e:
            logger.warning(f"Invoicing failed for lease {lease['_id']}: {e.message}")
            summary["errors"].append(f"lease {lease['_id']}: {e.message}")
            continue

        if invoice is None:
            summary["skipped"] += 1
        else:
            summary["created"] += 1

    logger.info(
        f"Lease invoicing as of {as_of.date()}: processed={summary['processed']} "
        f"created={summary['created']} skipped={summary['skipped']} errors={len(summary['errors'])}"
    )
    return summary


# -----------------------------------------------------
# Late fees
# -----------------------------------------------------
def calculate_late_fee(base: float, due_date: datetime, as_of: datetime, penalty_config: Optional[dict]) -> float:
    """
    base × rate_per_day × chargeable days, where chargeable days are whole days
    late minus the grace period, capped at cap_days.
    """
    if not penalty_config:
        return 0.0
    rate = float(penalty_config.get("late_fee_rate_per_day") or 0)
    if rate <= 0:
        return 0.0

    days = days_late(due_date, as_of) - int(penalty_config.get("late_fee_grace_days") or 0)
    cap = penalty_config.get("late_fee_cap_days")
    if cap:
        days = min(days, int(cap))
    if days <= 0:
        return 0.0

    return round(float(base) * rate * days, 2)


def apply_late_fees(as_of: Optional[datetime] = None, organization_id: Optional[str] = None) -> dict:
    """
    Replace (never stack) the penalty line on every past-due invoice whose lease
    has a penalty config, and flag past-due draft/sent invoices as overdue.
    """
    as_of = as_of or utcnow()
    db = get_db()
    query = {"status": {"$in": PENALTY_STATUSES}, "due_date": {"$lt": as_of}}
    if organization_id:
        query["organization_id"] = organization_id

    summary = {"checked": 0, "applied": 0, "marked_overdue": 0, "errors": []}
    lease_cache = {}

    for invoice in db.invoices.find(query):
        summary["checked"] += 1
        changes = {}

        if invoice.get("status") in ("draft", "sent"):
            changes["status"] = "overdue"
            summary["marked_overdue"] += 1

        lease_id = invoice.get("lease_id")
        if lease_id not in lease_cache:
            lease_cache[lease_id] = db.leases.find_one({"_id": to_object_id(lease_id)}) if lease_id else None
        lease = lease_cache[lease_id]

        penalty_config = (lease or {}).get("penalty_config")
        if penalty_config:
            base_items = [i for i in invoice.get("items") or [] if i.get("type") != "penalty"]
            base = calculate_totals(base_items)["subtotal"]
            try:
                fee = calculate_late_fee(base, invoice["due_date"], as_of, penalty_config)
            except (TypeError, ValueError) as e:
                # Malformed penalty config; the invoice is still flagged overdue
                logger.warning(f"Late fee skipped for invoice {invoice['_id']}: {e}")
                summary["errors"].append(f"invoice {invoice['_id']}: invalid penalty config")
                fee = 0.0
            if fee > 0:
                items = base_items + [{
                    "description": f"Late fee ({days_late(invoice['due_date'], as_of)} days)",
                    "amount": fee,
                    "type": "penalty",
                }]
                changes["items"] = items
                changes.update(calculate_totals(items, invoice.get("tax")))
                summary["applied"] += 1

        if changes:
            changes["updated_at"] = utcnow()
            db.invoices.update_one({"_id": invoice["_id"]}, {"$set": changes})

    logger.info(
        f"Late fees as of {as_of.date()}: checked={summary['checked']} "
        f"applied={summary['applied']} overdue={summary['marked_overdue']} errors={len(summary['errors'])}"
    )
    return summary
