# services/subscriptions.py

"""
Platform subscriptions billed to organizations.

Pricing comes from a per-tier, per-cycle table (ETB) with an optional
percentage or fixed discount. Enterprise is custom-priced (0 in the table;
set an explicit price).
"""

from datetime import datetime, timedelta
from typing import Optional

from core.config import settings
from core.errors import ConflictError, ValidationError
from core.logging_config import logger
from core.mongo_client import get_db, serialize_doc, serialize_docs
from core.utils import utcnow, round_money
from services.billing import add_billing_cycle, monthly_equivalent
from services.common import find_in_org, insert_document, reject_nulls, update_document
from services.organizations import link_subscription


COLLECTION = "subscriptions"

LIVE_STATUSES = ["active", "trial"]

SUBSCRIPTION_PRICING = {
    "starter": {"monthly": 2500, "quarterly": 7000, "annually": 25000},
    "growth": {"monthly": 5000, "quarterly": 14000, "annually": 50000},
    "enterprise": {"monthly": 0, "quarterly": 0, "annually": 0},
}

DEFAULT_LIMITS = {
    "starter": {"max_buildings": 5, "max_units": 50, "max_users": 10},
    "growth": {"max_buildings": 20, "max_units": 200, "max_users": 50},
    "enterprise": {"max_buildings": None, "max_units": None, "max_users": None},
}

SUBSCRIPTION_FEATURES = {
    "starter": [
        "tenant_management",
        "lease_management",
        "payment_tracking",
        "basic_reports",
        "email_support",
    ],
    "growth": [
        "tenant_management",
        "lease_management",
        "payment_tracking",
        "advanced_reports",
        "maintenance_management",
        "visitor_management",
        "parking_management",
        "mobile_money_integration",
        "priority_support",
    ],
    "enterprise": [
        "tenant_management",
        "lease_management",
        "payment_tracking",
        "advanced_reports",
        "maintenance_management",
        "visitor_management",
        "parking_management",
        "mobile_money_integration",
        "custom_integrations",
        "dedicated_account_manager",
        "sla_support",
    ],
}


# -----------------------------------------------------
# Pricing
# -----------------------------------------------------
def get_base_price(tier: str, billing_cycle: str) -> float:
    try:
        return float(SUBSCRIPTION_PRICING[str(tier)][str(billing_cycle)])
    except KeyError:
        raise ValidationError(f"No price for tier '{tier}' and cycle '{billing_cycle}'")


def calculate_subscription_price(
    tier: str,
    billing_cycle: str,
    discount_type: Optional[str] = None,
    discount_value: Optional[float] = None,
) -> dict:
    """
    Returns {"base_price", "price", "discount_type", "discount_value"}.

    percentage → round(base * (1 - pct/100), 2)
    fixed      → max(0, base - fixed)
    A missing type or a null/zero value means no discount.
    """
    base = get_base_price(tier, billing_cycle)

    if not discount_type or not discount_value:
        return {"base_price": base, "price": base, "discount_type": None, "discount_value": None}

    discount_type = str(discount_type)
    if discount_type == "percentage":
        if discount_value > 100:
            raise ValidationError("Percentage discount cannot exceed 100")
        price = round(base * (1 - discount_value / 100), 2)
    elif discount_type == "fixed":
        price = max(0.0, base - discount_value)
    else:
        raise ValidationError(f"Unknown discount type '{discount_type}'")

    return {
        "base_price": base,
        "price": price,
        "discount_type": discount_type,
        "discount_value": discount_value,
    }


def _pricing_fields(data: dict) -> dict:
    quote = calculate_subscription_price(
        data["tier"],
        data["billing_cycle"],
        data.get("discount_type"),
        data.get("discount_value"),
    )
    if data.get("price") is not None:
        quote["price"] = round_money(data["price"])
    return quote


def _schedule_fields(start_date: datetime, billing_cycle: str) -> dict:
    end_date = add_billing_cycle(start_date, billing_cycle)
    return {"start_date": start_date, "end_date": end_date, "next_billing_date": end_date}


# -----------------------------------------------------
# Create
# -----------------------------------------------------
def create_subscription(data: dict, now: Optional[datetime] = None) -> dict:
    now = now or utcnow()
    organization_id = data["organization_id"]
    find_in_org("organizations", organization_id, None, "Organization")

    if get_db()[COLLECTION].find_one({"organization_id": organization_id, "status": {"$in": LIVE_STATUSES}}):
        raise ConflictError("Organization already has an active subscription")

    tier = str(data.get("tier") or "starter")
    cycle = str(data.get("billing_cycle") or "monthly")
    start_date = data.get("start_date") or now
    trial_days = int(data.get("trial_days") or 0)

    doc = {k: v for k, v in data.items() if k not in ("trial_days", "price")}
    doc.update({"tier": tier, "billing_cycle": cycle})
    doc.update(_pricing_fields(dict(data, tier=tier, billing_cycle=cycle)))
    doc.update(_schedule_fields(start_date, cycle))
    doc.update({
        "currency": data.get("currency") or settings.DEFAULT_CURRENCY,
        "auto_renew": data.get("auto_renew", True),
        "limits": data.get("limits") or dict(DEFAULT_LIMITS[tier]),
        "features": data.get("features") or list(SUBSCRIPTION_FEATURES[tier]),
        "status": "trial" if trial_days > 0 else "active",
        "trial_end_date": start_date + timedelta(days=trial_days) if trial_days > 0 else None,
        "cancellation_date": None,
        "cancellation_reason": None,
    })
    doc = insert_document(COLLECTION, doc)

    link_subscription(organization_id, str(doc["_id"]))
    logger.info(f"Subscription created: org={organization_id} tier={tier} cycle={cycle} price={doc['price']} status={doc['status']}")
    return serialize_doc(doc)


# -----------------------------------------------------
# Read
# -----------------------------------------------------
def get_subscription(subscription_id: str, organization_id: Optional[str] = None) -> dict:
    return serialize_doc(find_in_org(COLLECTION, subscription_id, organization_id, "Subscription"))


def find_subscription_by_organization(organization_id: str) -> Optional[dict]:
    doc = get_db()[COLLECTION].find_one(
        {"organization_id": organization_id, "status": {"$in": LIVE_STATUSES}},
        sort=[("created_at", -1)],
    )
    return serialize_doc(doc)


def list_subscriptions(status: Optional[str] = None, tier: Optional[str] = None, limit: int = 100) -> list:
    query = {}
    if status:
        query["status"] = status
    if tier:
        query["tier"] = tier
    return serialize_docs(get_db()[COLLECTION].find(query).sort("created_at", -1).limit(limit))


# -----------------------------------------------------
# Update / lifecycle
# -----------------------------------------------------
PRICING_KEYS = ("tier", "billing_cycle", "discount_type", "discount_value", "price")
REQUIRED_FIELDS = ("tier", "billing_cycle", "start_date", "status", "auto_renew", "limits", "features")


def update_subscription(subscription_id: str, changes: dict) -> dict:
    sub = find_in_org(COLLECTION, subscription_id, None, "Subscription")
    changes = dict(changes)
    reject_nulls(changes, REQUIRED_FIELDS)
    merged = dict(sub, **changes)

    if any(key in changes for key in PRICING_KEYS):
        pricing_input = dict(merged)
        # An explicit price only sticks when it is part of this update
        if "price" not in changes:
            pricing_input["price"] = None
        changes.update(_pricing_fields(pricing_input))

    if "tier" in changes:
        tier = str(changes["tier"])
        changes.setdefault("limits", dict(DEFAULT_LIMITS[tier]))
        changes.setdefault("features", list(SUBSCRIPTION_FEATURES[tier]))

    if "start_date" in changes or "billing_cycle" in changes:
        changes.update(_schedule_fields(merged["start_date"], merged["billing_cycle"]))

    return serialize_doc(update_document(COLLECTION, sub["_id"], changes))


def cancel_subscription(subscription_id: str, reason: Optional[str] = None) -> dict:
    sub = find_in_org(COLLECTION, subscription_id, None, "Subscription")
    if sub.get("status") == "cancelled":
        raise ValidationError("Subscription is already cancelled")

    updated = update_document(COLLECTION, sub["_id"], {
        "status": "cancelled",
        "cancellation_date": utcnow(),
        "cancellation_reason": reason,
        "auto_renew": False,
    })
    logger.info(f"Subscription {subscription_id} cancelled ({reason or 'no reason given'})")
    return serialize_doc(updated)


def renew_subscription(subscription_id: str) -> dict:
    """Start the next billing period at the old end date."""
    sub = find_in_org(COLLECTION, subscription_id, None, "Subscription")
    if sub.get("status") == "cancelled":
        raise ValidationError("Cancelled subscriptions cannot be renewed")

    changes = _schedule_fields(sub["end_date"], sub["billing_cycle"])
    changes["status"] = "active"
    return serialize_doc(update_document(COLLECTION, sub["_id"], changes))


def expire_subscriptions(as_of: Optional[datetime] = None) -> int:
    as_of = as_of or utcnow()
    db = get_db()
    now = utcnow()

    lapsed = db[COLLECTION].update_many(
        {"status": "active", "auto_renew": False, "end_date": {"$lt": as_of}},
        {"$set": {"status": "expired", "updated_at": now}},
    ).modified_count
    trials = db[COLLECTION].update_many(
        {"status": "trial", "trial_end_date": {"$ne": None, "$lt": as_of}},
        {"$set": {"status": "expired", "updated_at": now}},
    ).modified_count

    if lapsed or trials:
        logger.info(f"Expired subscriptions: {lapsed} lapsed, {trials} trial(s)")
    return lapsed + trials


# -----------------------------------------------------
# Stats (MRR / ARR)
# -----------------------------------------------------
def get_subscription_stats(now: Optional[datetime] = None, window_days: Optional[int] = None) -> dict:
    now = now or utcnow()
    window_end = now + timedelta(days=window_days if window_days is not None else settings.RENEWAL_WINDOW_DAYS)

    stats = {
        "total": 0,
        "active": 0,
        "trial": 0,
        "expired": 0,
        "cancelled": 0,
        "suspended": 0,
        "mrr": 0.0,
        "arr": 0.0,
        "tier_distribution": {},
        "billing_cycle_distribution": {},
        "upcoming_renewals": 0,
        "expiring_soon": 0,
    }

    mrr = 0.0
    for sub in get_db()[COLLECTION].find({}):
        status = sub.get("status")
        stats["total"] += 1
        if status in stats:
            stats[status] += 1

        tier = sub.get("tier")
        cycle = sub.get("billing_cycle")
        stats["tier_distribution"][tier] = stats["tier_distribution"].get(tier, 0) + 1
        stats["billing_cycle_distribution"][cycle] = stats["billing_cycle_distribution"].get(cycle, 0) + 1

        if status == "active":
            mrr += monthly_equivalent(sub.get("price") or 0, cycle)

            next_billing = sub.get("next_billing_date")
            if sub.get("auto_renew") and next_billing and now <= next_billing <= window_end:
                stats["upcoming_renewals"] += 1

        if status in LIVE_STATUSES:
            end_date = sub.get("end_date")
            if not sub.get("auto_renew") and end_date and now <= end_date <= window_end:
                stats["expiring_soon"] += 1

    stats["mrr"] = round(mrr, 2)
    stats["arr"] = round(mrr * 12, 2)
    return stats
