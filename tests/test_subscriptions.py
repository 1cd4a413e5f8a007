# tests/test_subscriptions.py

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from core.errors import ConflictError, ValidationError
from services.organizations import create_organization, get_organization
from services.subscriptions import (
    calculate_subscription_price,
    cancel_subscription,
    create_subscription,
    expire_subscriptions,
    get_subscription_stats,
    renew_subscription,
    update_subscription,
)


def _org(code):
    return create_organization({"name": f"Org {code}", "code": code})


@pytest.mark.parametrize("discount_type, discount_value, expected", [
    (None, None, 2500),
    ("percentage", 10, 2250),
    ("percentage", 0, 2500),
    ("fixed", 400, 2100),
    ("fixed", 9999, 0),
])
def test_calculate_subscription_price(discount_type, discount_value, expected):
    quote = calculate_subscription_price("starter", "monthly", discount_type, discount_value)
    assert quote["base_price"] == 2500
    assert quote["price"] == expected


def test_price_validation():
    with pytest.raises(ValidationError):
        calculate_subscription_price("starter", "monthly", "percentage", 120)
    with pytest.raises(ValidationError):
        calculate_subscription_price("platinum", "monthly")


def test_create_subscription_with_trial(org):
    sub = create_subscription({
        "organization_id": org["id"],
        "tier": "growth",
        "billing_cycle": "quarterly",
        "start_date": datetime(2026, 1, 31),
        "trial_days": 14,
    })

    assert sub["status"] == "trial"
    assert sub["trial_end_date"] == datetime(2026, 2, 14)
    assert sub["price"] == 14000
    assert sub["end_date"] == datetime(2026, 4, 30)
    assert sub["next_billing_date"] == sub["end_date"]
    assert sub["limits"]["max_buildings"] == 20
    assert "visitor_management" in sub["features"]
    assert get_organization(org["id"])["subscription_id"] == sub["id"]

    with pytest.raises(ConflictError):
        create_subscription({"organization_id": org["id"]})


def test_tier_change_reprices_and_resets_limits(org):
    sub = create_subscription({"organization_id": org["id"], "tier": "starter", "discount_type": "percentage", "discount_value": 10})
    assert sub["price"] == 2250

    upgraded = update_subscription(sub["id"], {"tier": "growth"})
    assert upgraded["price"] == 4500
    assert upgraded["limits"]["max_units"] == 200
    assert "parking_management" in upgraded["features"]


def test_cancel_and_renew(org):
    sub = create_subscription({"organization_id": org["id"], "start_date": datetime(2026, 1, 1)})

    renewed = renew_subscription(sub["id"])
    assert renewed["start_date"] == datetime(2026, 2, 1)
    assert renewed["end_date"] == datetime(2026, 3, 1)

    cancelled = cancel_subscription(sub["id"], reason="Budget")
    assert cancelled["status"] == "cancelled"
    assert cancelled["auto_renew"] is False
    assert cancelled["cancellation_reason"] == "Budget"

    with pytest.raises(ValidationError):
        renew_subscription(sub["id"])
    with pytest.raises(ValidationError):
        cancel_subscription(sub["id"])


def test_expire_subscriptions():
    create_subscription({"organization_id": _org("LAP")["id"], "start_date": datetime(2026, 1, 1), "auto_renew": False})
    create_subscription({"organization_id": _org("REN")["id"], "start_date": datetime(2026, 1, 1)})
    create_subscription({"organization_id": _org("TRL")["id"], "start_date": datetime(2026, 1, 1), "trial_days": 7})

    assert expire_subscriptions(as_of=datetime(2026, 3, 1)) == 2


def test_subscription_stats():
    now = datetime(2026, 1, 10)
    create_subscription({"organization_id": _org("AAA")["id"], "tier": "growth", "billing_cycle": "monthly", "start_date": datetime(2026, 1, 1)})
    create_subscription({"organization_id": _org("BBB")["id"], "tier": "starter", "billing_cycle": "quarterly", "start_date": datetime(2026, 1, 1)})
    create_subscription({"organization_id": _org("CCC")["id"], "tier": "starter", "billing_cycle": "annually", "start_date": datetime(2026, 1, 1), "auto_renew": False})
    create_subscription({"organization_id": _org("DDD")["id"], "tier": "growth", "start_date": datetime(2026, 1, 1), "trial_days": 30})

    stats = get_subscription_stats(now=now, window_days=30)

    assert stats["total"] == 4
    assert stats["active"] == 3
    assert stats["trial"] == 1
    # 5000 + 7000/3 + 25000/12; trials excluded
    assert stats["mrr"] == 9416.67
    assert stats["arr"] == 113000.0
    assert stats["tier_distribution"] == {"growth": 2, "starter": 2}
    # monthly growth renews 2026-02-01 (inside the window)
    assert stats["upcoming_renewals"] == 1
    # the trial's end_date (2026-02-01) is inside the window but it auto-renews
    assert stats["expiring_soon"] == 0


def test_subscription_admin_endpoints(client: TestClient, org, admin_headers, org_admin_headers):
    payload = {"organization_id": org["id"], "tier": "starter", "billing_cycle": "annually"}

    response = client.post("/api/subscriptions", headers=org_admin_headers, json=payload)
    assert response.status_code == 403

    response = client.post("/api/subscriptions", headers=admin_headers, json=payload)
    assert response.status_code == 201
    assert response.json()["data"]["price"] == 25000

    response = client.get("/api/subscriptions/me", headers=org_admin_headers)
    assert response.status_code == 200
    assert response.json()["data"]["organization_id"] == org["id"]

    response = client.get("/api/subscriptions/stats", headers=admin_headers)
    assert response.json()["data"]["active"] == 1


def test_pricing_preview(client: TestClient, org_admin_headers):
    response = client.get(
        "/api/subscriptions/pricing?tier=growth&billing_cycle=annually&discount_type=fixed&discount_value=5000",
        headers=org_admin_headers,
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["price"] == 45000
    assert data["limits"]["max_users"] == 50


@pytest.mark.parametrize("field", ["start_date", "billing_cycle", "tier"])
def test_patch_rejects_null_schedule_fields(client: TestClient, org, admin_headers, field):
    sub = create_subscription({"organization_id": org["id"], "tier": "starter"})

    response = client.patch(f"/api/subscriptions/{sub['id']}", headers=admin_headers, json={field: None})
    assert response.status_code == 400
    assert response.json()["detail"] == f"Fields cannot be null: {field}"

    response = client.get(f"/api/subscriptions/{sub['id']}", headers=admin_headers)
    assert response.json()["data"][field] is not None


def test_patch_null_discount_clears_it(client: TestClient, org, admin_headers):
    sub = create_subscription({"organization_id": org["id"], "tier": "starter", "discount_type": "percentage", "discount_value": 10})

    response = client.patch(f"/api/subscriptions/{sub['id']}", headers=admin_headers, json={"discount_type": None})
    assert response.status_code == 200
    assert response.json()["data"]["price"] == 2500
    assert response.json()["data"]["discount_type"] is None
