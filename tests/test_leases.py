# tests/test_leases.py

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from core.errors import ConflictError, ValidationError
from services.leases import create_lease, expire_leases, terminate_lease, update_lease
from services.tenants import create_tenant
from services.units import create_unit, get_unit


def _second_tenant(org):
    return create_tenant(org["id"], {"first_name": "Sara", "last_name": "Alemu", "primary_phone": "+251922000111"})


def test_create_lease_derives_rent_and_occupies_unit(org, unit, lease):
    assert lease["rent_amount"] == 15000
    assert lease["rent_source"] == "unit_rent"
    assert lease["status"] == "active"
    assert lease["next_invoice_date"] == datetime(2026, 1, 1)
    assert lease["terms_accepted"] is False
    assert get_unit(org["id"], unit["id"])["status"] == "occupied"


def test_explicit_rent_is_manual(org, unit, tenant):
    lease = create_lease(org["id"], {
        "tenant_id": tenant["id"],
        "unit_id": unit["id"],
        "start_date": datetime(2026, 2, 1),
        "rent_amount": 12000.456,
    })
    assert lease["rent_amount"] == 12000.46
    assert lease["rent_source"] == "manual"


def test_one_active_lease_per_unit(org, unit, lease):
    other = _second_tenant(org)
    with pytest.raises(ConflictError) as exc:
        create_lease(org["id"], {"tenant_id": other["id"], "unit_id": unit["id"], "start_date": datetime(2026, 3, 1)})
    assert exc.value.message == "Unit already has an active lease"


@pytest.mark.parametrize("changes, message", [
    ({"start_date": datetime(2026, 5, 1), "end_date": datetime(2026, 4, 1)}, "End date must be after start date"),
    ({"start_date": datetime(2026, 5, 1), "due_day": 32}, "Due day must be between 1 and 31"),
    ({"start_date": datetime(2026, 5, 1), "rent_amount": 0}, "Rent amount must be greater than zero"),
])
def test_create_lease_validation(org, unit, tenant, changes, message):
    data = {"tenant_id": tenant["id"], "unit_id": unit["id"]}
    data.update(changes)
    with pytest.raises(ValidationError) as exc:
        create_lease(org["id"], data)
    assert exc.value.message == message


def test_unit_without_rent_needs_explicit_amount(org, building, tenant):
    bare = create_unit(org["id"], {"building_id": building["id"], "unit_number": "S-1"})
    with pytest.raises(ValidationError) as exc:
        create_lease(org["id"], {"tenant_id": tenant["id"], "unit_id": bare["id"], "start_date": datetime(2026, 1, 1)})
    assert exc.value.message == "Rent amount is required"


def test_terminate_frees_unit(org, unit, lease):
    result = terminate_lease(org["id"], lease["id"], reason="Moved abroad", termination_date=datetime(2026, 6, 30))
    assert result["status"] == "terminated"
    assert result["end_date"] == datetime(2026, 6, 30)
    assert result["termination_reason"] == "Moved abroad"
    assert get_unit(org["id"], unit["id"])["status"] == "available"

    with pytest.raises(ValidationError):
        terminate_lease(org["id"], lease["id"])


def test_leaving_active_frees_unit_and_reactivation_checks_conflicts(org, unit, tenant, lease):
    update_lease(org["id"], lease["id"], {"status": "pending"})
    assert get_unit(org["id"], unit["id"])["status"] == "available"

    other = _second_tenant(org)
    create_lease(org["id"], {"tenant_id": other["id"], "unit_id": unit["id"], "start_date": datetime(2026, 2, 1)})

    with pytest.raises(ConflictError):
        update_lease(org["id"], lease["id"], {"status": "active"})


def test_moving_active_lease_swaps_unit_status(org, building, unit, lease):
    new_unit = create_unit(org["id"], {"building_id": building["id"], "unit_number": "A-102", "rent_amount": 9000})
    update_lease(org["id"], lease["id"], {"unit_id": new_unit["id"]})
    assert get_unit(org["id"], unit["id"])["status"] == "available"
    assert get_unit(org["id"], new_unit["id"])["status"] == "occupied"


def test_expire_leases(org, unit, tenant):
    lease = create_lease(org["id"], {
        "tenant_id": tenant["id"],
        "unit_id": unit["id"],
        "start_date": datetime(2025, 1, 1),
        "end_date": datetime(2025, 12, 31),
    }, now=datetime(2025, 1, 1))

    assert expire_leases(as_of=datetime(2026, 1, 2)) == 1
    assert get_unit(org["id"], unit["id"])["status"] == "available"
    assert expire_leases(as_of=datetime(2026, 1, 3)) == 0


# -----------------------------------------------------
# API
# -----------------------------------------------------
def test_create_lease_api(client: TestClient, unit, tenant, org_admin_headers):
    response = client.post(
        "/api/leases",
        headers=org_admin_headers,
        json={"tenant_id": tenant["id"], "unit_id": unit["id"], "start_date": "2026-03-01", "due_day": 10},
    )
    assert response.status_code == 201
    assert response.json()["data"]["rent_amount"] == 15000

    again = client.post(
        "/api/leases",
        headers=org_admin_headers,
        json={"tenant_id": tenant["id"], "unit_id": unit["id"], "start_date": "2026-03-01"},
    )
    assert again.status_code == 409


def test_tenant_sees_only_own_leases(client: TestClient, org, building, tenant, lease, headers_for):
    other = _second_tenant(org)
    other_unit = create_unit(org["id"], {"building_id": building["id"], "unit_number": "B-1", "rent_amount": 8000})
    other_lease = create_lease(org["id"], {"tenant_id": other["id"], "unit_id": other_unit["id"], "start_date": datetime(2026, 1, 1)})

    headers = headers_for("tenant", organization_id=org["id"], tenant_id=tenant["id"])
    response = client.get(f"/api/leases?tenant_id={other['id']}", headers=headers)
    assert response.status_code == 200
    assert [l["id"] for l in response.json()["data"]] == [lease["id"]]

    response = client.get(f"/api/leases/{other_lease['id']}", headers=headers)
    assert response.status_code == 404


def test_tenant_accepts_terms_once(client: TestClient, org, tenant, lease, headers_for):
    headers = headers_for("tenant", organization_id=org["id"], tenant_id=tenant["id"], user_id="tenant-user-1")

    response = client.post(f"/api/leases/{lease['id']}/accept-terms", headers=headers)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["terms_accepted"] is True
    assert data["terms_accepted_by"] == "tenant-user-1"

    response = client.post(f"/api/leases/{lease['id']}/accept-terms", headers=headers)
    assert response.status_code == 409


def test_terminate_lease_api(client: TestClient, lease, org_admin_headers):
    response = client.post(
        f"/api/leases/{lease['id']}/terminate",
        headers=org_admin_headers,
        json={"reason": "Non-payment"},
    )
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "terminated"


def test_update_lease_rejects_null_required_fields(org, lease):
    with pytest.raises(ValidationError, match="status"):
        update_lease(org["id"], lease["id"], {"status": None})


def test_patch_with_nulls_keeps_lease_and_unit_consistent(client: TestClient, org, unit, lease, org_admin_headers):
    response = client.patch(
        f"/api/leases/{lease['id']}",
        headers=org_admin_headers,
        json={"unit_id": None, "billing_cycle": None, "status": None},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Fields cannot be null: unit_id, billing_cycle, status"

    response = client.get(f"/api/leases/{lease['id']}", headers=org_admin_headers)
    data = response.json()["data"]
    assert data["unit_id"] == unit["id"]
    assert data["status"] == "active"
    assert data["billing_cycle"] == "monthly"

    response = client.post(f"/api/leases/{lease['id']}/terminate", headers=org_admin_headers, json={})
    assert response.status_code == 200
    assert get_unit(org["id"], unit["id"])["status"] == "available"


def test_patch_can_clear_end_date(client: TestClient, org, lease, org_admin_headers):
    update_lease(org["id"], lease["id"], {"end_date": datetime(2026, 12, 31)})

    response = client.patch(f"/api/leases/{lease['id']}", headers=org_admin_headers, json={"end_date": None})
    assert response.status_code == 200
    assert response.json()["data"]["end_date"] is None
    assert response.json()["data"]["status"] == "active"
