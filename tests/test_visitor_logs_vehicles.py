# tests/test_visitor_logs_vehicles.py

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from core.errors import ConflictError, ValidationError
from services.parking_violations import appeal_violation, create_violation, resolve_violation
from services.users import create_user
from services.vehicles import create_vehicle, find_vehicle_by_plate, update_vehicle
from services.visitor_logs import create_visitor_log, list_visitor_logs, normalize_plate, record_visitor_exit


@pytest.fixture
def guard(org):
    return create_user({
        "email": "guard@example.com",
        "password": "Secret123",
        "role": "security",
        "organization_id": org["id"],
    })


def _visit(org, building, tenant, **extra):
    data = {
        "building_id": building["id"],
        "visitor_name": "Hana Tesfaye",
        "host_tenant_id": tenant["id"],
        "purpose": "visit",
    }
    data.update(extra)
    return create_visitor_log(org["id"], data, logged_by="guard-1")


@pytest.mark.parametrize("raw, expected", [
    ("aa 3 b1234", "AA3B1234"),
    ("  3-12345 ", "3-12345"),
    ("", None),
    (None, None),
])
def test_normalize_plate(raw, expected):
    assert normalize_plate(raw) == expected


# -----------------------------------------------------
# Visitor logs
# -----------------------------------------------------
def test_visitor_log_requires_core_fields(org, building, tenant):
    with pytest.raises(ValidationError):
        create_visitor_log(org["id"], {"building_id": building["id"], "visitor_name": "Hana", "purpose": "visit"}, logged_by="guard-1")
    with pytest.raises(ValidationError):
        _visit(org, building, tenant, purpose=None)


def test_visitor_entry_and_exit(org, building, tenant):
    log = _visit(org, building, tenant, vehicle_plate_number="aa 12345")
    assert log["vehicle_plate_number"] == "AA12345"
    assert log["exit_time"] is None

    exited = record_visitor_exit(org["id"], log["id"])
    assert exited["exit_time"] >= log["entry_time"]

    with pytest.raises(ValidationError) as exc:
        record_visitor_exit(org["id"], log["id"])
    assert exc.value.message == "Visitor has already exited"


def test_exit_before_entry_rejected(org, building, tenant):
    log = _visit(org, building, tenant, entry_time=datetime(2026, 3, 1, 10))
    with pytest.raises(ValidationError):
        record_visitor_exit(org["id"], log["id"], exit_time=datetime(2026, 3, 1, 9))


def test_active_only_and_time_window(org, building, tenant):
    inside = _visit(org, building, tenant, entry_time=datetime(2026, 3, 1, 10))
    left = _visit(org, building, tenant, entry_time=datetime(2026, 3, 2, 10))
    record_visitor_exit(org["id"], left["id"], exit_time=datetime(2026, 3, 2, 11))

    active = list_visitor_logs(org["id"], active_only=True)
    assert [v["id"] for v in active] == [inside["id"]]

    window = list_visitor_logs(org["id"], start=datetime(2026, 3, 2), end=datetime(2026, 3, 3))
    assert [v["id"] for v in window] == [left["id"]]


def test_host_unit_must_be_in_building(org, building, tenant, unit):
    from services.buildings import create_building
    annex = create_building(org["id"], {"name": "Annex"})
    with pytest.raises(ValidationError):
        _visit(org, annex, tenant, host_unit_id=unit["id"])


# -----------------------------------------------------
# Vehicles
# -----------------------------------------------------
def test_plate_unique_per_organization(org, other_org, tenant):
    vehicle = create_vehicle(org["id"], {"plate_number": "aa 3 b1234", "tenant_id": tenant["id"]})
    assert vehicle["plate_number"] == "AA3B1234"
    assert vehicle["status"] == "active"

    with pytest.raises(ConflictError):
        create_vehicle(org["id"], {"plate_number": "AA3B1234"})

    # Another organization may register the same plate
    assert create_vehicle(other_org["id"], {"plate_number": "AA3B1234"})["plate_number"] == "AA3B1234"


def test_find_by_plate_and_rename(org):
    first = create_vehicle(org["id"], {"plate_number": "3-11111"})
    second = create_vehicle(org["id"], {"plate_number": "3-22222"})

    assert find_vehicle_by_plate(org["id"], " 3-11111 ")["id"] == first["id"]
    assert find_vehicle_by_plate(org["id"], "3-99999") is None

    with pytest.raises(ConflictError):
        update_vehicle(org["id"], second["id"], {"plate_number": "3-11111"})
    assert update_vehicle(org["id"], second["id"], {"plate_number": "3-22222", "color": "blue"})["color"] == "blue"


# -----------------------------------------------------
# Parking violations
# -----------------------------------------------------
def test_fine_requires_amount(org, building, guard):
    data = {"building_id": building["id"], "plate_number": "3-11111", "violation_type": "no_permit", "severity": "fine"}
    with pytest.raises(ValidationError):
        create_violation(org["id"], data, reported_by=guard["id"])

    violation = create_violation(org["id"], dict(data, fine_amount=500), reported_by=guard["id"])
    assert violation["status"] == "reported"
    assert violation["plate_number"] == "3-11111"


def test_violation_copies_vehicle_plate(org, building, guard):
    vehicle = create_vehicle(org["id"], {"plate_number": "aa 777"})
    violation = create_violation(org["id"], {
        "building_id": building["id"],
        "vehicle_id": vehicle["id"],
        "violation_type": "wrong_space",
    }, reported_by=guard["id"])
    assert violation["plate_number"] == "AA777"


def test_reporter_must_belong_to_organization(other_org, building, guard):
    from services.buildings import create_building
    rival_building = create_building(other_org["id"], {"name": "Rival Plaza"})
    with pytest.raises(ValidationError):
        create_violation(other_org["id"], {
            "building_id": rival_building["id"],
            "plate_number": "3-1",
            "violation_type": "no_permit",
        }, reported_by=guard["id"])


def test_resolve_and_appeal(org, building, guard):
    data = {"building_id": building["id"], "plate_number": "3-44444", "violation_type": "overtime_parking"}

    appealed = create_violation(org["id"], data, reported_by=guard["id"])
    assert appeal_violation(org["id"], appealed["id"], "Had a permit")["status"] == "appealed"
    with pytest.raises(ValidationError):
        appeal_violation(org["id"], appealed["id"], "Again")

    resolved = create_violation(org["id"], data, reported_by=guard["id"])
    result = resolve_violation(org["id"], resolved["id"], resolved_by=guard["id"], notes="Paid")
    assert result["status"] == "resolved"
    assert result["resolved_by"] == guard["id"]
    with pytest.raises(ValidationError):
        resolve_violation(org["id"], resolved["id"], resolved_by=guard["id"])
    with pytest.raises(ValidationError):
        appeal_violation(org["id"], resolved["id"], "Too late")


# -----------------------------------------------------
# API
# -----------------------------------------------------
def test_security_desk_flow(client: TestClient, org, building, tenant, guard, headers_for):
    headers = headers_for("security", organization_id=org["id"], user_id=guard["id"])

    response = client.post("/api/visitor-logs", headers=headers, json={
        "building_id": building["id"],
        "visitor_name": "Hana Tesfaye",
        "host_tenant_id": tenant["id"],
        "purpose": "delivery",
        "vehicle_plate_number": "aa 555",
    })
    assert response.status_code == 201
    log = response.json()["data"]
    assert log["logged_by"] == guard["id"]

    response = client.get("/api/visitor-logs", headers=headers, params={"active_only": True})
    assert len(response.json()["data"]) == 1

    assert client.post(f"/api/visitor-logs/{log['id']}/exit", headers=headers).status_code == 200
    assert client.post(f"/api/visitor-logs/{log['id']}/exit", headers=headers).status_code == 400

    response = client.post("/api/vehicles", headers=headers, json={"plate_number": "aa 555", "is_temporary": True, "visitor_log_id": log["id"]})
    assert response.status_code == 201
    assert client.post("/api/vehicles", headers=headers, json={"plate_number": "AA555"}).status_code == 409

    response = client.get("/api/vehicles/by-plate/aa555", headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["is_temporary"] is True
    assert client.get("/api/vehicles/by-plate/ZZ1", headers=headers).status_code == 404

    response = client.post("/api/parking-violations", headers=headers, json={
        "building_id": building["id"],
        "plate_number": "AA555",
        "violation_type": "overtime_parking",
    })
    assert response.status_code == 201
    assert response.json()["data"]["reported_by"] == guard["id"]


def test_technician_cannot_log_visitors(client: TestClient, org, building, tenant, headers_for):
    headers = headers_for("technician", organization_id=org["id"], user_id="tech-1")
    response = client.post("/api/visitor-logs", headers=headers, json={
        "building_id": building["id"],
        "visitor_name": "X",
        "host_tenant_id": tenant["id"],
        "purpose": "visit",
    })
    assert response.status_code == 403


def test_vehicle_delete_is_soft(client: TestClient, org, org_admin_headers):
    vehicle = create_vehicle(org["id"], {"plate_number": "3-60606"})
    response = client.delete(f"/api/vehicles/{vehicle['id']}", headers=org_admin_headers)
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "inactive"
    assert find_vehicle_by_plate(org["id"], "3-60606")["status"] == "inactive"
