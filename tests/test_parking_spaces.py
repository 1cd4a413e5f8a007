# tests/test_parking_spaces.py

import pytest
from fastapi.testclient import TestClient

from core.errors import ConflictError, NotFoundError, ValidationError
from services.buildings import create_building
from services.parking_spaces import (
    assign_parking_space,
    create_parking_space,
    delete_parking_space,
    list_parking_spaces,
    release_parking_space,
    update_parking_space,
)
from services.tenants import create_tenant
from services.vehicles import create_vehicle, get_vehicle, update_vehicle
from services.visitor_logs import create_visitor_log


@pytest.fixture
def space(org, building):
    return create_parking_space(org["id"], {"building_id": building["id"], "space_number": "P-001", "space_type": "tenant"})


def test_space_number_unique_per_building(org, building, space):
    with pytest.raises(ConflictError):
        create_parking_space(org["id"], {"building_id": building["id"], "space_number": "P-001", "space_type": "visitor"})

    annex = create_building(org["id"], {"name": "Annex", "building_type": "residential"})
    other = create_parking_space(org["id"], {"building_id": annex["id"], "space_number": "P-001", "space_type": "tenant"})
    assert other["status"] == "available"

    with pytest.raises(ConflictError):
        update_parking_space(org["id"], other["id"], {"building_id": building["id"]})


def test_space_requires_building_in_same_org(other_org, building):
    with pytest.raises(NotFoundError):
        create_parking_space(other_org["id"], {"building_id": building["id"], "space_number": "P-9", "space_type": "tenant"})


def test_assign_and_release_tracks_vehicle(org, tenant, space):
    vehicle = create_vehicle(org["id"], {"plate_number": "aa 3 b1234", "tenant_id": tenant["id"]})

    assigned = assign_parking_space(org["id"], space["id"], tenant["id"], vehicle_id=vehicle["id"])
    assert assigned["status"] == "occupied"
    assert assigned["assigned_to"] == tenant["id"]
    assert get_vehicle(org["id"], vehicle["id"])["parking_space_id"] == space["id"]
    assert [s["id"] for s in list_parking_spaces(org["id"], assigned_to=tenant["id"])] == [space["id"]]

    with pytest.raises(ConflictError):
        assign_parking_space(org["id"], space["id"], tenant["id"])
    with pytest.raises(ConflictError):
        delete_parking_space(org["id"], space["id"])

    released = release_parking_space(org["id"], space["id"])
    assert released["status"] == "available"
    assert released["assigned_to"] is None
    assert get_vehicle(org["id"], vehicle["id"])["parking_space_id"] is None

    with pytest.raises(ValidationError):
        release_parking_space(org["id"], space["id"])


def test_assign_rejects_foreign_vehicle_and_maintenance(org, tenant, space):
    neighbour = create_tenant(org["id"], {"first_name": "Sara", "last_name": "Alemu", "primary_phone": "+251922000111"})
    vehicle = create_vehicle(org["id"], {"plate_number": "3-12345", "tenant_id": neighbour["id"]})

    with pytest.raises(ValidationError, match="Vehicle does not belong"):
        assign_parking_space(org["id"], space["id"], tenant["id"], vehicle_id=vehicle["id"])

    retired = delete_parking_space(org["id"], space["id"])
    assert retired["status"] == "maintenance"
    with pytest.raises(ValidationError, match="maintenance"):
        assign_parking_space(org["id"], space["id"], tenant["id"])


def test_parking_space_references_are_validated(org, other_org, building, tenant, space):
    foreign_building = create_building(other_org["id"], {"name": "Rival Plaza", "building_type": "commercial"})
    foreign = create_parking_space(other_org["id"], {"building_id": foreign_building["id"], "space_number": "X-1", "space_type": "tenant"})

    with pytest.raises(NotFoundError, match="Parking space not found"):
        create_vehicle(org["id"], {"plate_number": "AA1", "parking_space_id": foreign["id"]})

    vehicle = create_vehicle(org["id"], {"plate_number": "AA2", "parking_space_id": space["id"]})
    with pytest.raises(NotFoundError):
        update_vehicle(org["id"], vehicle["id"], {"parking_space_id": "not-an-id"})

    with pytest.raises(NotFoundError):
        create_visitor_log(org["id"], {
            "building_id": building["id"],
            "visitor_name": "Hana Tesfaye",
            "host_tenant_id": tenant["id"],
            "purpose": "visit",
            "parking_space_id": foreign["id"],
        }, logged_by="guard-1")


def test_parking_space_api(client: TestClient, org, building, tenant, org_admin_headers, headers_for):
    response = client.post(
        "/api/parking-spaces",
        headers=org_admin_headers,
        json={"building_id": building["id"], "space_number": " P-010 ", "space_type": "tenant"},
    )
    assert response.status_code == 201
    space = response.json()["data"]
    assert space["space_number"] == "P-010"

    response = client.post(f"/api/parking-spaces/{space['id']}/assign", headers=org_admin_headers, json={"tenant_id": tenant["id"]})
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "occupied"

    response = client.patch(f"/api/parking-spaces/{space['id']}", headers=org_admin_headers, json={"space_number": None})
    assert response.status_code == 400

    guard = headers_for("security", organization_id=org["id"])
    response = client.get(f"/api/parking-spaces?building_id={building['id']}", headers=guard)
    assert response.status_code == 200
    assert len(response.json()["data"]) == 1

    response = client.post("/api/parking-spaces", headers=guard, json={"building_id": building["id"], "space_number": "P-2", "space_type": "visitor"})
    assert response.status_code == 403

    response = client.post(f"/api/parking-spaces/{space['id']}/release", headers=org_admin_headers)
    assert response.json()["data"]["status"] == "available"
