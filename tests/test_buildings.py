# tests/test_buildings.py

"""
Tests for organization, building and tenant endpoints.
"""

from fastapi.testclient import TestClient


def test_create_organization_requires_super_admin(client: TestClient, admin_headers, org_admin_headers):
    payload = {"name": "Sheger Homes", "code": " shg "}
    assert client.post("/api/organizations", headers=org_admin_headers, json=payload).status_code == 403

    response = client.post("/api/organizations", headers=admin_headers, json=payload)
    assert response.status_code == 201
    assert response.json()["data"]["code"] == "SHG"

    assert client.post("/api/organizations", headers=admin_headers, json=payload).status_code == 409


def test_org_admin_cannot_read_other_org(client: TestClient, org, other_org, org_admin_headers):
    assert client.get(f"/api/organizations/{org['id']}", headers=org_admin_headers).status_code == 200
    assert client.get(f"/api/organizations/{other_org['id']}", headers=org_admin_headers).status_code == 403


def test_org_admin_cannot_change_own_status(client: TestClient, org, org_admin_headers):
    response = client.patch(
        f"/api/organizations/{org['id']}",
        headers=org_admin_headers,
        json={"name": "Addis Properties PLC", "status": "suspended"},
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "Addis Properties PLC"
    assert data["status"] == "active"


def test_list_buildings_is_org_scoped(client: TestClient, org, other_org, building, org_admin_headers):
    from services.buildings import create_building
    create_building(other_org["id"], {"name": "Rival Plaza"})

    response = client.get("/api/buildings", headers=org_admin_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert [b["name"] for b in data["data"]] == ["Bole Tower"]


def test_org_admin_cannot_override_organization(client: TestClient, other_org, org_admin_headers):
    response = client.get("/api/buildings", headers=org_admin_headers, params={"organization_id": other_org["id"]})
    assert response.status_code == 403


def test_super_admin_must_pick_organization(client: TestClient, org, building, admin_headers):
    assert client.get("/api/buildings", headers=admin_headers).status_code == 403
    response = client.get("/api/buildings", headers=admin_headers, params={"organization_id": org["id"]})
    assert len(response.json()["data"]) == 1


def test_building_crud(client: TestClient, org_admin_headers):
    response = client.post(
        "/api/buildings",
        headers=org_admin_headers,
        json={"name": "Kazanchis Plaza", "building_type": "commercial", "address": {"city": "Addis Ababa"}},
    )
    assert response.status_code == 201
    building_id = response.json()["data"]["id"]

    response = client.patch(f"/api/buildings/{building_id}", headers=org_admin_headers, json={"total_floors": 12})
    assert response.json()["data"]["total_floors"] == 12

    response = client.delete(f"/api/buildings/{building_id}", headers=org_admin_headers)
    assert response.json()["data"]["status"] == "inactive"


def test_get_building_not_found(client: TestClient, org_admin_headers):
    response = client.get("/api/buildings/65f000000000000000000000", headers=org_admin_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Building not found"


def test_building_from_other_org_is_not_found(client: TestClient, other_org, org_admin_headers):
    from services.buildings import create_building
    rival = create_building(other_org["id"], {"name": "Rival Plaza"})
    assert client.get(f"/api/buildings/{rival['id']}", headers=org_admin_headers).status_code == 404


def test_building_units(client: TestClient, building, unit, org_admin_headers):
    response = client.get(f"/api/buildings/{building['id']}/units", headers=org_admin_headers)
    assert [u["unit_number"] for u in response.json()["data"]] == ["A-101"]


def test_tenant_phone_unique_and_normalized(client: TestClient, org, tenant, headers_for):
    headers = headers_for("building_manager", organization_id=org["id"])
    payload = {"first_name": "Sara", "last_name": "Alemu", "primary_phone": "+251 911-223 344"}

    assert client.post("/api/tenants", headers=headers, json=payload).status_code == 409

    response = client.post("/api/tenants", headers=headers, json=dict(payload, primary_phone="+251 922 000 111"))
    assert response.status_code == 201
    assert response.json()["data"]["primary_phone"] == "+251922000111"

    response = client.get("/api/tenants", headers=headers, params={"search": "ale"})
    assert [t["first_name"] for t in response.json()["data"]] == ["Sara"]
