# tests/test_permissions.py

"""
Tests for permission checks and organization scoping.
"""

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from core.permission_helpers import has_permission, resolve_organization_id, require_tenant_link
from dependencies.auth import CurrentUser


def _user(role, org_id="org-1", **kwargs):
    return CurrentUser(id="u1", email="u@example.com", role=role, organization_id=org_id, **kwargs)


def test_super_admin_has_everything():
    assert has_permission(_user("super_admin", None), "payments:refund")


def test_role_permissions():
    assert has_permission(_user("accountant"), "payments:reconcile")
    assert not has_permission(_user("accountant"), "work_orders:create")
    assert has_permission(_user("security"), "visitor_logs:create")
    assert not has_permission(_user("security"), "invoices:read")
    assert not has_permission(_user("auditor"), "buildings:create")


def test_user_permission_overrides_extend_role():
    user = _user("technician", permissions=["complaints:read"])
    assert has_permission(user, "complaints:read")


def test_resolve_organization_id():
    assert resolve_organization_id(_user("org_admin")) == "org-1"
    assert resolve_organization_id(_user("org_admin"), "org-1") == "org-1"

    with pytest.raises(HTTPException) as exc:
        resolve_organization_id(_user("org_admin"), "org-2")
    assert exc.value.status_code == 403

    assert resolve_organization_id(_user("super_admin", None), "org-2") == "org-2"
    with pytest.raises(HTTPException):
        resolve_organization_id(_user("super_admin", None))


def test_tenant_user_without_link_rejected():
    with pytest.raises(HTTPException) as exc:
        require_tenant_link(_user("tenant"))
    assert exc.value.status_code == 403


def test_org_admin_cannot_read_other_org(client: TestClient, org, other_org, org_admin_headers):
    response = client.get(f"/api/buildings?organization_id={other_org['id']}", headers=org_admin_headers)
    assert response.status_code == 403


def test_records_of_other_org_are_not_found(client: TestClient, building, other_org, headers_for):
    headers = headers_for("org_admin", organization_id=other_org["id"])
    response = client.get(f"/api/buildings/{building['id']}", headers=headers)
    assert response.status_code == 404


def test_missing_permission_is_forbidden(client: TestClient, org, headers_for):
    headers = headers_for("security", organization_id=org["id"])
    response = client.post("/api/buildings", headers=headers, json={"name": "Nope"})
    assert response.status_code == 403
    assert "buildings:create" in response.json()["detail"]


def test_admin_lists_across_orgs(client: TestClient, building, org, admin_headers):
    response = client.get(f"/api/buildings?organization_id={org['id']}", headers=admin_headers)
    assert response.status_code == 200
    assert [b["name"] for b in response.json()["data"]] == ["Bole Tower"]
