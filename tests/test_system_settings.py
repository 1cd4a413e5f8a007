# tests/test_system_settings.py

import pytest
from fastapi.testclient import TestClient

from core.errors import ValidationError
from services.system_settings import (
    deep_merge,
    get_system_settings,
    is_provider_enabled,
    update_settings_section,
    update_system_settings,
)


def test_defaults_when_nothing_stored():
    data = get_system_settings()
    assert data["general"]["default_currency"] == "ETB"
    assert data["integrations"]["payment_providers"]["chapa"]["enabled"] is False


def test_deep_merge_keeps_siblings():
    merged = deep_merge({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}})
    assert merged == {"a": {"x": 1, "y": 3}, "b": 1}


def test_partial_update_does_not_clobber(mongo):
    update_system_settings({"general": {"app_name": "Bole BMS"}}, updated_by="root-1")
    update_system_settings({"general": {"support_email": "help@bole.et"}}, updated_by="root-1")

    data = get_system_settings()
    assert data["general"]["app_name"] == "Bole BMS"
    assert data["general"]["support_email"] == "help@bole.et"
    assert data["general"]["default_currency"] == "ETB"

    stored = mongo.system_settings.find_one({"_id": "system"})
    assert stored["updated_by"] == "root-1"


def test_update_invalidates_cache():
    assert is_provider_enabled("telebirr") is False
    update_settings_section("integrations", {"payment_providers": {"telebirr": {"enabled": True}}})
    assert is_provider_enabled("telebirr") is True
    # webhook name differs from the settings key
    update_settings_section("integrations", {"payment_providers": {"hello_cash": {"enabled": True}}})
    assert is_provider_enabled("hellocash") is True


def test_unknown_section_rejected():
    with pytest.raises(ValidationError):
        update_settings_section("billing", {"x": 1})
    with pytest.raises(ValidationError):
        update_system_settings({"bogus": {}})


def test_settings_endpoints(client: TestClient, admin_headers, org_admin_headers, headers_for, org):
    update_settings_section("integrations", {"payment_providers": {"chapa": {"webhook_secret": "whsec_live"}}})

    response = client.get("/api/settings", headers=admin_headers)
    assert response.json()["data"]["integrations"]["payment_providers"]["chapa"]["webhook_secret"] == "whsec_live"

    response = client.get("/api/settings", headers=org_admin_headers)
    assert response.status_code == 200
    assert response.json()["data"]["integrations"]["payment_providers"]["chapa"]["webhook_secret"] == "********"

    response = client.get("/api/settings", headers=headers_for("accountant", organization_id=org["id"]))
    assert response.status_code == 403

    response = client.patch("/api/settings", headers=org_admin_headers, json={"maintenance": {"enabled": True}})
    assert response.status_code == 403

    response = client.patch("/api/settings/maintenance", headers=admin_headers, json={"enabled": True, "message": "Upgrade"})
    assert response.status_code == 200
    assert response.json()["data"]["maintenance"] == {"enabled": True, "message": "Upgrade"}
