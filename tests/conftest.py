# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.

Every test gets a fresh in-memory MongoDB (mongomock) swapped in for the
process-wide client, so services and routers run unmodified.
"""

import pytest
import mongomock
from datetime import datetime
from fastapi.testclient import TestClient
from typing import Generator

from main import create_app
from core.security import create_access_token


@pytest.fixture(autouse=True)
def mongo(monkeypatch):
    """In-memory database for the duration of one test."""
    client = mongomock.MongoClient()
    monkeypatch.setattr("core.mongo_client._client", client)
    from core.mongo_client import get_db
    yield get_db()
    client.close()


@pytest.fixture(autouse=True)
def reset_cache():
    """Reset cache and rate limits before each test."""
    from core.cache import cache_clear
    from core.rate_limiter import reset_rate_limits
    cache_clear()
    reset_rate_limits()
    yield
    cache_clear()
    reset_rate_limits()


@pytest.fixture(scope="function")
def app():
    """Create a test FastAPI application instance."""
    return create_app()


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


# -----------------------------------------------------
# Seed data
# -----------------------------------------------------
@pytest.fixture
def org():
    from services.organizations import create_organization
    return create_organization({"name": "Addis Properties", "code": "ADP", "status": "active"})


@pytest.fixture
def other_org():
    from services.organizations import create_organization
    return create_organization({"name": "Rival Estates", "code": "RIV", "status": "active"})


@pytest.fixture
def building(org):
    from services.buildings import create_building
    return create_building(org["id"], {"name": "Bole Tower", "building_type": "residential", "status": "active"})


@pytest.fixture
def unit(org, building):
    from services.units import create_unit
    return create_unit(org["id"], {
        "building_id": building["id"],
        "unit_number": "A-101",
        "unit_type": "apartment",
        "area": 80,
        "rent_amount": 15000,
        "status": "available",
    })


@pytest.fixture
def tenant(org):
    from services.tenants import create_tenant
    return create_tenant(org["id"], {
        "first_name": "Abebe",
        "last_name": "Kebede",
        "primary_phone": "+251911223344",
        "language": "am",
        "status": "active",
    })


@pytest.fixture
def lease(org, unit, tenant):
    from services.leases import create_lease
    return create_lease(org["id"], {
        "tenant_id": tenant["id"],
        "unit_id": unit["id"],
        "start_date": datetime(2026, 1, 1),
        "due_day": 5,
        "billing_cycle": "monthly",
    }, now=datetime(2026, 1, 1))


# -----------------------------------------------------
# Identities
# -----------------------------------------------------
def make_headers(role: str, organization_id=None, user_id="user-1", tenant_id=None, permissions=None) -> dict:
    token = create_access_token({
        "sub": user_id,
        "email": f"{role}@example.com",
        "role": role,
        "organization_id": organization_id,
        "tenant_id": tenant_id,
        "permissions": permissions or [],
    })
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers():
    return make_headers("super_admin", user_id="root-1")


@pytest.fixture
def org_admin_headers(org):
    return make_headers("org_admin", organization_id=org["id"], user_id="org-admin-1")


@pytest.fixture
def headers_for():
    """Factory fixture: headers_for("accountant", organization_id=...)."""
    return make_headers
