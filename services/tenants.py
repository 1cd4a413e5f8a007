# services/tenants.py

import re
from typing import Optional

from core.errors import ConflictError
from core.logging_config import logger
from core.mongo_client import get_db, serialize_doc, serialize_docs
from services.common import find_in_org, insert_document, reject_nulls, update_document


COLLECTION = "tenants"
REQUIRED_FIELDS = ("first_name", "last_name", "primary_phone", "status")


def _ensure_unique_phone(organization_id: str, phone: str, exclude_id=None):
    query = {"organization_id": organization_id, "primary_phone": phone}
    if exclude_id is not None:
        query["_id"] = {"$ne": exclude_id}
    if get_db()[COLLECTION].find_one(query):
        raise ConflictError("Tenant with this phone number already exists")


def create_tenant(organization_id: str, data: dict) -> dict:
    _ensure_unique_phone(organization_id, data["primary_phone"])

    doc = dict(data, organization_id=organization_id)
    doc.setdefault("status", "active")
    doc.setdefault("language", "en")
    doc = insert_document(COLLECTION, doc)
    logger.info(f"Tenant created: {doc['first_name']} {doc['last_name']} (org {organization_id})")
    return serialize_doc(doc)


def get_tenant(organization_id: Optional[str], tenant_id: str) -> dict:
    return serialize_doc(find_in_org(COLLECTION, tenant_id, organization_id, "Tenant"))


def list_tenants(
    organization_id: str,
    status: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = 100,
) -> list:
    query = {"organization_id": organization_id}
    if status:
        query["status"] = status
    if search:
        pattern = re.compile(re.escape(search.strip()), re.IGNORECASE)
        query["$or"] = [
            {"first_name": pattern},
            {"last_name": pattern},
            {"primary_phone": pattern},
        ]
    cursor = get_db()[COLLECTION].find(query).sort("last_name", 1).limit(limit)
    return serialize_docs(cursor)


def update_tenant(organization_id: str, tenant_id: str, changes: dict) -> dict:
    doc = find_in_org(COLLECTION, tenant_id, organization_id, "Tenant")
    reject_nulls(changes, REQUIRED_FIELDS)

    phone = changes.get("primary_phone")
    if phone and phone != doc.get("primary_phone"):
        _ensure_unique_phone(organization_id, phone, exclude_id=doc["_id"])

    return serialize_doc(update_document(COLLECTION, doc["_id"], changes))


def delete_tenant(organization_id: str, tenant_id: str) -> dict:
    doc = find_in_org(COLLECTION, tenant_id, organization_id, "Tenant")
    logger.info(f"Tenant {tenant_id} deactivated")
    return serialize_doc(update_document(COLLECTION, doc["_id"], {"status": "inactive"}))
