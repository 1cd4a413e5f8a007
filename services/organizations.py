# services/organizations.py

from typing import Optional

from pymongo.errors import DuplicateKeyError

from core.errors import ConflictError
from core.logging_config import logger
from core.mongo_client import get_db, serialize_doc, serialize_docs
from services.common import find_in_org, insert_document, reject_nulls, update_document


COLLECTION = "organizations"
REQUIRED_FIELDS = ("name", "status")


def create_organization(data: dict) -> dict:
    db = get_db()
    code = data["code"]
    if db[COLLECTION].find_one({"code": code}):
        raise ConflictError("Organization code already exists")

    doc = dict(data)
    doc.setdefault("status", "active")
    doc.setdefault("subscription_id", None)
    try:
        doc = insert_document(COLLECTION, doc)
    except DuplicateKeyError:
        raise ConflictError("Organization code already exists")

    logger.info(f"Organization created: {code}")
    return serialize_doc(doc)


def get_organization(organization_id: str) -> dict:
    return serialize_doc(find_in_org(COLLECTION, organization_id, None, "Organization"))


def list_organizations(status: Optional[str] = None, limit: int = 100) -> list:
    query = {}
    if status:
        query["status"] = status
    cursor = get_db()[COLLECTION].find(query).sort("name", 1).limit(limit)
    return serialize_docs(cursor)


def update_organization(organization_id: str, changes: dict) -> dict:
    doc = find_in_org(COLLECTION, organization_id, None, "Organization")
    reject_nulls(changes, REQUIRED_FIELDS)
    changes = {k: v for k, v in changes.items() if k not in ("code", "_id", "id")}
    return serialize_doc(update_document(COLLECTION, doc["_id"], changes))


def delete_organization(organization_id: str) -> dict:
    doc = find_in_org(COLLECTION, organization_id, None, "Organization")
    logger.info(f"Organization deactivated: {doc.get('code')}")
    return serialize_doc(update_document(COLLECTION, doc["_id"], {"status": "inactive"}))


def link_subscription(organization_id: str, subscription_id: Optional[str]):
    doc = find_in_org(COLLECTION, organization_id, None, "Organization")
    update_document(COLLECTION, doc["_id"], {"subscription_id": subscription_id})
