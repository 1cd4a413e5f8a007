# services/common.py

"""
Shared lookups used by every service module.

Records are always resolved inside an organization: a document that exists
but belongs to another organization is reported as not found.
"""

from typing import Optional

from core.errors import NotFoundError, ValidationError
from core.mongo_client import get_db, to_object_id
from core.utils import utcnow


def find_in_org(collection: str, record_id: str, organization_id: Optional[str], label: str) -> dict:
    """
    Raw document lookup scoped to an organization.
    Pass organization_id=None only for platform-level callers.
    """
    oid = to_object_id(record_id)
    if oid is None:
        raise NotFoundError(f"{label} not found")

    query = {"_id": oid}
    if organization_id is not None:
        query["organization_id"] = organization_id

    doc = get_db()[collection].find_one(query)
    if not doc:
        raise NotFoundError(f"{label} not found")
    return doc


def insert_document(collection: str, data: dict) -> dict:
    now = utcnow()
    doc = dict(data)
    doc.setdefault("created_at", now)
    doc["updated_at"] = now
    result = get_db()[collection].insert_one(doc)
    doc["_id"] = result.inserted_id
    return doc


def update_document(collection: str, doc_id, changes: dict, unset: Optional[list] = None) -> dict:
    """Apply $set (plus optional $unset) and return the fresh document."""
    update = {"$set": dict(changes, updated_at=utcnow())}
    if unset:
        update["$unset"] = {field: "" for field in unset}

    db = get_db()
    db[collection].update_one({"_id": doc_id}, update)
    return db[collection].find_one({"_id": doc_id})


def reject_nulls(changes: dict, fields) -> None:
    """Fields a record cannot live without may be changed but never cleared."""
    cleared = [field for field in fields if field in changes and changes[field] is None]
    if cleared:
        raise ValidationError(f"Fields cannot be null: {', '.join(cleared)}")
