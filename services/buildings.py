# services/buildings.py

from typing import Optional

from core.logging_config import logger
from core.mongo_client import get_db, serialize_doc, serialize_docs
from services.common import find_in_org, insert_document, reject_nulls, update_document


COLLECTION = "buildings"
REQUIRED_FIELDS = ("name", "building_type", "status")


def create_building(organization_id: str, data: dict) -> dict:
    doc = dict(data, organization_id=organization_id)
    doc.setdefault("status", "active")
    doc = insert_document(COLLECTION, doc)
    logger.info(f"Building created: {doc['name']} (org {organization_id})")
    return serialize_doc(doc)


def get_building(organization_id: Optional[str], building_id: str) -> dict:
    return serialize_doc(find_in_org(COLLECTION, building_id, organization_id, "Building"))


def list_buildings(
    organization_id: str,
    status: Optional[str] = None,
    building_type: Optional[str] = None,
    limit: int = 100,
) -> list:
    query = {"organization_id": organization_id}
    if status:
        query["status"] = status
    if building_type:
        query["building_type"] = building_type
    cursor = get_db()[COLLECTION].find(query).sort("name", 1).limit(limit)
    return serialize_docs(cursor)


def update_building(organization_id: str, building_id: str, changes: dict) -> dict:
    doc = find_in_org(COLLECTION, building_id, organization_id, "Building")
    reject_nulls(changes, REQUIRED_FIELDS)
    return serialize_doc(update_document(COLLECTION, doc["_id"], changes))


def delete_building(organization_id: str, building_id: str) -> dict:
    """Soft delete: buildings are never removed, only marked inactive."""
    doc = find_in_org(COLLECTION, building_id, organization_id, "Building")
    logger.info(f"Building deactivated: {building_id}")
    return serialize_doc(update_document(COLLECTION, doc["_id"], {"status": "inactive"}))
