# services/work_orders.py

from typing import Optional

from core.errors import ValidationError, NotFoundError
from core.logging_config import logger
from core.mongo_client import get_db, serialize_doc, serialize_docs
from core.utils import utcnow
from services.common import find_in_org, insert_document, reject_nulls, update_document


COLLECTION = "work_orders"
REQUIRED_FIELDS = ("title", "description", "category", "priority", "status")


def create_work_order(organization_id: str, data: dict, created_by: Optional[str] = None) -> dict:
    if not data.get("title") or not data.get("description") or not data.get("category"):
        raise ValidationError("Title, description, and category are required")

    find_in_org("buildings", data.get("building_id"), organization_id, "Building")
    if data.get("unit_id"):
        unit = find_in_org("units", data["unit_id"], organization_id, "Unit")
        if unit.get("building_id") != data["building_id"]:
            raise ValidationError("Unit does not belong to this building")

    doc = dict(data, organization_id=organization_id)
    doc.setdefault("priority", "medium")
    doc["status"] = "assigned" if data.get("assigned_to") else "open"
    doc["created_by"] = created_by
    doc["completed_at"] = None
    doc = insert_document(COLLECTION, doc)

    logger.info(f"Work order created: '{doc['title']}' ({doc['category']}, {doc['priority']})")
    return serialize_doc(doc)


def get_work_order(organization_id: Optional[str], work_order_id: str, assigned_to: Optional[str] = None) -> dict:
    doc = find_in_org(COLLECTION, work_order_id, organization_id, "Work order")
    # Technicians only see their own assignments
    if assigned_to is not None and doc.get("assigned_to") != assigned_to:
        raise NotFoundError("Work order not found")
    return serialize_doc(doc)


def list_work_orders(
    organization_id: str,
    building_id: Optional[str] = None,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    assigned_to: Optional[str] = None,
    limit: int = 100,
) -> list:
    query = {"organization_id": organization_id}
    if building_id:
        query["building_id"] = building_id
    if status:
        query["status"] = status
    if priority:
        query["priority"] = priority
    if assigned_to:
        query["assigned_to"] = assigned_to
    cursor = get_db()[COLLECTION].find(query).sort("created_at", -1).limit(limit)
    return serialize_docs(cursor)


def update_work_order(organization_id: str, work_order_id: str, changes: dict) -> dict:
    doc = find_in_org(COLLECTION, work_order_id, organization_id, "Work order")
    changes = dict(changes)
    reject_nulls(changes, REQUIRED_FIELDS)

    current_status = doc.get("status")
    new_status = changes.get("status") or current_status

    # Assigning an open work order moves it forward
    if changes.get("assigned_to") and new_status == "open":
        new_status = "assigned"
        changes["status"] = new_status

    if new_status == "completed" and current_status != "completed":
        changes["completed_at"] = utcnow()
    elif new_status != "completed" and current_status == "completed":
        changes["completed_at"] = None

    if new_status != current_status:
        logger.info(f"Work order {work_order_id} status {current_status} → {new_status}")

    return serialize_doc(update_document(COLLECTION, doc["_id"], changes))


def assign_work_order(organization_id: str, work_order_id: str, assigned_to: str) -> dict:
    return update_work_order(organization_id, work_order_id, {"assigned_to": assigned_to})
