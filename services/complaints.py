# services/complaints.py

from typing import Optional

from core.errors import ConflictError, NotFoundError, ValidationError
from core.logging_config import logger
from core.mongo_client import get_db, serialize_doc, serialize_docs
from core.utils import utcnow
from services.common import find_in_org, insert_document, reject_nulls, update_document
from services.work_orders import create_work_order


COLLECTION = "complaints"
REQUIRED_FIELDS = ("category", "title", "description", "status", "priority")

CLOSED_STATUSES = ("resolved", "closed")

# complaint maintenance_category → work order category
MAINTENANCE_CATEGORY_MAP = {
    "plumbing": "plumbing",
    "electrical": "electrical",
    "hvac": "hvac",
    "appliance": "other",
    "structural": "other",
    "other": "other",
}

# complaint category → work order category
COMPLAINT_CATEGORY_MAP = {
    "security": "security",
    "cleanliness": "cleaning",
}

URGENCY_PRIORITY_MAP = {
    "emergency": "urgent",
    "high": "high",
    "medium": "medium",
    "low": "low",
}


def map_work_order_category(complaint: dict) -> str:
    maintenance_category = complaint.get("maintenance_category")
    if maintenance_category:
        return MAINTENANCE_CATEGORY_MAP.get(maintenance_category, "other")
    return COMPLAINT_CATEGORY_MAP.get(complaint.get("category"), "other")


def map_work_order_priority(complaint: dict) -> str:
    urgency = complaint.get("urgency")
    if urgency in URGENCY_PRIORITY_MAP:
        return URGENCY_PRIORITY_MAP[urgency]
    return complaint.get("priority") or "medium"


def create_complaint(organization_id: str, data: dict) -> dict:
    tenant_id = data.get("tenant_id")
    if tenant_id:
        find_in_org("tenants", tenant_id, organization_id, "Tenant")

    doc = dict(data, organization_id=organization_id)
    if data.get("unit_id"):
        unit = find_in_org("units", data["unit_id"], organization_id, "Unit")
        doc["building_id"] = unit.get("building_id")
    elif data.get("building_id"):
        find_in_org("buildings", data["building_id"], organization_id, "Building")

    doc["status"] = "open"
    doc["resolved_at"] = None
    doc["linked_work_order_id"] = None
    doc = insert_document(COLLECTION, doc)

    logger.info(f"Complaint filed: '{doc['title']}' ({doc.get('type')}/{doc.get('category')})")
    return serialize_doc(doc)


def get_complaint(organization_id: Optional[str], complaint_id: str, tenant_id: Optional[str] = None) -> dict:
    doc = find_in_org(COLLECTION, complaint_id, organization_id, "Complaint")
    reject_nulls(changes, REQUIRED_FIELDS)
    if tenant_id is not None and doc.get("tenant_id") != tenant_id:
        raise NotFoundError("Complaint not found")
    return serialize_doc(doc)


def list_complaints(
    organization_id: str,
    status: Optional[str] = None,
    tenant_id: Optional[str] = None,
    building_id: Optional[str] = None,
    complaint_type: Optional[str] = None,
    limit: int = 100,
) -> list:
    query = {"organization_id": organization_id}
    if status:
        query["status"] = status
    if tenant_id:
        query["tenant_id"] = tenant_id
    if building_id:
        query["building_id"] = building_id
    if complaint_type:
        query["type"] = complaint_type
    cursor = get_db()[COLLECTION].find(query).sort("created_at", -1).limit(limit)
    return serialize_docs(cursor)


def update_complaint(organization_id: str, complaint_id: str, changes: dict) -> dict:
    doc = find_in_org(COLLECTION, complaint_id, organization_id, "Complaint")
    changes = dict(changes)

    current_status = doc.get("status")
    new_status = changes.get("status") or current_status

    if changes.get("assigned_to") and new_status == "open":
        new_status = "assigned"
        changes["status"] = new_status

    if new_status in CLOSED_STATUSES and current_status not in CLOSED_STATUSES:
        changes["resolved_at"] = utcnow()
    elif new_status not in CLOSED_STATUSES and current_status in CLOSED_STATUSES:
        changes["resolved_at"] = None

    return serialize_doc(update_document(COLLECTION, doc["_id"], changes))


def convert_complaint_to_work_order(
    organization_id: str,
    complaint_id: str,
    created_by: Optional[str] = None,
    overrides: Optional[dict] = None,
) -> dict:
    """
    Open a work order from a complaint and link the two.
    Returns {"complaint": ..., "work_order": ...}.
    """
    complaint = find_in_org(COLLECTION, complaint_id, organization_id, "Complaint")

    if complaint.get("linked_work_order_id"):
        raise ConflictError("Complaint already has a linked work order")
    if complaint.get("status") in CLOSED_STATUSES:
        raise ValidationError("Cannot convert closed or resolved complaint to work order")
    if not complaint.get("unit_id"):
        raise ValidationError("Complaint must be associated with a unit to create work order")

    unit = find_in_org("units", complaint["unit_id"], organization_id, "Unit")
    overrides = overrides or {}

    work_order = create_work_order(organization_id, {
        "building_id": unit["building_id"],
        "unit_id": complaint["unit_id"],
        "title": complaint.get("title"),
        "description": complaint.get("description"),
        "category": map_work_order_category(complaint),
        "priority": map_work_order_priority(complaint),
        "assigned_to": overrides.get("assigned_to"),
        "estimated_cost": overrides.get("estimated_cost"),
        "complaint_id": complaint_id,
    }, created_by=created_by)

    changes = {"linked_work_order_id": work_order["id"]}
    if complaint.get("status") == "open":
        changes["status"] = "assigned"
    updated = update_document(COLLECTION, complaint["_id"], changes)

    logger.info(f"Complaint {complaint_id} converted to work order {work_order['id']}")
    return {"complaint": serialize_doc(updated), "work_order": work_order}
