# services/parking_spaces.py

"""
Parking spaces and their tenant assignments.

A space belongs to one building and its number is unique within that
building. Assigning a space to a tenant marks it occupied and, when a
vehicle is given, points the vehicle at the space; releasing undoes both.
"""

from typing import Optional

from core.errors import ConflictError, ValidationError
from core.logging_config import logger
from core.mongo_client import get_db, serialize_doc, serialize_docs, to_object_id
from core.utils import utcnow
from services.common import find_in_org, insert_document, reject_nulls, update_document


COLLECTION = "parking_spaces"
REQUIRED_FIELDS = ("building_id", "space_number", "space_type", "status")


def _ensure_unique_number(building_id: str, space_number: str, exclude_id=None):
    query = {"building_id": building_id, "space_number": space_number}
    if exclude_id is not None:
        query["_id"] = {"$ne": exclude_id}
    if get_db()[COLLECTION].find_one(query):
        raise ConflictError("Parking space number already exists in this building")


def validate_parking_space(organization_id: str, parking_space_id: Optional[str]) -> Optional[dict]:
    """Resolve an optional parking space reference inside the organization."""
    if not parking_space_id:
        return None
    return find_in_org(COLLECTION, parking_space_id, organization_id, "Parking space")


def _set_vehicle_space(vehicle_id: Optional[str], parking_space_id: Optional[str]):
    oid = to_object_id(vehicle_id) if vehicle_id else None
    if oid is None:
        return
    get_db().vehicles.update_one(
        {"_id": oid},
        {"$set": {"parking_space_id": parking_space_id, "updated_at": utcnow()}},
    )


# -----------------------------------------------------
# CRUD
# -----------------------------------------------------
def create_parking_space(organization_id: str, data: dict) -> dict:
    if not data.get("space_number") or not data.get("space_type"):
        raise ValidationError("Space number and space type are required")

    find_in_org("buildings", data.get("building_id"), organization_id, "Building")
    if data.get("assigned_to"):
        find_in_org("tenants", data["assigned_to"], organization_id, "Tenant")
    if data.get("vehicle_id"):
        find_in_org("vehicles", data["vehicle_id"], organization_id, "Vehicle")

    space_number = data["space_number"].strip()
    _ensure_unique_number(data["building_id"], space_number)

    doc = dict(data, organization_id=organization_id, space_number=space_number)
    doc.setdefault("status", "available")
    doc.setdefault("assigned_to", None)
    doc.setdefault("vehicle_id", None)
    doc = insert_document(COLLECTION, doc)

    if doc.get("vehicle_id"):
        _set_vehicle_space(doc["vehicle_id"], str(doc["_id"]))

    logger.info(f"Parking space created: {doc['space_number']} (building {doc['building_id']})")
    return serialize_doc(doc)


def get_parking_space(organization_id: Optional[str], parking_space_id: str) -> dict:
    return serialize_doc(find_in_org(COLLECTION, parking_space_id, organization_id, "Parking space"))


def list_parking_spaces(
    organization_id: str,
    building_id: Optional[str] = None,
    status: Optional[str] = None,
    space_type: Optional[str] = None,
    assigned_to: Optional[str] = None,
    limit: int = 100,
) -> list:
    query = {"organization_id": organization_id}
    if building_id:
        query["building_id"] = building_id
    if status:
        query["status"] = status
    if space_type:
        query["space_type"] = space_type
    if assigned_to:
        query["assigned_to"] = assigned_to
    cursor = get_db()[COLLECTION].find(query).sort("space_number", 1).limit(limit)
    return serialize_docs(cursor)


def update_parking_space(organization_id: str, parking_space_id: str, changes: dict) -> dict:
    doc = find_in_org(COLLECTION, parking_space_id, organization_id, "Parking space")
    reject_nulls(changes, REQUIRED_FIELDS)

    building_id = changes.get("building_id", doc["building_id"])
    if building_id != doc["building_id"]:
        find_in_org("buildings", building_id, organization_id, "Building")

    space_number = changes.get("space_number", doc["space_number"])
    if building_id != doc["building_id"] or space_number != doc["space_number"]:
        _ensure_unique_number(building_id, space_number, exclude_id=doc["_id"])

    if changes.get("status") == "available" and doc.get("assigned_to"):
        raise ValidationError("Release the parking space before marking it available")

    return serialize_doc(update_document(COLLECTION, doc["_id"], changes))


def delete_parking_space(organization_id: str, parking_space_id: str) -> dict:
    """Soft delete: the space is taken out of service (status maintenance)."""
    doc = find_in_org(COLLECTION, parking_space_id, organization_id, "Parking space")
    if doc.get("assigned_to"):
        raise ConflictError("Parking space is assigned; release it first")
    logger.info(f"Parking space {parking_space_id} moved to maintenance (soft delete)")
    return serialize_doc(update_document(COLLECTION, doc["_id"], {"status": "maintenance"}))


# -----------------------------------------------------
# Assignment
# -----------------------------------------------------
def assign_parking_space(
    organization_id: str,
    parking_space_id: str,
    tenant_id: str,
    vehicle_id: Optional[str] = None,
) -> dict:
    doc = find_in_org(COLLECTION, parking_space_id, organization_id, "Parking space")
    if doc.get("status") == "maintenance":
        raise ValidationError("Parking space is under maintenance")
    if doc.get("space_type") == "visitor":
        raise ValidationError("Visitor spaces cannot be assigned to tenants")
    if doc.get("assigned_to"):
        raise ConflictError("Parking space is already assigned")

    find_in_org("tenants", tenant_id, organization_id, "Tenant")
    if vehicle_id:
        vehicle = find_in_org("vehicles", vehicle_id, organization_id, "Vehicle")
        if vehicle.get("tenant_id") and vehicle["tenant_id"] != tenant_id:
            raise ValidationError("Vehicle does not belong to this tenant")

    updated = update_document(COLLECTION, doc["_id"], {
        "assigned_to": tenant_id,
        "vehicle_id": vehicle_id,
        "status": "occupied",
        "assigned_at": utcnow(),
    })
    _set_vehicle_space(vehicle_id, parking_space_id)

    logger.info(f"Parking space {doc['space_number']} assigned to tenant {tenant_id}")
    return serialize_doc(updated)


def release_parking_space(organization_id: str, parking_space_id: str) -> dict:
    doc = find_in_org(COLLECTION, parking_space_id, organization_id, "Parking space")
    if not doc.get("assigned_to"):
        raise ValidationError("Parking space is not assigned")

    updated = update_document(COLLECTION, doc["_id"], {
        "assigned_to": None,
        "vehicle_id": None,
        "status": "available",
        "assigned_at": None,
    })
    _set_vehicle_space(doc.get("vehicle_id"), None)

    logger.info(f"Parking space {doc['space_number']} released by tenant {doc['assigned_to']}")
    return serialize_doc(updated)
