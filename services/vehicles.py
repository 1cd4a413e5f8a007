# services/vehicles.py

from typing import Optional

from core.errors import ConflictError
from core.logging_config import logger
from core.mongo_client import get_db, serialize_doc, serialize_docs
from services.common import find_in_org, insert_document, reject_nulls, update_document
from services.parking_spaces import validate_parking_space
from services.visitor_logs import normalize_plate


COLLECTION = "vehicles"
REQUIRED_FIELDS = ("plate_number", "status")


def _ensure_unique_plate(organization_id: str, plate: str, exclude_id=None):
    query = {"organization_id": organization_id, "plate_number": plate}
    if exclude_id is not None:
        query["_id"] = {"$ne": exclude_id}
    if get_db()[COLLECTION].find_one(query):
        raise ConflictError("Plate number already exists in this organization")


def create_vehicle(organization_id: str, data: dict) -> dict:
    plate = normalize_plate(data.get("plate_number"))
    _ensure_unique_plate(organization_id, plate)

    if data.get("tenant_id"):
        find_in_org("tenants", data["tenant_id"], organization_id, "Tenant")
    if data.get("visitor_log_id"):
        find_in_org("visitor_logs", data["visitor_log_id"], organization_id, "Visitor log")
    validate_parking_space(organization_id, data.get("parking_space_id"))

    doc = dict(data, organization_id=organization_id, plate_number=plate)
    doc.setdefault("status", "active")
    doc = insert_document(COLLECTION, doc)
    logger.info(f"Vehicle registered: {plate}")
    return serialize_doc(doc)


def get_vehicle(organization_id: Optional[str], vehicle_id: str) -> dict:
    return serialize_doc(find_in_org(COLLECTION, vehicle_id, organization_id, "Vehicle"))


def find_vehicle_by_plate(organization_id: str, plate_number: str) -> Optional[dict]:
    doc = get_db()[COLLECTION].find_one({
        "organization_id": organization_id,
        "plate_number": normalize_plate(plate_number),
    })
    return serialize_doc(doc)


def list_vehicles(
    organization_id: str,
    tenant_id: Optional[str] = None,
    status: Optional[str] = None,
    is_temporary: Optional[bool] = None,
    limit: int = 100,
) -> list:
    query = {"organization_id": organization_id}
    if tenant_id:
        query["tenant_id"] = tenant_id
    if status:
        query["status"] = status
    if is_temporary is not None:
        query["is_temporary"] = is_temporary
    cursor = get_db()[COLLECTION].find(query).sort("plate_number", 1).limit(limit)
    return serialize_docs(cursor)


def update_vehicle(organization_id: str, vehicle_id: str, changes: dict) -> dict:
    doc = find_in_org(COLLECTION, vehicle_id, organization_id, "Vehicle")
    reject_nulls(changes, REQUIRED_FIELDS)
    changes = dict(changes)

    if changes.get("plate_number"):
        plate = normalize_plate(changes["plate_number"])
        if plate != doc.get("plate_number"):
            _ensure_unique_plate(organization_id, plate, exclude_id=doc["_id"])
        changes["plate_number"] = plate

    if changes.get("tenant_id"):
        find_in_org("tenants", changes["tenant_id"], organization_id, "Tenant")
    if changes.get("parking_space_id") and changes["parking_space_id"] != doc.get("parking_space_id"):
        validate_parking_space(organization_id, changes["parking_space_id"])

    return serialize_doc(update_document(COLLECTION, doc["_id"], changes))


def delete_vehicle(organization_id: str, vehicle_id: str) -> dict:
    doc = find_in_org(COLLECTION, vehicle_id, organization_id, "Vehicle")
    return serialize_doc(update_document(COLLECTION, doc["_id"], {"status": "inactive"}))
