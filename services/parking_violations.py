# services/parking_violations.py

from typing import Optional

from core.errors import ValidationError
from core.logging_config import logger
from core.mongo_client import get_db, serialize_doc, serialize_docs
from core.utils import utcnow
from services.common import find_in_org, insert_document, update_document
from services.parking_spaces import validate_parking_space
from services.visitor_logs import normalize_plate


COLLECTION = "parking_violations"


def create_violation(organization_id: str, data: dict, reported_by: str) -> dict:
    reporter = find_in_org("users", reported_by, None, "Reporter")
    if reporter.get("organization_id") != organization_id and reporter.get("role") != "super_admin":
        raise ValidationError("Reporter does not belong to this organization")

    find_in_org("buildings", data.get("building_id"), organization_id, "Building")
    validate_parking_space(organization_id, data.get("parking_space_id"))

    if data.get("severity") == "fine" and not data.get("fine_amount"):
        raise ValidationError("Fine amount is required for fine violations")

    doc = dict(data, organization_id=organization_id)
    if data.get("vehicle_id"):
        vehicle = find_in_org("vehicles", data["vehicle_id"], organization_id, "Vehicle")
        doc["plate_number"] = vehicle.get("plate_number")
    else:
        doc["plate_number"] = normalize_plate(data.get("plate_number"))
    if not doc["plate_number"]:
        raise ValidationError("Vehicle or plate number is required")

    doc.update({
        "reported_by": reported_by,
        "status": "reported",
        "resolved_at": None,
        "resolved_by": None,
    })
    doc = insert_document(COLLECTION, doc)
    logger.info(f"Parking violation reported: {doc['plate_number']} ({doc['violation_type']}, {doc.get('severity')})")
    return serialize_doc(doc)


def get_violation(organization_id: Optional[str], violation_id: str) -> dict:
    return serialize_doc(find_in_org(COLLECTION, violation_id, organization_id, "Violation"))


def list_violations(
    organization_id: str,
    building_id: Optional[str] = None,
    status: Optional[str] = None,
    plate_number: Optional[str] = None,
    limit: int = 100,
) -> list:
    query = {"organization_id": organization_id}
    if building_id:
        query["building_id"] = building_id
    if status:
        query["status"] = status
    if plate_number:
        query["plate_number"] = normalize_plate(plate_number)
    cursor = get_db()[COLLECTION].find(query).sort("created_at", -1).limit(limit)
    return serialize_docs(cursor)


def resolve_violation(organization_id: str, violation_id: str, resolved_by: str, notes: Optional[str] = None) -> dict:
    doc = find_in_org(COLLECTION, violation_id, organization_id, "Violation")
    if doc.get("status") == "resolved":
        raise ValidationError("Violation is already resolved")

    return serialize_doc(update_document(COLLECTION, doc["_id"], {
        "status": "resolved",
        "resolved_at": utcnow(),
        "resolved_by": resolved_by,
        "resolution_notes": notes,
    }))


def appeal_violation(organization_id: str, violation_id: str, reason: str) -> dict:
    doc = find_in_org(COLLECTION, violation_id, organization_id, "Violation")
    if doc.get("status") != "reported":
        raise ValidationError("Only reported violations can be appealed")

    return serialize_doc(update_document(COLLECTION, doc["_id"], {
        "status": "appealed",
        "appeal_reason": reason,
        "appealed_at": utcnow(),
    }))
