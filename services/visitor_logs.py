# services/visitor_logs.py

from datetime import datetime
from typing import Optional

from core.errors import ValidationError
from core.logging_config import logger
from core.mongo_client import get_db, serialize_doc, serialize_docs
from core.utils import utcnow
from services.common import find_in_org, insert_document, update_document
from services.parking_spaces import validate_parking_space


COLLECTION = "visitor_logs"


def normalize_plate(plate: Optional[str]) -> Optional[str]:
    if not plate:
        return None
    return "".join(plate.split()).upper()


def create_visitor_log(organization_id: str, data: dict, logged_by: Optional[str]) -> dict:
    if not data.get("visitor_name") or not data.get("host_tenant_id") or not data.get("purpose") or not logged_by:
        raise ValidationError("Visitor name, host tenant, purpose, and logged by are required")

    find_in_org("buildings", data.get("building_id"), organization_id, "Building")
    find_in_org("tenants", data["host_tenant_id"], organization_id, "Tenant")
    if data.get("host_unit_id"):
        unit = find_in_org("units", data["host_unit_id"], organization_id, "Unit")
        if unit.get("building_id") != data["building_id"]:
            raise ValidationError("Host unit does not belong to this building")
    validate_parking_space(organization_id, data.get("parking_space_id"))

    doc = dict(data, organization_id=organization_id)
    doc["vehicle_plate_number"] = normalize_plate(data.get("vehicle_plate_number"))
    doc["entry_time"] = data.get("entry_time") or utcnow()
    doc["exit_time"] = None
    doc["logged_by"] = logged_by
    doc = insert_document(COLLECTION, doc)

    logger.info(f"Visitor logged in: {doc['visitor_name']} → tenant {doc['host_tenant_id']}")
    return serialize_doc(doc)


def record_visitor_exit(organization_id: str, log_id: str, exit_time: Optional[datetime] = None) -> dict:
    doc = find_in_org(COLLECTION, log_id, organization_id, "Visitor log")
    if doc.get("exit_time") is not None:
        raise ValidationError("Visitor has already exited")

    exit_time = exit_time or utcnow()
    if exit_time < doc["entry_time"]:
        raise ValidationError("Exit time cannot be before entry time")

    return serialize_doc(update_document(COLLECTION, doc["_id"], {"exit_time": exit_time}))


def get_visitor_log(organization_id: Optional[str], log_id: str) -> dict:
    return serialize_doc(find_in_org(COLLECTION, log_id, organization_id, "Visitor log"))


def list_visitor_logs(
    organization_id: str,
    building_id: Optional[str] = None,
    host_tenant_id: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    active_only: bool = False,
    limit: int = 100,
) -> list:
    query = {"organization_id": organization_id}
    if building_id:
        query["building_id"] = building_id
    if host_tenant_id:
        query["host_tenant_id"] = host_tenant_id
    if start or end:
        query["entry_time"] = {}
        if start:
            query["entry_time"]["$gte"] = start
        if end:
            query["entry_time"]["$lte"] = end
    if active_only:
        query["exit_time"] = None
    cursor = get_db()[COLLECTION].find(query).sort("entry_time", -1).limit(limit)
    return serialize_docs(cursor)
