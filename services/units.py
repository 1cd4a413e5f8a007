# services/units.py

from typing import Optional, Tuple

from core.errors import ConflictError
from core.logging_config import logger
from core.mongo_client import get_db, serialize_doc, serialize_docs, to_object_id
from core.utils import utcnow
from services.common import find_in_org, insert_document, reject_nulls, update_document


COLLECTION = "units"
REQUIRED_FIELDS = ("unit_number", "unit_type", "status")


def _ensure_unique_number(organization_id: str, building_id: str, unit_number: str, exclude_id=None):
    query = {
        "organization_id": organization_id,
        "building_id": building_id,
        "unit_number": unit_number,
    }
    if exclude_id is not None:
        query["_id"] = {"$ne": exclude_id}
    if get_db()[COLLECTION].find_one(query):
        raise ConflictError(f'Unit number "{unit_number}" already exists in this building')


def resolve_unit_rent(unit: dict) -> Tuple[Optional[float], Optional[str]]:
    """
    Effective rent for a unit and where it came from.

    Order: flat override, per-sqm override × area, unit rent.
    Returns (None, None) when nothing usable is set.
    """
    flat = unit.get("flat_rent_override")
    if flat:
        return round(float(flat), 2), "unit_flat"

    rate = unit.get("rate_per_sqm_override")
    area = unit.get("area")
    if rate and area:
        return round(float(rate) * float(area), 2), "unit_rate"

    rent = unit.get("rent_amount")
    if rent:
        return round(float(rent), 2), "unit_rent"

    return None, None


def create_unit(organization_id: str, data: dict) -> dict:
    # Building must exist in the same organization
    find_in_org("buildings", data["building_id"], organization_id, "Building")
    _ensure_unique_number(organization_id, data["building_id"], data["unit_number"])

    doc = dict(data, organization_id=organization_id)
    doc.setdefault("status", "available")
    doc = insert_document(COLLECTION, doc)
    logger.info(f"Unit created: {doc['unit_number']} in building {doc['building_id']}")
    return serialize_doc(doc)


def get_unit(organization_id: Optional[str], unit_id: str) -> dict:
    return serialize_doc(find_in_org(COLLECTION, unit_id, organization_id, "Unit"))


def list_units(
    organization_id: str,
    building_id: Optional[str] = None,
    status: Optional[str] = None,
    unit_type: Optional[str] = None,
    limit: int = 200,
) -> list:
    query = {"organization_id": organization_id}
    if building_id:
        query["building_id"] = building_id
    if status:
        query["status"] = status
    if unit_type:
        query["unit_type"] = unit_type
    cursor = get_db()[COLLECTION].find(query).sort("unit_number", 1).limit(limit)
    return serialize_docs(cursor)


def update_unit(organization_id: str, unit_id: str, changes: dict) -> dict:
    doc = find_in_org(COLLECTION, unit_id, organization_id, "Unit")
    reject_nulls(changes, REQUIRED_FIELDS)

    new_number = changes.get("unit_number")
    if new_number and new_number != doc.get("unit_number"):
        _ensure_unique_number(organization_id, doc["building_id"], new_number, exclude_id=doc["_id"])

    return serialize_doc(update_document(COLLECTION, doc["_id"], changes))


def delete_unit(organization_id: str, unit_id: str) -> dict:
    """Soft delete: the unit is taken out of service (status maintenance)."""
    doc = find_in_org(COLLECTION, unit_id, organization_id, "Unit")
    logger.info(f"Unit {unit_id} moved to maintenance (soft delete)")
    return serialize_doc(update_document(COLLECTION, doc["_id"], {"status": "maintenance"}))


def update_unit_status(unit_id: str, status: str) -> bool:
    """Raw status write used by lease side effects. Returns False when the unit is missing."""
    oid = to_object_id(unit_id)
    if oid is None:
        return False
    result = get_db()[COLLECTION].update_one(
        {"_id": oid},
        {"$set": {"status": status, "updated_at": utcnow()}},
    )
    return result.matched_count > 0
