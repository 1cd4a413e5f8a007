# core/mongo_client.py

from typing import Optional
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import MongoClient, ASCENDING, DESCENDING
from pymongo.database import Database

from core.config import settings
from core.logging_config import logger


_client: Optional[MongoClient] = None


# ============================================================
# MongoDB Client Factory (lazy, process-wide)
# ============================================================

def get_mongo_client() -> MongoClient:
    """
    Returns the shared MongoClient, creating it on first use.
    pymongo pools connections internally, so one client per process is enough.
    """
    global _client
    if _client is None:
        logger.info("Connecting to MongoDB")
        _client = MongoClient(settings.MONGODB_URI, tz_aware=False)
    return _client


def get_db() -> Database:
    return get_mongo_client()[settings.MONGODB_DB]


def reset_client():
    """Drop the cached client (used by tests and on shutdown)."""
    global _client
    if _client is not None:
        try:
            _client.close()
        except Exception as e:
            logger.warning(f"Error closing MongoDB client: {e}")
    _client = None


# ============================================================
# Document helpers
# ============================================================

def to_object_id(value) -> Optional[ObjectId]:
    """Parse a string id. Returns None for malformed ids so callers can 404."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def serialize_doc(doc: Optional[dict]) -> Optional[dict]:
    """Convert a raw Mongo document into an API dict (`_id` → string `id`)."""
    if doc is None:
        return None
    out = dict(doc)
    if "_id" in out:
        out["id"] = str(out.pop("_id"))
    return out


def serialize_docs(docs) -> list:
    return [serialize_doc(d) for d in docs]


# ============================================================
# Indexes
# ============================================================

def ensure_indexes(db: Optional[Database] = None):
    """Create the indexes the application relies on. Safe to call repeatedly."""
    db = db if db is not None else get_db()

    db.organizations.create_index([("code", ASCENDING)], unique=True)
    db.users.create_index([("email", ASCENDING)], unique=True)

    db.buildings.create_index([("organization_id", ASCENDING), ("status", ASCENDING)])
    db.units.create_index(
        [("organization_id", ASCENDING), ("building_id", ASCENDING), ("unit_number", ASCENDING)],
        unique=True,
    )
    db.tenants.create_index([("organization_id", ASCENDING), ("primary_phone", ASCENDING)])

    db.leases.create_index([("organization_id", ASCENDING), ("unit_id", ASCENDING), ("status", ASCENDING)])
    db.leases.create_index([("organization_id", ASCENDING), ("tenant_id", ASCENDING)])
    db.leases.create_index([("status", ASCENDING), ("next_invoice_date", ASCENDING)])

    db.invoices.create_index([("organization_id", ASCENDING), ("invoice_number", ASCENDING)])
    db.invoices.create_index([("organization_id", ASCENDING), ("status", ASCENDING), ("due_date", ASCENDING)])
    db.invoices.create_index([("lease_id", ASCENDING), ("period_start", ASCENDING)])

    db.payments.create_index([("organization_id", ASCENDING), ("reference_number", ASCENDING)])
    db.payments.create_index([("organization_id", ASCENDING), ("reconciliation_status", ASCENDING)])
    db.payments.create_index([("invoice_id", ASCENDING)])

    db.work_orders.create_index([("organization_id", ASCENDING), ("status", ASCENDING)])
    db.complaints.create_index([("organization_id", ASCENDING), ("status", ASCENDING)])
    db.visitor_logs.create_index([("organization_id", ASCENDING), ("entry_time", DESCENDING)])
    db.vehicles.create_index([("organization_id", ASCENDING), ("plate_number", ASCENDING)])
    db.parking_spaces.create_index([("building_id", ASCENDING), ("space_number", ASCENDING)], unique=True)
    db.parking_spaces.create_index([("organization_id", ASCENDING), ("building_id", ASCENDING), ("status", ASCENDING)])
    db.parking_violations.create_index([("organization_id", ASCENDING), ("status", ASCENDING)])
    db.subscriptions.create_index([("organization_id", ASCENDING), ("status", ASCENDING)])
    db.payment_intents.create_index([("reference", ASCENDING)])

    logger.info("MongoDB indexes ensured")


# ============================================================
# Ping MongoDB for health checks
# ============================================================

def ping_mongo() -> dict:
    """Simple connectivity check plus per-collection counts."""
    try:
        db = get_db()
        db.command("ping")

        collections = ["organizations", "buildings", "units", "leases", "payments"]
        results = {}
        for name in collections:
            try:
                results[name] = {
                    "status": "ok",
                    "documents": db[name].estimated_document_count(),
                }
            except Exception as err:
                results[name] = {"status": "error", "detail": str(err)}

        return {
            "service": "MongoDB",
            "status": "ok",
            "collections": results,
        }

    except Exception as e:
        logger.error(f"MongoDB ping failed: {e}")
        return {
            "service": "MongoDB",
            "status": "error",
            "error": str(e),
        }
