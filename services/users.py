# services/users.py

from typing import Optional

from core.errors import ConflictError, ValidationError
from core.logging_config import logger
from core.mongo_client import get_db, serialize_doc
from core.permissions import ROLE_PERMISSIONS
from core.security import hash_password, verify_password
from services.common import find_in_org, insert_document


COLLECTION = "users"


def public_user(doc: dict) -> dict:
    user = serialize_doc(doc)
    user.pop("password_hash", None)
    return user


def create_user(data: dict) -> dict:
    email = data["email"].strip().lower()
    role = data.get("role")

    if role not in ROLE_PERMISSIONS:
        raise ValidationError(f"Unknown role '{role}'")
    if role != "super_admin" and not data.get("organization_id"):
        raise ValidationError("Organization is required for this role")
    if data.get("organization_id"):
        find_in_org("organizations", data["organization_id"], None, "Organization")
    if role == "tenant":
        if not data.get("tenant_id"):
            raise ValidationError("Tenant users must be linked to a tenant record")
        find_in_org("tenants", data["tenant_id"], data["organization_id"], "Tenant")

    if get_db()[COLLECTION].find_one({"email": email}):
        raise ConflictError("A user with this email already exists")

    doc = {
        "email": email,
        "password_hash": hash_password(data["password"]),
        "full_name": data.get("full_name"),
        "role": role,
        "organization_id": data.get("organization_id"),
        "tenant_id": data.get("tenant_id"),
        "permissions": data.get("permissions") or [],
        "is_active": True,
    }
    doc = insert_document(COLLECTION, doc)
    logger.info(f"User created: {email} ({role})")
    return public_user(doc)


def authenticate(email: str, password: str) -> Optional[dict]:
    """Returns the stored user when the credentials match an active account."""
    doc = get_db()[COLLECTION].find_one({"email": email.strip().lower()})
    if not doc or not doc.get("is_active", True):
        return None
    if not verify_password(password, doc.get("password_hash") or ""):
        return None
    return doc


def token_claims(doc: dict) -> dict:
    return {
        "sub": str(doc["_id"]),
        "email": doc["email"],
        "role": doc["role"],
        "full_name": doc.get("full_name"),
        "organization_id": doc.get("organization_id"),
        "tenant_id": doc.get("tenant_id"),
        "permissions": doc.get("permissions") or [],
    }
