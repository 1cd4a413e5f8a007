from typing import Optional, List
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel

from core.security import decode_access_token
from core.permissions import ROLE_PERMISSIONS  # role → permission map


bearer_scheme = HTTPBearer()


# ============================================================
# Current User Model (identity carried in the access token)
# ============================================================
class CurrentUser(BaseModel):
    id: str
    email: str
    role: str

    full_name: Optional[str] = None
    organization_id: Optional[str] = None
    tenant_id: Optional[str] = None      # set for role "tenant"

    # per-user permission overrides
    permissions: Optional[List[str]] = []


# ============================================================
# AUTH DECODING (validates JWT issued by /auth/login)
# ============================================================
def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> CurrentUser:

    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired authentication token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    claims = decode_access_token(credentials.credentials)
    if not claims:
        raise unauthorized

    user_id = claims.get("sub")
    email = claims.get("email")
    if not user_id or not email:
        raise unauthorized

    role = claims.get("role", "tenant")
    if role not in ROLE_PERMISSIONS:
        role = "tenant"

    extended_permissions = claims.get("permissions", [])
    if not isinstance(extended_permissions, list):
        extended_permissions = []

    return CurrentUser(
        id=user_id,
        email=email,
        role=role,
        full_name=claims.get("full_name"),
        organization_id=claims.get("organization_id"),
        tenant_id=claims.get("tenant_id"),
        permissions=extended_permissions,
    )
