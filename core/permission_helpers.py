from fastapi import Depends, HTTPException
from typing import Optional
from dependencies.auth import get_current_user, CurrentUser
from core.permissions import ROLE_PERMISSIONS


# -----------------------------------------------------
# Collect effective permissions:
#   • role-based permissions
#   • user-specific permission overrides carried in the token
# -----------------------------------------------------
def get_effective_permissions(user: CurrentUser) -> set:
    # Super admin = master key
    if user.role == "super_admin":
        return {"*"}

    role_perms = set(ROLE_PERMISSIONS.get(user.role, []))

    user_overrides = set()
    raw = getattr(user, "permissions", None)

    if isinstance(raw, list):
        user_overrides = set(raw)

    return role_perms.union(user_overrides)


# -----------------------------------------------------
# Permission evaluation
# -----------------------------------------------------
def has_permission(user: CurrentUser, permission: str) -> bool:
    effective = get_effective_permissions(user)

    # Wildcard grants everything
    if "*" in effective:
        return True

    return permission in effective


# -----------------------------------------------------
# FastAPI dependency wrapper
# -----------------------------------------------------
def requires_permission(permission: str):
    """
    Usage:
        @router.post("", dependencies=[Depends(requires_permission("leases:create"))])
    """

    def dependency(current_user: CurrentUser = Depends(get_current_user)):
        if not has_permission(current_user, permission):
            raise HTTPException(
                status_code=403,
                detail=f"Insufficient permissions: '{permission}' required"
            )
        return current_user

    return dependency


# ============================================================
# ORGANIZATION-LEVEL HELPERS
# ============================================================

def is_admin(user: CurrentUser) -> bool:
    """Platform admin (bypasses organization scoping)."""
    return user.role == "super_admin"


def require_admin(user: CurrentUser):
    """Raise exception if user is not super_admin."""
    if not is_admin(user):
        raise HTTPException(
            status_code=403,
            detail="Super admin role required"
        )


def is_tenant_user(user: CurrentUser) -> bool:
    return user.role == "tenant"


def resolve_organization_id(user: CurrentUser, requested: Optional[str] = None) -> str:
    """
    Pick the organization a request operates on.
    Super admins may address any organization; everyone else is pinned to their own.
    """
    if is_admin(user):
        org_id = requested or user.organization_id
    else:
        if requested and requested != user.organization_id:
            raise HTTPException(
                status_code=403,
                detail="You do not have access to this organization"
            )
        org_id = user.organization_id

    if not org_id:
        raise HTTPException(
            status_code=403,
            detail="Organization context is required"
        )
    return org_id


def require_tenant_link(user: CurrentUser) -> str:
    """Tenant-role users must be linked to a tenant record."""
    if not user.tenant_id:
        raise HTTPException(
            status_code=403,
            detail="User is not linked to a tenant record"
        )
    return user.tenant_id
