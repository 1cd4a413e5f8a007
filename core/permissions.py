# ============================================
# CENTRALIZED ROLE → PERMISSIONS MAP
# ============================================
# Permission strings are "<module>:<action>".
# Organization scoping is applied separately (see core.permission_helpers).

_READ_ALL = [
    "organizations:read",
    "buildings:read", "units:read", "tenants:read", "leases:read",
    "invoices:read", "payments:read", "work_orders:read", "complaints:read",
    "visitor_logs:read", "vehicles:read", "parking:read", "parking_spaces:read",
    "subscriptions:read", "settings:read", "users:read", "reports:read",
]

ROLE_PERMISSIONS = {

    # =====================================================
    # SUPER ADMIN: Full access to everything
    # =====================================================
    "super_admin": ["*"],


    # =====================================================
    # ORGANIZATION ADMIN: everything inside own org
    # =====================================================
    "org_admin": _READ_ALL + [
        "organizations:update",
        "users:create", "users:update",
        "buildings:create", "buildings:update", "buildings:delete",
        "units:create", "units:update", "units:delete",
        "tenants:create", "tenants:update", "tenants:delete",
        "leases:create", "leases:update", "leases:terminate",
        "invoices:create", "invoices:update", "invoices:cancel",
        "payments:create", "payments:update", "payments:refund", "payments:reconcile",
        "work_orders:create", "work_orders:update", "work_orders:assign",
        "complaints:create", "complaints:update", "complaints:convert",
        "visitor_logs:create", "visitor_logs:update",
        "vehicles:create", "vehicles:update", "vehicles:delete",
        "parking:create", "parking:update",
        "parking_spaces:create", "parking_spaces:update", "parking_spaces:delete", "parking_spaces:assign",
    ],


    # =====================================================
    # BUILDING MANAGER: day-to-day property operations
    # =====================================================
    "building_manager": [
        "buildings:read", "buildings:update",
        "units:read", "units:create", "units:update",
        "tenants:read", "tenants:create", "tenants:update",
        "leases:read", "leases:create", "leases:update", "leases:terminate",
        "invoices:read", "payments:read",
        "work_orders:read", "work_orders:create", "work_orders:update", "work_orders:assign",
        "complaints:read", "complaints:create", "complaints:update", "complaints:convert",
        "visitor_logs:read", "visitor_logs:create", "visitor_logs:update",
        "vehicles:read", "vehicles:create", "vehicles:update",
        "parking:read", "parking:create", "parking:update",
        "parking_spaces:read", "parking_spaces:create", "parking_spaces:update", "parking_spaces:assign",
    ],


    # =====================================================
    # FACILITY MANAGER: maintenance only
    # =====================================================
    "facility_manager": [
        "buildings:read", "units:read",
        "work_orders:read", "work_orders:create", "work_orders:update", "work_orders:assign",
        "complaints:read", "complaints:update", "complaints:convert",
    ],


    # =====================================================
    # ACCOUNTANT: money in, money out
    # =====================================================
    "accountant": [
        "tenants:read", "leases:read", "units:read", "buildings:read",
        "invoices:read", "invoices:create", "invoices:update", "invoices:cancel",
        "payments:read", "payments:create", "payments:update",
        "payments:refund", "payments:reconcile",
        "reports:read",
    ],


    # =====================================================
    # SECURITY: gate, visitors and parking
    # =====================================================
    "security": [
        "buildings:read", "units:read", "tenants:read",
        "visitor_logs:read", "visitor_logs:create", "visitor_logs:update",
        "vehicles:read", "vehicles:create", "vehicles:update",
        "parking:read", "parking:create", "parking:update",
        "parking_spaces:read",
    ],


    # =====================================================
    # TECHNICIAN: assigned work orders only
    # =====================================================
    "technician": [
        "work_orders:read", "work_orders:update",
    ],


    # =====================================================
    # TENANT: own records only (filtered in routers)
    # =====================================================
    "tenant": [
        "leases:read", "leases:accept_terms",
        "invoices:read", "payments:read",
        "complaints:read", "complaints:create",
    ],


    # =====================================================
    # AUDITOR: read-only across own org
    # =====================================================
    "auditor": list(_READ_ALL),
}


ROLES = list(ROLE_PERMISSIONS.keys())
