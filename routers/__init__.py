# routers/__init__.py

from fastapi import APIRouter

from .auth import router as auth_router
from .organizations import router as organizations_router
from .buildings import router as buildings_router
from .units import router as units_router
from .tenants import router as tenants_router
from .leases import router as leases_router
from .invoices import router as invoices_router
from .payments import router as payments_router
from .work_orders import router as work_orders_router
from .complaints import router as complaints_router
from .visitor_logs import router as visitor_logs_router
from .vehicles import router as vehicles_router
from .parking_spaces import router as parking_spaces_router
from .parking_violations import router as parking_violations_router
from .subscriptions import router as subscriptions_router
from .settings import router as settings_router
from .webhooks import router as webhooks_router


# Everything mounted under /api
api_router = APIRouter()

for _router in (
    auth_router,
    organizations_router,
    buildings_router,
    units_router,
    tenants_router,
    leases_router,
    invoices_router,
    payments_router,
    work_orders_router,
    complaints_router,
    visitor_logs_router,
    vehicles_router,
    parking_spaces_router,
    parking_violations_router,
    subscriptions_router,
    settings_router,
    webhooks_router,
):
    api_router.include_router(_router)

__all__ = ["api_router"]
