# routers/work_orders.py

from fastapi import APIRouter, Depends, Query
from typing import Optional
from pymongo.errors import PyMongoError

from dependencies.auth import get_current_user, CurrentUser
from core.errors import handle_db_error
from core.permission_helpers import requires_permission, resolve_organization_id
from core.utils import sanitize
from models.work_order import WorkOrderCreate, WorkOrderUpdate, WorkOrderAssign
from services import work_orders as work_orders_service


router = APIRouter(
    prefix="/work-orders",
    tags=["Work Orders"],
)


def _technician_scope(user: CurrentUser) -> Optional[str]:
    """Technicians are limited to work orders assigned to them."""
    return user.id if user.role == "technician" else None


@router.get("", summary="List Work Orders", dependencies=[Depends(requires_permission("work_orders:read"))])
def list_work_orders(
    building_id: Optional[str] = None,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    assigned_to: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    assigned_to = _technician_scope(current_user) or assigned_to
    try:
        data = work_orders_service.list_work_orders(
            org_id,
            building_id=building_id,
            status=status,
            priority=priority,
            assigned_to=assigned_to,
            limit=limit,
        )
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to fetch work orders")
    return {"success": True, "data": data}


@router.post("", summary="Create Work Order", status_code=201, dependencies=[Depends(requires_permission("work_orders:create"))])
def create_work_order(
    payload: WorkOrderCreate,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = work_orders_service.create_work_order(org_id, sanitize(payload.model_dump()), created_by=current_user.id)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to create work order")
    return {"success": True, "data": data}


@router.get("/{work_order_id}", summary="Get Work Order", dependencies=[Depends(requires_permission("work_orders:read"))])
def get_work_order(work_order_id: str, organization_id: Optional[str] = None, current_user: CurrentUser = Depends(get_current_user)):
    org_id = resolve_organization_id(current_user, organization_id)
    data = work_orders_service.get_work_order(org_id, work_order_id, assigned_to=_technician_scope(current_user))
    return {"success": True, "data": data}


@router.patch("/{work_order_id}", summary="Update Work Order", dependencies=[Depends(requires_permission("work_orders:update"))])
def update_work_order(
    work_order_id: str,
    payload: WorkOrderUpdate,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    changes = sanitize(payload.model_dump(exclude_unset=True))

    technician_id = _technician_scope(current_user)
    if technician_id:
        # 404s when not theirs
        work_orders_service.get_work_order(org_id, work_order_id, assigned_to=technician_id)
        changes.pop("assigned_to", None)

    try:
        data = work_orders_service.update_work_order(org_id, work_order_id, changes)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to update work order")
    return {"success": True, "data": data}


@router.post("/{work_order_id}/assign", summary="Assign Work Order", dependencies=[Depends(requires_permission("work_orders:assign"))])
def assign_work_order(
    work_order_id: str,
    payload: WorkOrderAssign,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = work_orders_service.assign_work_order(org_id, work_order_id, payload.assigned_to)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to assign work order")
    return {"success": True, "data": data}
