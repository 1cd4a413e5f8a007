# routers/visitor_logs.py

from datetime import datetime
from fastapi import APIRouter, Depends, Query
from typing import Optional
from pymongo.errors import PyMongoError

from dependencies.auth import get_current_user, CurrentUser
from core.errors import handle_db_error
from core.permission_helpers import requires_permission, resolve_organization_id
from core.utils import sanitize, to_naive_utc
from models.visitor_log import VisitorLogCreate, VisitorExit
from services import visitor_logs as visitor_logs_service


router = APIRouter(
    prefix="/visitor-logs",
    tags=["Visitor Logs"],
)


@router.get(
    "",
    summary="List Visitor Logs",
    description="`active_only=true` returns visitors still inside (no exit time).",
    dependencies=[Depends(requires_permission("visitor_logs:read"))],
)
def list_visitor_logs(
    building_id: Optional[str] = None,
    host_tenant_id: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    active_only: bool = False,
    limit: int = Query(100, ge=1, le=1000),
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = visitor_logs_service.list_visitor_logs(
            org_id,
            building_id=building_id,
            host_tenant_id=host_tenant_id,
            start=to_naive_utc(start),
            end=to_naive_utc(end),
            active_only=active_only,
            limit=limit,
        )
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to fetch visitor logs")
    return {"success": True, "data": data}


@router.post("", summary="Log Visitor Entry", status_code=201, dependencies=[Depends(requires_permission("visitor_logs:create"))])
def create_visitor_log(
    payload: VisitorLogCreate,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    try:
        data = visitor_logs_service.create_visitor_log(org_id, sanitize(payload.model_dump()), logged_by=current_user.id)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to log visitor")
    return {"success": True, "data": data}


@router.get("/{log_id}", summary="Get Visitor Log", dependencies=[Depends(requires_permission("visitor_logs:read"))])
def get_visitor_log(log_id: str, organization_id: Optional[str] = None, current_user: CurrentUser = Depends(get_current_user)):
    org_id = resolve_organization_id(current_user, organization_id)
    return {"success": True, "data": visitor_logs_service.get_visitor_log(org_id, log_id)}


@router.post("/{log_id}/exit", summary="Record Visitor Exit", dependencies=[Depends(requires_permission("visitor_logs:update"))])
def record_visitor_exit(
    log_id: str,
    payload: Optional[VisitorExit] = None,
    organization_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    org_id = resolve_organization_id(current_user, organization_id)
    exit_time = to_naive_utc(payload.exit_time) if payload else None
    try:
        data = visitor_logs_service.record_visitor_exit(org_id, log_id, exit_time=exit_time)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to record visitor exit")
    return {"success": True, "data": data}
