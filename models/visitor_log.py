# models/visitor_log.py

from typing import Optional
from datetime import datetime
from pydantic import BaseModel
from models.enums import VisitPurpose


class VisitorLogCreate(BaseModel):
    building_id: str
    visitor_name: Optional[str] = None
    visitor_phone: Optional[str] = None
    visitor_id_number: Optional[str] = None
    host_tenant_id: Optional[str] = None
    host_unit_id: Optional[str] = None
    purpose: Optional[VisitPurpose] = None
    vehicle_plate_number: Optional[str] = None
    parking_space_id: Optional[str] = None
    entry_time: Optional[datetime] = None
    notes: Optional[str] = None


class VisitorExit(BaseModel):
    exit_time: Optional[datetime] = None
