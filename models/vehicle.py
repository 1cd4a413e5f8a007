# models/vehicle.py

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field
from models.enums import VehicleStatus


class VehicleCreate(BaseModel):
    tenant_id: Optional[str] = None
    plate_number: str = Field(..., min_length=1)
    make: Optional[str] = None
    model: Optional[str] = None
    color: Optional[str] = None
    parking_space_id: Optional[str] = None
    status: VehicleStatus = VehicleStatus.active
    is_temporary: bool = False
    visitor_log_id: Optional[str] = None
    expires_at: Optional[datetime] = None
    notes: Optional[str] = None


class VehicleUpdate(BaseModel):
    tenant_id: Optional[str] = None
    plate_number: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None
    color: Optional[str] = None
    parking_space_id: Optional[str] = None
    status: Optional[VehicleStatus] = None
    expires_at: Optional[datetime] = None
    notes: Optional[str] = None
