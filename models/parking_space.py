# models/parking_space.py

from typing import Optional
from pydantic import BaseModel, Field
from models.enums import ParkingSpaceType, ParkingSpaceStatus


class ParkingSpaceCreate(BaseModel):
    building_id: str
    space_number: str = Field(..., min_length=1, description="e.g. 'P-001'")
    space_type: ParkingSpaceType
    status: ParkingSpaceStatus = ParkingSpaceStatus.available
    assigned_to: Optional[str] = Field(None, description="Tenant holding the space")
    vehicle_id: Optional[str] = None
    notes: Optional[str] = None


class ParkingSpaceUpdate(BaseModel):
    building_id: Optional[str] = None
    space_number: Optional[str] = None
    space_type: Optional[ParkingSpaceType] = None
    status: Optional[ParkingSpaceStatus] = None
    notes: Optional[str] = None


class ParkingSpaceAssign(BaseModel):
    tenant_id: str
    vehicle_id: Optional[str] = None
