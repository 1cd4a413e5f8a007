# models/parking_violation.py

from typing import Optional, List
from pydantic import BaseModel, Field
from models.enums import ViolationType, ViolationSeverity


class ViolationCreate(BaseModel):
    building_id: str
    vehicle_id: Optional[str] = None
    plate_number: Optional[str] = None
    parking_space_id: Optional[str] = None
    violation_type: ViolationType
    severity: ViolationSeverity = ViolationSeverity.warning
    fine_amount: Optional[float] = Field(None, ge=0)
    photos: List[str] = []
    description: Optional[str] = None


class ViolationResolve(BaseModel):
    resolution_notes: Optional[str] = None


class ViolationAppeal(BaseModel):
    reason: str = Field(..., min_length=1)
