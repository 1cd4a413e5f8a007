# models/complaint.py

from typing import Optional
from pydantic import BaseModel, Field
from models.enums import (
    ComplaintType,
    ComplaintCategory,
    MaintenanceCategory,
    Urgency,
    Priority,
    ComplaintStatus,
)


class ComplaintCreate(BaseModel):
    tenant_id: Optional[str] = None   # tenants are pinned to their own record
    unit_id: Optional[str] = None
    building_id: Optional[str] = None
    type: ComplaintType = ComplaintType.complaint
    category: ComplaintCategory = ComplaintCategory.other
    maintenance_category: Optional[MaintenanceCategory] = None
    urgency: Optional[Urgency] = None
    priority: Priority = Priority.medium
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)


class ComplaintUpdate(BaseModel):
    category: Optional[ComplaintCategory] = None
    maintenance_category: Optional[MaintenanceCategory] = None
    urgency: Optional[Urgency] = None
    priority: Optional[Priority] = None
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[ComplaintStatus] = None
    assigned_to: Optional[str] = None
    resolution_notes: Optional[str] = None


class ComplaintConvert(BaseModel):
    """Optional overrides when turning a complaint into a work order."""
    assigned_to: Optional[str] = None
    estimated_cost: Optional[float] = Field(None, ge=0)
