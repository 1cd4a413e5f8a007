# models/work_order.py

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field
from models.enums import WorkOrderCategory, Priority, WorkOrderStatus


class WorkOrderCreate(BaseModel):
    building_id: str
    unit_id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[WorkOrderCategory] = None
    priority: Priority = Priority.medium
    assigned_to: Optional[str] = None
    estimated_cost: Optional[float] = Field(None, ge=0)
    scheduled_date: Optional[datetime] = None
    scheduled_window: Optional[str] = Field(None, description="e.g. '09:00-12:00'")
    notes: Optional[str] = None


class WorkOrderUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[WorkOrderCategory] = None
    priority: Optional[Priority] = None
    status: Optional[WorkOrderStatus] = None
    assigned_to: Optional[str] = None
    estimated_cost: Optional[float] = Field(None, ge=0)
    actual_cost: Optional[float] = Field(None, ge=0)
    scheduled_date: Optional[datetime] = None
    scheduled_window: Optional[str] = None
    notes: Optional[str] = None


class WorkOrderAssign(BaseModel):
    assigned_to: str
