# models/invoice.py

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field
from models.enums import InvoiceStatus, InvoiceItemType


class InvoiceItem(BaseModel):
    description: str = Field(..., min_length=1)
    amount: float
    type: InvoiceItemType = InvoiceItemType.rent


class InvoiceCreate(BaseModel):
    tenant_id: str
    unit_id: str
    lease_id: str
    issue_date: Optional[datetime] = None
    due_date: datetime
    period_start: datetime
    period_end: datetime
    items: List[InvoiceItem]
    tax: float = Field(0, ge=0)
    status: InvoiceStatus = InvoiceStatus.draft
    notes: Optional[str] = None


class InvoiceUpdate(BaseModel):
    """Only accepted while the invoice is still a draft."""
    due_date: Optional[datetime] = None
    period_start: Optional[datetime] = None
    period_end: Optional[datetime] = None
    items: Optional[List[InvoiceItem]] = None
    tax: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None


class InvoiceStatusUpdate(BaseModel):
    status: InvoiceStatus
