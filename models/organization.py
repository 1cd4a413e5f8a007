# models/organization.py

from typing import Optional
from pydantic import BaseModel, Field, field_validator
from models.enums import OrganizationStatus


class ContactInfo(BaseModel):
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class PaymentReminderSettings(BaseModel):
    """When tenants are reminded about upcoming and overdue invoices."""
    enabled: bool = True
    days_before_due: int = Field(3, ge=0, le=60)
    days_after_due: int = Field(1, ge=0, le=60)


# -------------------------------------------------
# Create
# -------------------------------------------------
class OrganizationCreate(BaseModel):
    name: str = Field(..., min_length=1)
    code: str = Field(..., min_length=2, max_length=32, description="Short unique code, e.g. ACME")
    contact_info: Optional[ContactInfo] = None
    status: OrganizationStatus = OrganizationStatus.active
    payment_reminder_settings: Optional[PaymentReminderSettings] = None

    @field_validator("code", mode="before")
    @classmethod
    def normalize_code(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v


# -------------------------------------------------
# Update (PATCH)
# -------------------------------------------------
class OrganizationUpdate(BaseModel):
    name: Optional[str] = None
    contact_info: Optional[ContactInfo] = None
    status: Optional[OrganizationStatus] = None
    payment_reminder_settings: Optional[PaymentReminderSettings] = None
