# models/tenant.py

from typing import Optional
from pydantic import BaseModel, Field, field_validator
from models.enums import TenantLanguage, TenantStatus


class EmergencyContact(BaseModel):
    name: str
    phone: str
    relationship: Optional[str] = None


class TenantBase(BaseModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    primary_phone: str = Field(..., min_length=5)
    email: Optional[str] = None
    national_id: Optional[str] = None
    language: TenantLanguage = TenantLanguage.english
    emergency_contact: Optional[EmergencyContact] = None
    notes: Optional[str] = None

    @field_validator("primary_phone", mode="before")
    @classmethod
    def normalize_phone(cls, v):
        # "+251 911-223 344" → "+251911223344"
        if isinstance(v, str):
            return "".join(ch for ch in v if ch.isdigit() or ch == "+")
        return v


class TenantCreate(TenantBase):
    status: TenantStatus = TenantStatus.active


class TenantUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    primary_phone: Optional[str] = None
    email: Optional[str] = None
    national_id: Optional[str] = None
    language: Optional[TenantLanguage] = None
    status: Optional[TenantStatus] = None
    emergency_contact: Optional[EmergencyContact] = None
    notes: Optional[str] = None

    @field_validator("primary_phone", mode="before")
    @classmethod
    def normalize_phone(cls, v):
        if isinstance(v, str):
            return "".join(ch for ch in v if ch.isdigit() or ch == "+")
        return v
