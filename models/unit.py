# models/unit.py

from typing import Optional
from pydantic import BaseModel, Field, field_validator
from models.enums import UnitType, UnitStatus


class UnitBase(BaseModel):
    building_id: str
    unit_number: str = Field(..., min_length=1)
    floor: Optional[int] = None
    unit_type: UnitType = UnitType.apartment
    area: Optional[float] = Field(None, gt=0, description="Area in square meters")
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)

    # Rent inputs, see services.units.resolve_unit_rent
    rent_amount: Optional[float] = Field(None, ge=0)
    rate_per_sqm_override: Optional[float] = Field(None, ge=0)
    flat_rent_override: Optional[float] = Field(None, ge=0)

    @field_validator("unit_number", mode="before")
    @classmethod
    def strip_unit_number(cls, v):
        if isinstance(v, (int, float)):
            v = str(v)
        return v.strip() if isinstance(v, str) else v


class UnitCreate(UnitBase):
    status: UnitStatus = UnitStatus.available


class UnitUpdate(BaseModel):
    unit_number: Optional[str] = None
    floor: Optional[int] = None
    unit_type: Optional[UnitType] = None
    area: Optional[float] = Field(None, gt=0)
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    status: Optional[UnitStatus] = None
    rent_amount: Optional[float] = Field(None, ge=0)
    rate_per_sqm_override: Optional[float] = Field(None, ge=0)
    flat_rent_override: Optional[float] = Field(None, ge=0)
