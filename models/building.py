# models/building.py

from typing import Optional
from pydantic import BaseModel, Field
from models.enums import BuildingType, BuildingStatus


class Address(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    postal_code: Optional[str] = None


# -------------------------------------------------
# Shared fields
# -------------------------------------------------
class BuildingBase(BaseModel):
    name: str = Field(..., min_length=1)
    address: Optional[Address] = None
    building_type: BuildingType = BuildingType.residential
    total_floors: Optional[int] = Field(None, ge=0)
    total_units: Optional[int] = Field(None, ge=0)
    manager_id: Optional[str] = None
    settings: Optional[dict] = None


# -------------------------------------------------
# Create
# -------------------------------------------------
class BuildingCreate(BuildingBase):
    status: BuildingStatus = BuildingStatus.active


# -------------------------------------------------
# Update (PATCH)
# -------------------------------------------------
class BuildingUpdate(BaseModel):
    name: Optional[str] = None
    address: Optional[Address] = None
    building_type: Optional[BuildingType] = None
    total_floors: Optional[int] = Field(None, ge=0)
    total_units: Optional[int] = Field(None, ge=0)
    manager_id: Optional[str] = None
    settings: Optional[dict] = None
    status: Optional[BuildingStatus] = None
