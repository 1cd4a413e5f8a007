# models/lease.py

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field
from models.enums import LeaseStatus, BillingCycle, ChargeFrequency


class AdditionalCharge(BaseModel):
    """A recurring or one-time charge billed alongside rent (service fee, parking, ...)."""
    name: str = Field(..., min_length=1)
    amount: float = Field(..., ge=0)
    frequency: ChargeFrequency = ChargeFrequency.monthly


class PenaltyConfig(BaseModel):
    """
    Late fee rules applied by the billing job.

    fee = base * late_fee_rate_per_day * min(days_late - grace_days, cap_days)
    """
    late_fee_rate_per_day: float = Field(0.0, ge=0, le=1, description="Fraction of the invoice per day, e.g. 0.001")
    late_fee_grace_days: int = Field(0, ge=0)
    late_fee_cap_days: Optional[int] = Field(None, ge=1)
    payment_due_days: Optional[int] = Field(None, ge=0)


class LeaseCreate(BaseModel):
    tenant_id: str
    unit_id: str
    start_date: datetime
    end_date: Optional[datetime] = None

    # Omit to derive from the unit (flat override, rate × area, unit rent)
    rent_amount: Optional[float] = None
    deposit_amount: Optional[float] = Field(None, ge=0)
    billing_cycle: BillingCycle = BillingCycle.monthly
    due_day: int = 1

    additional_charges: List[AdditionalCharge] = []
    penalty_config: Optional[PenaltyConfig] = None
    vat_rate: Optional[float] = Field(None, ge=0, le=1)
    terms: Optional[str] = None
    status: LeaseStatus = LeaseStatus.active
    notes: Optional[str] = None


class LeaseUpdate(BaseModel):
    tenant_id: Optional[str] = None
    unit_id: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    rent_amount: Optional[float] = None
    deposit_amount: Optional[float] = Field(None, ge=0)
    billing_cycle: Optional[BillingCycle] = None
    due_day: Optional[int] = None
    additional_charges: Optional[List[AdditionalCharge]] = None
    penalty_config: Optional[PenaltyConfig] = None
    vat_rate: Optional[float] = Field(None, ge=0, le=1)
    terms: Optional[str] = None
    status: Optional[LeaseStatus] = None
    notes: Optional[str] = None


class LeaseTerminate(BaseModel):
    reason: Optional[str] = None
    termination_date: Optional[datetime] = None
