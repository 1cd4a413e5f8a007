# models/subscription.py

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field
from models.enums import SubscriptionTier, SubscriptionStatus, BillingCycle, DiscountType


class SubscriptionLimits(BaseModel):
    """None means unlimited."""
    max_buildings: Optional[int] = None
    max_units: Optional[int] = None
    max_users: Optional[int] = None


class SubscriptionCreate(BaseModel):
    """Create subscription model."""
    organization_id: str = Field(..., description="Organization this subscription bills")
    tier: SubscriptionTier = SubscriptionTier.starter
    billing_cycle: BillingCycle = BillingCycle.monthly
    start_date: Optional[datetime] = Field(None, description="Defaults to now")
    price: Optional[float] = Field(None, ge=0, description="Explicit price; skips tier pricing")
    currency: Optional[str] = None
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[float] = Field(None, ge=0)
    trial_days: int = Field(0, ge=0, le=365)
    auto_renew: bool = True
    limits: Optional[SubscriptionLimits] = None
    features: Optional[List[str]] = None
    notes: Optional[str] = None


class SubscriptionUpdate(BaseModel):
    """Update subscription model - all fields optional."""
    tier: Optional[SubscriptionTier] = None
    billing_cycle: Optional[BillingCycle] = None
    start_date: Optional[datetime] = None
    price: Optional[float] = Field(None, ge=0)
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[float] = Field(None, ge=0)
    status: Optional[SubscriptionStatus] = None
    auto_renew: Optional[bool] = None
    limits: Optional[SubscriptionLimits] = None
    features: Optional[List[str]] = None
    notes: Optional[str] = None


class SubscriptionCancel(BaseModel):
    reason: Optional[str] = None
