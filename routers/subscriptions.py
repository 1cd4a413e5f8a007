# routers/subscriptions.py

from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional
from pymongo.errors import PyMongoError

from dependencies.auth import get_current_user, CurrentUser
from core.errors import handle_db_error
from core.permission_helpers import requires_permission, require_admin, resolve_organization_id
from core.utils import sanitize
from models.enums import SubscriptionTier, BillingCycle, DiscountType
from models.subscription import SubscriptionCreate, SubscriptionUpdate, SubscriptionCancel
from services import subscriptions as subscriptions_service


router = APIRouter(
    prefix="/subscriptions",
    tags=["Subscriptions"],
)


# ============================================================
# OWN ORGANIZATION
# ============================================================
@router.get(
    "/me",
    summary="Current Organization Subscription",
    dependencies=[Depends(requires_permission("subscriptions:read"))],
)
def get_my_subscription(current_user: CurrentUser = Depends(get_current_user)):
    org_id = resolve_organization_id(current_user)
    subscription = subscriptions_service.find_subscription_by_organization(org_id)
    if not subscription:
        raise HTTPException(404, "No active subscription for this organization")
    return {"success": True, "data": subscription}


# ============================================================
# PRICING PREVIEW
# ============================================================
@router.get("/pricing", summary="Quote Subscription Price")
def quote_price(
    tier: SubscriptionTier,
    billing_cycle: BillingCycle = BillingCycle.monthly,
    discount_type: Optional[DiscountType] = None,
    discount_value: Optional[float] = Query(None, ge=0),
    current_user: CurrentUser = Depends(get_current_user),
):
    quote = subscriptions_service.calculate_subscription_price(
        tier.value,
        billing_cycle.value,
        discount_type.value if discount_type else None,
        discount_value,
    )
    quote.update({
        "tier": tier.value,
        "billing_cycle": billing_cycle.value,
        "limits": subscriptions_service.DEFAULT_LIMITS[tier.value],
        "features": subscriptions_service.SUBSCRIPTION_FEATURES[tier.value],
    })
    return {"success": True, "data": quote}


# ============================================================
# PLATFORM ADMINISTRATION (super admin)
# ============================================================
@router.get("/stats", summary="Subscription Statistics")
def subscription_stats(
    window_days: Optional[int] = Query(None, ge=1, le=365),
    current_user: CurrentUser = Depends(get_current_user),
):
    require_admin(current_user)
    try:
        data = subscriptions_service.get_subscription_stats(window_days=window_days)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to compute subscription stats")
    return {"success": True, "data": data}


@router.get("/organization/{organization_id}", summary="Organization Subscription")
def get_organization_subscription(organization_id: str, current_user: CurrentUser = Depends(get_current_user)):
    org_id = resolve_organization_id(current_user, organization_id)
    subscription = subscriptions_service.find_subscription_by_organization(org_id)
    if not subscription:
        raise HTTPException(404, "No active subscription for this organization")
    return {"success": True, "data": subscription}


@router.get("", summary="List Subscriptions")
def list_subscriptions(
    status: Optional[str] = None,
    tier: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    current_user: CurrentUser = Depends(get_current_user),
):
    require_admin(current_user)
    try:
        data = subscriptions_service.list_subscriptions(status=status, tier=tier, limit=limit)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to fetch subscriptions")
    return {"success": True, "data": data}


@router.post(
    "",
    summary="Create Subscription",
    status_code=201,
    description="""
    Prices from the tier table unless `price` is given.
    `trial_days > 0` starts the subscription in `trial`.
    """,
)
def create_subscription(payload: SubscriptionCreate, current_user: CurrentUser = Depends(get_current_user)):
    require_admin(current_user)
    try:
        data = subscriptions_service.create_subscription(sanitize(payload.model_dump()))
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to create subscription")
    return {"success": True, "data": data}


@router.get("/{subscription_id}", summary="Get Subscription")
def get_subscription(subscription_id: str, current_user: CurrentUser = Depends(get_current_user)):
    require_admin(current_user)
    return {"success": True, "data": subscriptions_service.get_subscription(subscription_id)}


@router.patch("/{subscription_id}", summary="Update Subscription")
def update_subscription(
    subscription_id: str,
    payload: SubscriptionUpdate,
    current_user: CurrentUser = Depends(get_current_user),
):
    require_admin(current_user)
    try:
        data = subscriptions_service.update_subscription(subscription_id, sanitize(payload.model_dump(exclude_unset=True)))
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to update subscription")
    return {"success": True, "data": data}


@router.post("/{subscription_id}/cancel", summary="Cancel Subscription")
def cancel_subscription(
    subscription_id: str,
    payload: Optional[SubscriptionCancel] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    require_admin(current_user)
    reason = payload.reason if payload else None
    try:
        data = subscriptions_service.cancel_subscription(subscription_id, reason=reason)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to cancel subscription")
    return {"success": True, "data": data}


@router.post("/{subscription_id}/renew", summary="Renew Subscription")
def renew_subscription(subscription_id: str, current_user: CurrentUser = Depends(get_current_user)):
    require_admin(current_user)
    try:
        data = subscriptions_service.renew_subscription(subscription_id)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to renew subscription")
    return {"success": True, "data": data}
