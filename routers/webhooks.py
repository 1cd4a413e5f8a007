# routers/webhooks.py

import json

from fastapi import APIRouter, Depends, Request, HTTPException
from pymongo.errors import PyMongoError

from dependencies.auth import get_current_user, CurrentUser
from core.errors import handle_db_error
from core.logging_config import logger
from core.permission_helpers import requires_permission
from core.rate_limiter import enforce_rate_limit, WEBHOOK_POLICY
from services import payment_providers


router = APIRouter(
    prefix="/webhooks",
    tags=["Webhooks"],
)


# -----------------------------------------------------
# POST /webhooks/payments/{provider}
# Signed by the provider (HMAC-SHA256 of the raw body)
# No user auth
# -----------------------------------------------------
@router.post("/payments/{provider}", summary="Payment provider webhook")
async def payment_webhook(provider: str, request: Request):
    """
    Receives settlement callbacks from Chapa, Telebirr, CBE Birr, HelloCash
    and bank transfer confirmations.

    Replays of an already-settled reference are acknowledged without
    creating a second payment.
    """
    enforce_rate_limit(request, WEBHOOK_POLICY)

    provider = provider.lower()
    if not payment_providers.is_valid_provider(provider):
        raise HTTPException(400, f"Invalid payment provider: {provider}")

    if not payment_providers.is_provider_enabled(provider):
        logger.warning(f"Webhook received for disabled provider {provider}")
        raise HTTPException(403, f"Payment provider {provider} is not enabled")

    body = await request.body()
    signature = request.headers.get(payment_providers.signature_header(provider))
    if not payment_providers.verify_webhook(provider, body, signature):
        logger.warning(f"Invalid {provider} webhook signature")
        raise HTTPException(401, "Invalid webhook signature")

    try:
        payload = json.loads(body or b"{}")
    except ValueError:
        raise HTTPException(400, "Invalid JSON payload")
    if not isinstance(payload, dict):
        raise HTTPException(400, "Invalid JSON payload")

    try:
        result = payment_providers.process_webhook(provider, payload)
    except PyMongoError as e:
        raise handle_db_error(e, "Failed to process webhook")

    return {"success": True, "data": result}


# -----------------------------------------------------
# GET /webhooks/payments/chapa/verify/{tx_ref}
# -----------------------------------------------------
@router.get(
    "/payments/chapa/verify/{tx_ref}",
    summary="Verify Chapa transaction",
    dependencies=[Depends(requires_permission("payments:read"))],
)
def verify_chapa(tx_ref: str, current_user: CurrentUser = Depends(get_current_user)):
    return {"success": True, "data": payment_providers.verify_chapa_transaction(tx_ref)}
