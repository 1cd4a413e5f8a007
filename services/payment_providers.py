# services/payment_providers.py

"""
Payment provider webhooks (Chapa, Telebirr, CBE Birr, HelloCash, bank transfer).

Each provider posts a differently shaped payload. `normalize_payload` reduces
it to {reference, status, amount, payment_intent_id}; settlement then works
off the matching payment intent.
"""

from typing import Optional

import requests

from core.config import settings
from core.errors import BMSError, NotFoundError, ValidationError
from core.logging_config import logger
from core.mongo_client import get_db, serialize_doc, to_object_id
from core.security import verify_signature
from core.utils import utcnow
from models.enums import PaymentProvider
from services.payments import create_payment
from services.system_settings import get_provider_config, is_provider_enabled as provider_enabled_in_settings


SUCCESS_STATUSES = {"success", "successful", "completed", "paid", "settled"}

SIGNATURE_HEADERS = {
    "chapa": "x-chapa-signature",
}
DEFAULT_SIGNATURE_HEADER = "x-signature"


def is_valid_provider(provider: str) -> bool:
    return provider in PaymentProvider.list()


def signature_header(provider: str) -> str:
    return SIGNATURE_HEADERS.get(provider, DEFAULT_SIGNATURE_HEADER)


def webhook_secret(provider: str) -> Optional[str]:
    if provider == "chapa":
        if settings.CHAPA_WEBHOOK_SECRET or settings.CHAPA_SECRET_KEY:
            return settings.CHAPA_WEBHOOK_SECRET or settings.CHAPA_SECRET_KEY
    config = get_provider_config(provider) or {}
    return config.get("webhook_secret")


def is_provider_enabled(provider: str) -> bool:
    # bank transfer confirmations are always accepted (no provider integration)
    if provider == "bank_transfer":
        return True
    return provider_enabled_in_settings(provider)


def verify_webhook(provider: str, body: bytes, signature: Optional[str]) -> bool:
    return verify_signature(body, signature, webhook_secret(provider))


# -----------------------------------------------------
# Payload normalization
# -----------------------------------------------------
def _parse_amount(amount) -> Optional[float]:
    if amount in (None, ""):
        return None
    try:
        return float(amount)
    except (TypeError, ValueError):
        raise ValidationError("Invalid amount")


def normalize_payload(provider: str, payload: dict) -> dict:
    if provider == "chapa":
        reference = payload.get("tx_ref") or payload.get("reference")
        status = payload.get("status")
        amount = payload.get("amount")
    elif provider == "telebirr":
        reference = payload.get("outTradeNo") or payload.get("merch_order_id") or payload.get("reference")
        status = payload.get("tradeStatus") or payload.get("trade_status") or payload.get("status")
        amount = payload.get("totalAmount") or payload.get("total_amount") or payload.get("amount")
    elif provider == "cbe_birr":
        reference = payload.get("TransactionId") or payload.get("transaction_id") or payload.get("reference")
        status = payload.get("Status") or payload.get("status")
        amount = payload.get("Amount") or payload.get("amount")
    elif provider == "hellocash":
        reference = payload.get("tracenumber") or payload.get("reference")
        status = payload.get("status")
        amount = payload.get("amount")
    else:
        reference = payload.get("reference")
        status = payload.get("status")
        amount = payload.get("amount")

    return {
        "reference": str(reference) if reference is not None else None,
        "status": str(status or "").lower(),
        "amount": _parse_amount(amount),
        "payment_intent_id": payload.get("payment_intent_id"),
    }


# -----------------------------------------------------
# Settlement
# -----------------------------------------------------
def _find_intent(normalized: dict) -> Optional[dict]:
    db = get_db()
    if normalized.get("payment_intent_id"):
        oid = to_object_id(normalized["payment_intent_id"])
        if oid is not None:
            intent = db.payment_intents.find_one({"_id": oid})
            if intent:
                return intent
    if normalized.get("reference"):
        return db.payment_intents.find_one({"reference": normalized["reference"]})
    return None


def process_webhook(provider: str, payload: dict) -> dict:
    """
    Apply a verified webhook. Idempotent: a reference that was already
    settled returns the existing payment.
    """
    normalized = normalize_payload(provider, payload)
    intent = _find_intent(normalized)
    if intent is None:
        raise NotFoundError("Payment intent not found")

    db = get_db()
    if intent.get("status") == "completed" and intent.get("payment_id"):
        existing = db.payments.find_one({"_id": to_object_id(intent["payment_id"])})
        logger.info(f"{provider} webhook for {intent['reference']} already processed")
        return {"status": "already_processed", "payment": serialize_doc(existing)}

    if normalized["status"] not in SUCCESS_STATUSES:
        db.payment_intents.update_one(
            {"_id": intent["_id"]},
            {"$set": {"status": "failed", "provider_status": normalized["status"], "updated_at": utcnow()}},
        )
        logger.warning(f"{provider} reported '{normalized['status']}' for {intent['reference']}")
        return {"status": "failed", "payment": None}

    # Payment written but intent not yet marked (crash or concurrent replay)
    existing = db.payments.find_one({
        "organization_id": intent["organization_id"],
        "reference_number": intent["reference"],
    })
    if existing:
        db.payment_intents.update_one(
            {"_id": intent["_id"]},
            {"$set": {"status": "completed", "payment_id": str(existing["_id"]), "updated_at": utcnow()}},
        )
        logger.info(f"{provider} webhook for {intent['reference']} matched existing payment {existing['_id']}")
        return {"status": "already_processed", "payment": serialize_doc(existing)}

    amount = normalized["amount"] if normalized["amount"] is not None else intent["amount"]
    payment = create_payment(intent["organization_id"], {
        "tenant_id": intent["tenant_id"],
        "invoice_id": intent.get("invoice_id"),
        "amount": amount,
        "currency": intent.get("currency"),
        "payment_method": provider,
        "reference_number": intent["reference"],
        "status": "completed",
        "provider_response": payload,
    }, processed_by=f"webhook:{provider}")

    db.payment_intents.update_one(
        {"_id": intent["_id"]},
        {"$set": {"status": "completed", "payment_id": payment["id"], "updated_at": utcnow()}},
    )
    logger.info(f"{provider} payment settled: {intent['reference']} → payment {payment['id']}")
    return {"status": "completed", "payment": payment}


# -----------------------------------------------------
# Chapa transaction verification
# -----------------------------------------------------
def verify_chapa_transaction(tx_ref: str) -> dict:
    if not settings.CHAPA_SECRET_KEY:
        raise BMSError("Chapa is not configured", status_code=503)

    try:
        response = requests.get(
            f"{settings.CHAPA_BASE_URL}/transaction/verify/{tx_ref}",
            headers={"Authorization": f"Bearer {settings.CHAPA_SECRET_KEY}"},
            timeout=15,
        )
    except requests.RequestException as e:
        logger.error(f"Chapa verify request failed for {tx_ref}: {e}")
        raise BMSError("Payment provider unavailable", status_code=502)

    if response.status_code == 404:
        raise NotFoundError("Transaction not found")
    if not response.ok:
        logger.error(f"Chapa verify returned {response.status_code} for {tx_ref}")
        raise BMSError("Payment provider error", status_code=502)

    return response.json()
