# core/config_validator.py

from typing import List
from core.config import settings
from core.logging_config import logger


def validate_required_config() -> List[str]:
    """Settings the API cannot start without. Returns the missing names."""
    missing = []

    if not settings.MONGODB_URI:
        missing.append("MONGODB_URI")
    if not settings.MONGODB_DB:
        missing.append("MONGODB_DB")

    # Tokens cannot be signed without a secret outside development
    if settings.ENV == "production" and not settings.JWT_SECRET_KEY:
        missing.append("JWT_SECRET_KEY")

    return missing


def validate_optional_config() -> List[str]:
    """Settings whose absence disables a feature. Logged, never fatal."""
    warnings = []

    if not settings.JWT_SECRET_KEY:
        warnings.append("JWT_SECRET_KEY (falling back to an insecure development key)")
    if not settings.CHAPA_WEBHOOK_SECRET and not settings.CHAPA_SECRET_KEY:
        warnings.append("CHAPA_WEBHOOK_SECRET (Chapa webhooks will be rejected)")
    if settings.SCHEDULER_ENABLED and not (settings.SMTP_HOST or settings.NOTIFY_WEBHOOK_URL):
        warnings.append("SMTP_HOST / NOTIFY_WEBHOOK_URL (billing job reports go nowhere)")

    return warnings


def validate_config_on_startup():
    """Raises RuntimeError when a required setting is missing."""
    missing_required = validate_required_config()

    if missing_required:
        error_msg = f"Missing required environment variables: {', '.join(missing_required)}"
        logger.error(error_msg)
        raise RuntimeError(error_msg)

    for warning in validate_optional_config():
        logger.warning(f"Optional configuration missing: {warning}")

    logger.info(f"Configuration validated (env={settings.ENV}, db={settings.MONGODB_DB})")
