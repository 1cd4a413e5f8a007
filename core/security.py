# core/security.py

"""
Password hashing, access tokens and webhook signatures.
"""

import base64
import hashlib
import hmac
import os
from datetime import timedelta
from typing import Optional

from jose import jwt, JWTError

from core.config import settings
from core.logging_config import logger
from core.utils import utcnow


PASSWORD_ITERATIONS = 310_000
_DEV_SECRET = "bms-development-secret-change-me"


# -----------------------------------------------------
# Passwords (PBKDF2-SHA256, stored as iterations$salt$hash)
# -----------------------------------------------------
def hash_password(password: str, salt_b64: Optional[str] = None, iterations: int = PASSWORD_ITERATIONS) -> str:
    salt = base64.b64decode(salt_b64) if salt_b64 else os.urandom(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return "{}${}${}".format(
        iterations,
        base64.b64encode(salt).decode("ascii"),
        base64.b64encode(digest).decode("ascii"),
    )


def verify_password(password: str, stored: str) -> bool:
    try:
        iterations, salt_b64, _ = stored.split("$", 2)
        computed = hash_password(password, salt_b64, int(iterations))
    except (ValueError, AttributeError):
        return False
    return hmac.compare_digest(computed, stored)


# -----------------------------------------------------
# JWT access tokens
# -----------------------------------------------------
def _jwt_secret() -> str:
    if not settings.JWT_SECRET_KEY:
        logger.debug("JWT_SECRET_KEY not set, using development secret.")
        return _DEV_SECRET
    return settings.JWT_SECRET_KEY


def create_access_token(claims: dict, expires_minutes: Optional[int] = None) -> str:
    minutes = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    payload = dict(claims)
    payload["exp"] = utcnow() + timedelta(minutes=minutes)
    return jwt.encode(payload, _jwt_secret(), algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    """Returns the claims, or None when the token is invalid or expired."""
    try:
        return jwt.decode(token, _jwt_secret(), algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.debug(f"Token rejected: {e}")
        return None


# -----------------------------------------------------
# Webhook signatures (HMAC-SHA256 over the raw body)
# -----------------------------------------------------
def sign_payload(payload: bytes, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def verify_signature(payload: bytes, signature: Optional[str], secret: Optional[str]) -> bool:
    if not signature or not secret:
        return False
    expected = sign_payload(payload, secret)
    return hmac.compare_digest(expected, signature.strip().lower())
