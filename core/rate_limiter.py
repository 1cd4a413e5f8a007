# core/rate_limiter.py

"""
Sliding-window request limiter kept in process memory (per worker).

Each protected action has a named policy. Hits are recorded per
"<policy>:<client>" key, where the client is the authenticated user id or,
for anonymous calls, the first X-Forwarded-For hop / peer address.
"""

import time
from collections import defaultdict, deque
from threading import Lock
from typing import Deque, Dict, NamedTuple, Optional

from fastapi import HTTPException, Request

from core.logging_config import logger


class RatePolicy(NamedTuple):
    name: str
    max_requests: int
    window_seconds: int


LOGIN_POLICY = RatePolicy("login", 10, 60)
WEBHOOK_POLICY = RatePolicy("webhook", 120, 60)

_hits: Dict[str, Deque[float]] = defaultdict(deque)
_lock = Lock()


def hit(key: str, policy: RatePolicy) -> int:
    """
    Record one request under key. Returns the remaining allowance,
    or -1 when the request is over the limit (and is not recorded).
    """
    now = time.monotonic()
    window_start = now - policy.window_seconds

    with _lock:
        window = _hits[key]
        while window and window[0] <= window_start:
            window.popleft()
        if len(window) >= policy.max_requests:
            return -1
        window.append(now)
        return policy.max_requests - len(window)


def reset_rate_limits():
    with _lock:
        _hits.clear()


def client_identifier(request: Request, user_id: Optional[str] = None) -> str:
    if user_id:
        return f"user:{user_id}"

    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return f"ip:{forwarded_for.split(',')[0].strip()}"
    return f"ip:{request.client.host if request.client else 'unknown'}"


def enforce_rate_limit(request: Request, policy: RatePolicy, user_id: Optional[str] = None) -> int:
    """Raise 429 with Retry-After once the client exhausts the policy's window."""
    key = f"{policy.name}:{client_identifier(request, user_id)}"
    remaining = hit(key, policy)

    if remaining < 0:
        logger.warning(f"Rate limit hit: {key} ({policy.max_requests}/{policy.window_seconds}s)")
        raise HTTPException(
            status_code=429,
            detail=f"Rate limit exceeded. Maximum {policy.max_requests} requests per {policy.window_seconds} seconds.",
            headers={
                "X-RateLimit-Limit": str(policy.max_requests),
                "Retry-After": str(policy.window_seconds),
            },
        )
    return remaining
