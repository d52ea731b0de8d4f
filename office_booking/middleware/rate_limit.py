# office_booking/middleware/rate_limit.py
"""
Fixed-window rate limiting on Redis.

Limits (per settings.rate_limit_window_seconds):
- public clients: by IP
- authenticated clients: by token hash

limit=0 disables a check. Redis failures never block a request (fail open).
"""

import hashlib
import logging
from typing import Optional

from fastapi import Request
from starlette.responses import JSONResponse

from ..config import settings
from ..core.errors import error_body
from ..redis_client import redis_client

logger = logging.getLogger(__name__)

EXEMPT_PATHS = ("/health",)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def client_ip(request: Request) -> str:
    return request.headers.get("X-Real-IP") or (request.client.host if request.client else "unknown")


def _check_limit(key: str, limit: int, window: int) -> tuple[bool, Optional[int]]:
    """Returns (allowed, retry_after)."""
    if limit <= 0:
        return True, None

    try:
        pipe = redis_client.pipeline()
        pipe.incr(key)
        pipe.ttl(key)
        count, ttl = pipe.execute()

        if ttl == -1:
            redis_client.expire(key, window)
            ttl = window

        if count > limit:
            return False, ttl

        return True, None

    except Exception as e:
        logger.error(f"Rate limit check failed: {e}")
        return True, None  # fail open


def check_rate_limit(request: Request) -> tuple[bool, Optional[int]]:
    window = settings.rate_limit_window_seconds
    auth = request.headers.get("Authorization")

    if auth:
        return _check_limit(f"rl:token:{hash_token(auth)}", settings.rate_limit_authenticated, window)
    return _check_limit(f"rl:ip:{client_ip(request)}", settings.rate_limit_public, window)


async def rate_limit_middleware(request: Request, call_next):
    if request.url.path in EXEMPT_PATHS:
        return await call_next(request)

    allowed, retry = check_rate_limit(request)
    if not allowed:
        logger.warning(f"Rate limit exceeded: {request.method} {request.url.path} ip={client_ip(request)}")
        return JSONResponse(
            status_code=429,
            content=error_body("Rate limit exceeded"),
            headers={"Retry-After": str(retry or settings.rate_limit_window_seconds)},
        )

    return await call_next(request)
