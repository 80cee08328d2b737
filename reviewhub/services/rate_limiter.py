"""
Rate Limiting Service

Per-client request limits using slowapi.

Rate Limit Tiers:
=================
- Reads (feeds, listings, company pages): settings.rate_limit_default
- Writes (reviews, catalog changes, profile): settings.rate_limit_write
- Registration and login: fixed, stricter limits in the auth router

Limits are counted per client IP. With RATE_LIMIT_ENABLED=false the limiter
is a no-op and no storage is needed; otherwise counters live in Redis so
that several API instances share them.
"""

import logging

from fastapi import Request
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from reviewhub.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

RETRY_AFTER_SECONDS = 60


def get_client_ip(request: Request) -> str:
    """
    Client IP address for rate limiting.

    Honors X-Forwarded-For (first hop) and X-Real-IP set by a reverse proxy,
    falling back to the direct peer address.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    return get_remote_address(request)


def create_limiter() -> Limiter:
    """Limiter configured from settings."""
    storage_uri = settings.redis_url if settings.rate_limit_enabled else None

    limiter = Limiter(
        key_func=get_client_ip,
        default_limits=[settings.rate_limit_default],
        storage_uri=storage_uri,
        strategy="fixed-window",
        enabled=settings.rate_limit_enabled,
    )

    logger.info(
        f"Rate limiter initialized - enabled: {settings.rate_limit_enabled}, "
        f"reads: {settings.rate_limit_default}, writes: {settings.rate_limit_write}"
    )

    return limiter


limiter = create_limiter()


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """
    429 response in the API's error format.

    {"error": "Too many requests. Please slow down.", "limit": "100 per 1 minute"}
    """
    limit_detail = str(exc.detail)

    response = JSONResponse(
        status_code=429,
        content={
            "error": "Too many requests. Please slow down.",
            "limit": limit_detail,
        },
    )
    response.headers["Retry-After"] = str(RETRY_AFTER_SECONDS)
    response.headers["X-RateLimit-Limit"] = limit_detail

    logger.warning(f"Rate limit exceeded for {get_client_ip(request)}: {limit_detail}")

    return response
