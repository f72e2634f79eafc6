"""
Rate limiting for the HTTP API.
Uses SlowAPI, sharing the Redis instance with the cache when one is configured.
"""

import logging

from fastapi import Request
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from app.core.config import settings

logger = logging.getLogger("employees.rate_limiter")


def get_real_client_ip(request: Request) -> str:
    """
    Get the real client IP, accounting for reverse proxies.
    Checks X-Forwarded-For header first, then falls back to direct IP.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # First entry is the original client
        return forwarded_for.split(",")[0].strip()

    # Common in nginx setups
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    return get_remote_address(request)


def get_client_identifier(request: Request) -> str:
    return f"ip:{get_real_client_ip(request)}"


storage_uri = settings.REDIS_URL or "memory://"

if settings.REDIS_URL:
    # Mask password in logs
    logged_url = settings.REDIS_URL.split("@")[-1]
    logger.info(f"Rate limiter using Redis backend: {logged_url}")
elif settings.IS_PRODUCTION:
    logger.warning(
        "Rate limiting is using in-memory storage; limits are per process. "
        "Configure REDIS_URL to share them across instances."
    )


limiter = Limiter(
    key_func=get_client_identifier,
    storage_uri=storage_uri,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """
    Return a JSON 429 with retry information.
    """
    logger.warning(
        f"Rate limit exceeded for {get_client_identifier(request)} "
        f"on {request.method} {request.url.path}"
    )

    retry_after = getattr(exc, "retry_after", 60)

    return JSONResponse(
        status_code=429,
        content={
            "error": "Rate limit exceeded",
            "detail": f"Too many requests. Please retry after {retry_after} seconds.",
            "retry_after": retry_after,
        },
        headers={"Retry-After": str(retry_after)},
    )


class RateLimits:
    """Limits per endpoint type."""
    API_WRITE = "30/minute"
    MESSAGE_PUBLISH = "60/minute"
