"""
Rate Limiting Service

Throttles the login endpoint with slowapi so credentials cannot be
brute-forced.

Key Features:
=============
1. Per-client counters keyed on the caller's IP (proxy headers honoured)
2. Limit configured with RATE_LIMIT_LOGIN (default 10/minute)
3. Pluggable storage via RATE_LIMIT_STORAGE_URI (in-memory by default)
4. JSON 429 body with Retry-After
"""

import logging

from fastapi import Request
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from library_api.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

RETRY_AFTER_SECONDS = 60


def get_client_ip(request: Request) -> str:
    """
    Identify the caller for throttling.

    Behind a reverse proxy the first X-Forwarded-For hop (or nginx's
    X-Real-IP) is the client; otherwise the socket peer address is used.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    proxied = request.headers.get("X-Real-IP")
    if proxied:
        return proxied.strip()

    return get_remote_address(request)


def create_limiter() -> Limiter:
    """
    Build the application's Limiter.

    No default limit is applied: only endpoints decorated with
    @limiter.limit(...) are throttled. With RATE_LIMIT_ENABLED=false the
    decorators become no-ops.
    """
    limiter = Limiter(
        key_func=get_client_ip,
        storage_uri=settings.rate_limit_storage_uri,
        strategy="fixed-window",
        enabled=settings.rate_limit_enabled,
    )

    logger.info(
        f"Login throttle {'on' if settings.rate_limit_enabled else 'off'}: "
        f"{settings.rate_limit_login} ({settings.rate_limit_storage_uri})"
    )

    return limiter


limiter = create_limiter()


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Answer 429 {"message", "detail"} and tell the client when to retry."""
    limit = str(exc.detail)

    logger.warning(f"Too many attempts from {get_client_ip(request)}: {limit}")

    return JSONResponse(
        status_code=429,
        content={"message": "Too Many Attempts.", "detail": limit},
        headers={
            "Retry-After": str(RETRY_AFTER_SECONDS),
            "X-RateLimit-Limit": limit,
        },
    )
