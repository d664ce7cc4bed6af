"""Rate limiting configuration for the storefront API.

Uses slowapi; counters live in the storage named by RATE_LIMIT_STORAGE_URI
(``memory://`` for a single instance, ``redis://...`` when several instances
share traffic).
"""

from functools import lru_cache
from typing import Callable

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from libs.common.config import get_settings


def get_client_ip(request: Request) -> str:
    """
    Get client IP from request, handling proxies.

    The first X-Forwarded-For hop wins; otherwise the direct peer address.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


@lru_cache
def get_limiter() -> Limiter:
    """Create and return the cached Limiter bound to the configured storage."""
    settings = get_settings()
    return Limiter(
        key_func=get_client_ip,
        storage_uri=settings.RATE_LIMIT_STORAGE_URI,
        strategy="fixed-window",
    )


limiter = get_limiter()


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """Return a JSON 429 with a Retry-After header."""
    return JSONResponse(
        status_code=429,
        content={"error": "Too many requests. Please try again later."},
        headers={"Retry-After": str(getattr(exc, "retry_after", 60))},
    )


def payment_limit(func: Callable) -> Callable:
    """Apply the limit for endpoints that open provider sessions (10/minute)."""
    return limiter.limit("10/minute")(func)
