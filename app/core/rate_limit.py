"""Per-IP rate limiting dependency for FastAPI routes.

This module wires the sliding-window limiter into the HTTP layer. The client
email limit is applied later by the submission service, once the body has
been validated and the client id is known.

Rate limiting is disabled (every request admitted) when no store table is
configured, and fails open when the store misbehaves.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from app.core.config import settings
from app.core.dependencies import get_rate_limiter
from app.services.rate_limiter import SlidingWindowRateLimiter
from app.services.rate_window import IP_KIND


def get_client_ip(request: Request) -> str:
    """Resolve the caller IP, preferring the first X-Forwarded-For hop."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else "unknown"


async def enforce_ip_rate_limit(
    request: Request,
    limiter: Annotated[SlidingWindowRateLimiter, Depends(get_rate_limiter)],
) -> str:
    """FastAPI dependency consuming one event from the caller IP's window.

    Args:
        request: FastAPI request.
        limiter: Sliding-window limiter (injected).

    Returns:
        str: The resolved client IP, for reuse by the route.

    Raises:
        HTTPException: 429 Too Many Requests when the IP exhausted its window.
    """

    client_ip = get_client_ip(request)
    if limiter.check_ip(client_ip):
        return client_ip

    policy = limiter.policy(IP_KIND)
    headers: dict[str, str] = {}
    if settings.app.rate_limit_include_headers:
        headers["Retry-After"] = str(policy.window_seconds)
        headers["X-RateLimit-Limit"] = str(policy.max_events)
        headers["X-RateLimit-Remaining"] = "0"

    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail="Rate limit exceeded. Try again later.",
        headers=headers or None,
    )
