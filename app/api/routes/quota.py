from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from app.core.auth import verify_api_key
from app.core.dependencies import get_rate_limiter
from app.core.rate_limit import get_client_ip
from app.schemas.submission import QuotaResponse
from app.services.rate_limiter import SlidingWindowRateLimiter
from app.services.rate_window import EMAIL_KIND, IP_KIND

router = APIRouter(tags=["Quota"], dependencies=[Depends(verify_api_key)])


@router.get("/quota", response_model=QuotaResponse)
def get_quota(
    request: Request,
    limiter: Annotated[SlidingWindowRateLimiter, Depends(get_rate_limiter)],
    client_id: Annotated[str | None, Query(description="Also report this client's email budget.")] = None,
) -> QuotaResponse:
    """Report remaining submissions for the caller IP without consuming any."""
    ip_policy = limiter.policy(IP_KIND)
    response = QuotaResponse(
        ip_remaining=limiter.remaining(IP_KIND, get_client_ip(request)),
        ip_limit=ip_policy.max_events,
        ip_window_seconds=ip_policy.window_seconds,
    )

    if client_id:
        email_policy = limiter.policy(EMAIL_KIND)
        response.client_id = client_id
        response.email_remaining = limiter.remaining(EMAIL_KIND, client_id)
        response.email_limit = email_policy.max_events
        response.email_window_seconds = email_policy.window_seconds

    return response
