from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends

from app.core.auth import verify_api_key
from app.core.dependencies import get_submission_service
from app.core.rate_limit import enforce_ip_rate_limit
from app.schemas.forms import parse_form
from app.schemas.submission import SubmitFormResponse
from app.services.submission_service import FormSubmissionService

router = APIRouter(tags=["Forms"])


@router.post(
    "/forms/{form_type}",
    response_model=SubmitFormResponse,
    dependencies=[Depends(verify_api_key)],
)
async def submit_form(
    form_type: str,
    payload: Annotated[Any, Body(description="Form fields (camelCase keys).")],
    client_ip: Annotated[str, Depends(enforce_ip_rate_limit)],
    service: Annotated[FormSubmissionService, Depends(get_submission_service)],
) -> SubmitFormResponse:
    """Validate a form, notify the client's recipient and record the submission.

    Supported form types: ``contact`` and ``vision``.

    Raises:
        ValidationAppError: Unknown form type, invalid field or unknown client (400).
        RateLimitAppError: Client daily email budget exhausted (429).
        DeliveryAppError: Notification could not be sent (502).
    """
    form = parse_form(form_type, payload)
    outcome = await service.submit(form, client_ip)
    return SubmitFormResponse(
        message_id=outcome.message_id,
        submission_id=outcome.submission_id,
    )
