from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.core.auth import verify_api_key
from app.core.config import settings
from app.core.dependencies import get_submission_recorder
from app.schemas.submission import ClientSubmissionsResponse, SubmissionRecordResponse
from app.services.submission_recorder import DEFAULT_QUERY_LIMIT, SubmissionRecorder

router = APIRouter(tags=["Submissions"], dependencies=[Depends(verify_api_key)])


@router.get("/submissions/{submission_id}", response_model=SubmissionRecordResponse)
def get_submission(
    submission_id: str,
    recorder: Annotated[SubmissionRecorder, Depends(get_submission_recorder)],
) -> SubmissionRecordResponse:
    """Fetch one audit record by id.

    Raises:
        HTTPException: 404 if the record does not exist, storage is disabled,
            or the store could not be read.
    """
    item = recorder.get_by_id(submission_id)
    if item is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Submission not found",
        )
    return SubmissionRecordResponse.from_item(item)


@router.get("/clients/{client_id}/submissions", response_model=ClientSubmissionsResponse)
def list_client_submissions(
    client_id: str,
    recorder: Annotated[SubmissionRecorder, Depends(get_submission_recorder)],
    limit: Annotated[int, Query(ge=1, description="Maximum records to return.")] = DEFAULT_QUERY_LIMIT,
) -> ClientSubmissionsResponse:
    """List a client's audit records, newest first."""
    capped = min(limit, settings.app.submission_query_max_limit)
    items = [SubmissionRecordResponse.from_item(i) for i in recorder.get_by_client(client_id, capped)]
    return ClientSubmissionsResponse(client_id=client_id, count=len(items), items=items)
