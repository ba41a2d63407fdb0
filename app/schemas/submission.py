"""Pydantic schemas for submission, audit and quota responses."""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, Field

from app.services.submission_recorder import extract_fields


class SubmitFormResponse(BaseModel):
    """Result of an accepted and delivered form submission."""

    success: bool = True
    message: str = Field("Email sent successfully")
    message_id: str = Field(..., description="Message id returned by the mail sender.")
    submission_id: str = Field(
        "",
        description="Audit record id; empty when audit storage is disabled or failed.",
    )


class SubmissionRecordResponse(BaseModel):
    """One stored audit record."""

    submission_id: str
    client_id: str
    form_type: str
    timestamp: int = Field(..., description="Capture time in UNIX epoch seconds.")
    timestamp_iso: str
    ip_address: str
    message_id: str | None = Field(None, description="Mail sender message id, if sending succeeded.")
    fields: Dict[str, str] = Field(default_factory=dict, description="Submitted form fields.")

    @classmethod
    def from_item(cls, item: dict[str, Any]) -> "SubmissionRecordResponse":
        return cls(
            submission_id=item.get("submissionId", ""),
            client_id=item.get("clientId", ""),
            form_type=item.get("formType", ""),
            timestamp=int(item.get("timestamp", 0)),
            timestamp_iso=item.get("timestampIso", ""),
            ip_address=item.get("ipAddress", ""),
            message_id=item.get("sesMessageId"),
            fields=extract_fields(item),
        )


class ClientSubmissionsResponse(BaseModel):
    """Newest-first audit records for one client."""

    client_id: str
    count: int
    items: List[SubmissionRecordResponse] = Field(default_factory=list)


class QuotaResponse(BaseModel):
    """Remaining budget for the caller's IP and, optionally, a client."""

    ip_remaining: int
    ip_limit: int
    ip_window_seconds: int
    client_id: str | None = None
    email_remaining: int | None = None
    email_limit: int | None = None
    email_window_seconds: int | None = None
