"""Pydantic schemas for the form variants accepted by the relay.

Each variant carries a ``form_type`` tag and projects itself to a flat
``dict[str, str | None]`` via ``to_form_data()``; that projection is all the
notification and audit layers ever see.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from app.core.errors import ValidationAppError

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class _FormBase(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    client_id: str = Field(..., min_length=1, max_length=100, description="Site/client identifier.")
    name: str = Field(..., min_length=1, max_length=100, description="Submitter name.")
    email: str = Field(
        ...,
        min_length=1,
        max_length=100,
        pattern=EMAIL_PATTERN,
        description="Submitter email; used as Reply-To on the notification.",
    )


class ContactForm(_FormBase):
    """Generic portfolio contact form."""

    form_type: Literal["contact"] = "contact"
    message: str = Field(..., min_length=1, max_length=5000, description="Free-text message.")

    def to_form_data(self) -> dict[str, str | None]:
        return {
            "clientId": self.client_id,
            "name": self.name,
            "email": self.email,
            "message": self.message,
        }


class VisionInquiryForm(_FormBase):
    """Project inquiry form (scope, budget and timeline questions).

    Optional answers may be omitted or sent as ``null``; both are stored as
    empty strings.
    """

    form_type: Literal["vision"] = "vision"
    phone: str | None = Field(None, max_length=50)
    status: str | None = Field(None, max_length=100)
    project_type: str | None = Field(None, max_length=100)
    budget: str | None = Field(None, max_length=100)
    timeline: str | None = Field(None, max_length=100)
    has_content: str | None = Field(None, max_length=100)
    description: str | None = Field(None, max_length=5000)

    def to_form_data(self) -> dict[str, str | None]:
        return {
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "status": self.status,
            "projectType": self.project_type,
            "budget": self.budget,
            "timeline": self.timeline,
            "hasContent": self.has_content,
            "description": self.description,
            "clientId": self.client_id,
        }


FormSubmission = ContactForm | VisionInquiryForm

FORM_MODELS: dict[str, type[_FormBase]] = {
    "contact": ContactForm,
    "vision": VisionInquiryForm,
}

# The URL decides the variant; a tag in the body is ignored
_TAG_KEYS = {"form_type", "formtype"}


def _alias_lookup(model: type[_FormBase]) -> dict[str, str]:
    """Map lower-cased field names and aliases to the alias pydantic expects."""
    lookup: dict[str, str] = {}
    for name, info in model.model_fields.items():
        alias = info.alias or name
        lookup[name.lower()] = alias
        lookup[alias.lower()] = alias
    return lookup


def parse_form(form_type: str, payload: Any) -> FormSubmission:
    """Validate a raw JSON payload as the given form type.

    Body keys match field names case-insensitively, so ``clientId``,
    ``ClientId`` and ``client_id`` are all accepted.

    Args:
        form_type: Variant tag from the URL (case-insensitive).
        payload: Decoded JSON body.

    Returns:
        The validated form model.

    Raises:
        ValidationAppError: If the form type is unknown or the payload invalid.
    """
    normalized = (form_type or "").lower()
    if normalized not in FORM_MODELS:
        raise ValidationAppError(
            code="unknown_form_type",
            message=f"Unknown form type: '{form_type}'",
            details={"hint": f"Supported form types: {', '.join(sorted(FORM_MODELS))}"},
        )
    if not isinstance(payload, dict):
        raise ValidationAppError(
            code="invalid_request_body",
            message="Invalid request body",
        )

    model = FORM_MODELS[normalized]
    lookup = _alias_lookup(model)
    data: dict[str, Any] = {}
    for key, value in payload.items():
        folded = str(key).lower()
        if folded in _TAG_KEYS:
            continue
        data[lookup.get(folded, key)] = value

    try:
        return model.model_validate(data)  # type: ignore[return-value]
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ()))
        raise ValidationAppError(
            code="invalid_form_field",
            message=f"Invalid value for '{field}': {first.get('msg', 'invalid')}",
            details={"field": field},
        ) from exc
