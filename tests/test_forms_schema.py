"""Tests for form variant parsing and projection."""

import pytest

from app.core.errors import ValidationAppError
from app.schemas.forms import ContactForm, VisionInquiryForm, parse_form


def _contact_payload(**overrides) -> dict:
    payload = {
        "clientId": "portfolio",
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "message": "I'd like to talk about a project.",
    }
    payload.update(overrides)
    return payload


def test_parse_contact_form() -> None:
    form = parse_form("contact", _contact_payload())

    assert isinstance(form, ContactForm)
    assert form.form_type == "contact"
    assert form.to_form_data() == {
        "clientId": "portfolio",
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "message": "I'd like to talk about a project.",
    }


def test_parse_vision_form_is_case_insensitive_and_defaults_optionals() -> None:
    form = parse_form("VISION", {"clientId": "studio", "name": "Grace", "email": "g@x.io", "budget": "10k"})

    assert isinstance(form, VisionInquiryForm)
    data = form.to_form_data()
    assert data["budget"] == "10k"
    assert data["projectType"] is None
    assert list(data) == [
        "name",
        "email",
        "phone",
        "status",
        "projectType",
        "budget",
        "timeline",
        "hasContent",
        "description",
        "clientId",
    ]


def test_body_tag_cannot_override_url_variant() -> None:
    form = parse_form("contact", _contact_payload(formType="vision"))

    assert form.form_type == "contact"


def test_snake_case_keys_are_accepted() -> None:
    payload = _contact_payload()
    payload["client_id"] = payload.pop("clientId")

    assert parse_form("contact", payload).client_id == "portfolio"


def test_unknown_form_type() -> None:
    with pytest.raises(ValidationAppError) as exc_info:
        parse_form("newsletter", _contact_payload())

    assert exc_info.value.code == "unknown_form_type"


def test_non_object_body() -> None:
    with pytest.raises(ValidationAppError) as exc_info:
        parse_form("contact", ["not", "an", "object"])

    assert exc_info.value.code == "invalid_request_body"


@pytest.mark.parametrize(
    ("overrides", "field"),
    [
        ({"clientId": "   "}, "clientId"),
        ({"name": ""}, "name"),
        ({"email": "not-an-email"}, "email"),
        ({"email": "a@b"}, "email"),
        ({"message": ""}, "message"),
        ({"name": "x" * 101}, "name"),
        ({"email": ("x" * 95) + "@ex.com"}, "email"),
        ({"message": "m" * 5001}, "message"),
    ],
)
def test_invalid_fields_are_reported(overrides: dict, field: str) -> None:
    with pytest.raises(ValidationAppError) as exc_info:
        parse_form("contact", _contact_payload(**overrides))

    assert exc_info.value.code == "invalid_form_field"
    assert exc_info.value.details["field"] == field


def test_missing_required_field() -> None:
    payload = _contact_payload()
    del payload["message"]

    with pytest.raises(ValidationAppError) as exc_info:
        parse_form("contact", payload)

    assert exc_info.value.details["field"] == "message"


def test_whitespace_is_stripped() -> None:
    form = parse_form("contact", _contact_payload(name="  Ada  "))

    assert form.name == "Ada"


@pytest.mark.parametrize(
    "keys",
    [
        ("ClientId", "Name", "Email", "Message"),
        ("CLIENTID", "NAME", "EMAIL", "MESSAGE"),
        ("clientid", "name", "email", "message"),
    ],
)
def test_keys_match_case_insensitively(keys: tuple[str, ...]) -> None:
    values = ("portfolio", "Ada", "ada@example.com", "hi")

    form = parse_form("contact", dict(zip(keys, values)))

    assert form.client_id == "portfolio"
    assert form.email == "ada@example.com"
    assert form.message == "hi"


def test_pascal_case_vision_keys() -> None:
    form = parse_form(
        "vision",
        {"ClientId": "studio", "Name": "Grace", "Email": "g@x.io", "ProjectType": "shop", "HasContent": "yes"},
    )

    assert form.project_type == "shop"
    assert form.has_content == "yes"


def test_body_tag_is_ignored_in_any_case() -> None:
    form = parse_form("contact", _contact_payload(FormType="vision"))

    assert form.form_type == "contact"


def test_null_optional_fields_are_accepted() -> None:
    form = parse_form(
        "vision",
        {"clientId": "studio", "name": "Grace", "email": "g@x.io", "phone": None, "budget": None},
    )

    assert form.phone is None
    assert form.to_form_data()["budget"] is None


def test_null_required_field_is_rejected() -> None:
    with pytest.raises(ValidationAppError) as exc_info:
        parse_form("contact", _contact_payload(message=None))

    assert exc_info.value.details["field"] == "message"
