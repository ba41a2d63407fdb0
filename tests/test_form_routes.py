"""Tests for the HTTP surface: forms, submissions, quota, health.

Components are rebuilt per test on a fresh in-memory store and a fake clock
and injected through ``app.dependency_overrides``.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from app.adapters.mail.log_only import LogOnlyMailSender
from app.core.app_factory import create_app
from app.core.dependencies import (
    get_rate_limiter,
    get_store,
    get_submission_recorder,
    get_submission_service,
)
from app.services.rate_limiter import SlidingWindowRateLimiter
from app.services.rate_window import RatePolicy
from app.services.submission_recorder import SubmissionRecorder
from app.services.submission_service import FormSubmissionService

CLIENT_INDEX = "clientId-timestamp-index"
HEADERS = {"X-API-Key": "test-api-key-123"}
POLICIES = {
    "ip": RatePolicy(window_seconds=3600, max_events=3),
    "email": RatePolicy(window_seconds=86400, max_events=5),
}


def _contact(**overrides) -> dict:
    body = {
        "clientId": "portfolio",
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "message": "Hello!",
    }
    body.update(overrides)
    return body


@pytest.fixture
def mail_sender() -> LogOnlyMailSender:
    return LogOnlyMailSender()


@pytest.fixture
def app(memory_store, clock, mail_sender):
    application = create_app()

    limiter = SlidingWindowRateLimiter(memory_store, policies=POLICIES, clock=clock)
    recorder = SubmissionRecorder(memory_store, client_index_name=CLIENT_INDEX, clock=clock)
    service = FormSubmissionService(
        limiter=limiter,
        recorder=recorder,
        mail_sender=mail_sender,
        client_emails={"portfolio": "owner@example.com", "studio": "hello@studio.dev"},
    )

    application.dependency_overrides[get_store] = lambda: memory_store
    application.dependency_overrides[get_rate_limiter] = lambda: limiter
    application.dependency_overrides[get_submission_recorder] = lambda: recorder
    application.dependency_overrides[get_submission_service] = lambda: service
    return application


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


class TestSubmitForm:
    def test_contact_submission_succeeds(self, client: TestClient) -> None:
        resp = client.post("/v1/forms/contact", json=_contact(), headers=HEADERS)

        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["message"] == "Email sent successfully"
        assert data["message_id"].startswith("local-")
        assert data["submission_id"]

    def test_vision_submission_succeeds(self, client: TestClient) -> None:
        body = {
            "clientId": "studio",
            "name": "Grace",
            "email": "grace@example.com",
            "projectType": "e-commerce",
            "description": "New shop",
        }
        resp = client.post("/v1/forms/vision", json=body, headers=HEADERS)

        assert resp.status_code == 200
        record = client.get(f"/v1/submissions/{resp.json()['submission_id']}", headers=HEADERS).json()
        assert record["form_type"] == "vision"
        assert record["fields"]["projectType"] == "e-commerce"

    def test_missing_api_key_is_forbidden(self, client: TestClient, memory_store) -> None:
        resp = client.post("/v1/forms/contact", json=_contact())

        assert resp.status_code == 403
        assert memory_store.get("ip:testclient") is None

    def test_invalid_api_key_is_forbidden(self, client: TestClient) -> None:
        resp = client.post("/v1/forms/contact", json=_contact(), headers={"X-API-Key": "nope"})

        assert resp.status_code == 403

    def test_invalid_field_returns_400(self, client: TestClient) -> None:
        resp = client.post("/v1/forms/contact", json=_contact(email="bad"), headers=HEADERS)

        assert resp.status_code == 400
        error = resp.json()["error"]
        assert error["code"] == "invalid_form_field"
        assert error["details"]["field"] == "email"
        assert "request_id" in error

    def test_unknown_form_type_returns_400(self, client: TestClient) -> None:
        resp = client.post("/v1/forms/newsletter", json=_contact(), headers=HEADERS)

        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "unknown_form_type"

    def test_unknown_client_returns_400(self, client: TestClient) -> None:
        resp = client.post("/v1/forms/contact", json=_contact(clientId="stranger"), headers=HEADERS)

        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "Invalid client ID"

    def test_ip_limit_returns_429_with_headers(self, client: TestClient) -> None:
        headers = {**HEADERS, "X-Forwarded-For": "198.51.100.9, 10.0.0.1"}
        for _ in range(3):
            assert client.post("/v1/forms/contact", json=_contact(), headers=headers).status_code == 200

        resp = client.post("/v1/forms/contact", json=_contact(), headers=headers)

        assert resp.status_code == 429
        assert resp.headers["Retry-After"] == "3600"
        assert resp.headers["X-RateLimit-Limit"] == "3"

        other_ip = {**HEADERS, "X-Forwarded-For": "198.51.100.10"}
        assert client.post("/v1/forms/contact", json=_contact(), headers=other_ip).status_code == 200

    def test_client_email_limit_returns_429(self, client: TestClient) -> None:
        for i in range(5):
            headers = {**HEADERS, "X-Forwarded-For": f"192.0.2.{i}"}
            assert client.post("/v1/forms/contact", json=_contact(), headers=headers).status_code == 200

        resp = client.post(
            "/v1/forms/contact",
            json=_contact(),
            headers={**HEADERS, "X-Forwarded-For": "192.0.2.99"},
        )

        assert resp.status_code == 429
        assert resp.json()["error"]["code"] == "email_rate_limited"
        assert resp.headers["Retry-After"] == "86400"

    def test_delivery_failure_returns_502(self, client: TestClient, mail_sender) -> None:
        mail_sender.send = AsyncMock(side_effect=RuntimeError("smtp down"))

        resp = client.post("/v1/forms/contact", json=_contact(), headers=HEADERS)

        assert resp.status_code == 502
        assert resp.json()["error"]["code"] == "delivery_failed"
        listed = client.get("/v1/clients/portfolio/submissions", headers=HEADERS).json()
        assert listed["count"] == 1
        assert listed["items"][0]["message_id"] is None

    @pytest.mark.parametrize("body", [[1, 2], "text", 42])
    def test_non_object_body_returns_400(self, client: TestClient, body) -> None:
        resp = client.post("/v1/forms/contact", json=body, headers=HEADERS)

        assert resp.status_code == 400
        error = resp.json()["error"]
        assert error["code"] == "invalid_request_body"
        assert error["message"] == "Invalid request body"

    def test_malformed_json_returns_400(self, client: TestClient) -> None:
        resp = client.post(
            "/v1/forms/contact",
            content=b"{not json",
            headers={**HEADERS, "Content-Type": "application/json"},
        )

        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "invalid_request_body"

    def test_pascal_case_keys_are_accepted(self, client: TestClient) -> None:
        body = {"ClientId": "portfolio", "Name": "Ada", "Email": "ada@example.com", "Message": "Hi"}

        resp = client.post("/v1/forms/contact", json=body, headers=HEADERS)

        assert resp.status_code == 200
        record = client.get(f"/v1/submissions/{resp.json()['submission_id']}", headers=HEADERS).json()
        assert record["client_id"] == "portfolio"
        assert record["fields"]["message"] == "Hi"

    def test_null_optional_fields_are_stored_blank(self, client: TestClient) -> None:
        body = {"clientId": "studio", "name": "Grace", "email": "g@x.io", "phone": None, "budget": None}

        resp = client.post("/v1/forms/vision", json=body, headers=HEADERS)

        assert resp.status_code == 200
        record = client.get(f"/v1/submissions/{resp.json()['submission_id']}", headers=HEADERS).json()
        assert record["fields"]["phone"] == ""
        assert record["fields"]["budget"] == ""


class TestSubmissions:
    def test_get_unknown_submission_returns_404(self, client: TestClient) -> None:
        resp = client.get("/v1/submissions/does-not-exist", headers=HEADERS)

        assert resp.status_code == 404

    def test_list_client_submissions_newest_first(self, client: TestClient, clock) -> None:
        ids = []
        for i in range(3):
            resp = client.post(
                "/v1/forms/contact",
                json=_contact(message=f"message {i}"),
                headers={**HEADERS, "X-Forwarded-For": f"203.0.113.{i}"},
            )
            ids.append(resp.json()["submission_id"])
            clock.advance(10)

        resp = client.get("/v1/clients/portfolio/submissions?limit=2", headers=HEADERS)

        assert resp.status_code == 200
        data = resp.json()
        assert data["count"] == 2
        assert [item["submission_id"] for item in data["items"]] == [ids[2], ids[1]]
        assert data["items"][0]["fields"]["message"] == "message 2"

    def test_invalid_limit_returns_400(self, client: TestClient) -> None:
        resp = client.get("/v1/clients/portfolio/submissions?limit=0", headers=HEADERS)

        assert resp.status_code == 400
        error = resp.json()["error"]
        assert error["code"] == "invalid_request"
        assert error["details"] == {"field": "limit"}

    def test_submission_endpoints_require_api_key(self, client: TestClient) -> None:
        assert client.get("/v1/submissions/x").status_code == 403
        assert client.get("/v1/clients/portfolio/submissions").status_code == 403


class TestQuota:
    def test_quota_does_not_consume(self, client: TestClient) -> None:
        headers = {**HEADERS, "X-Forwarded-For": "198.51.100.50"}

        first = client.get("/v1/quota", headers=headers).json()
        second = client.get("/v1/quota", headers=headers).json()

        assert first == second
        assert first["ip_remaining"] == 3
        assert first["ip_limit"] == 3
        assert first["client_id"] is None

    def test_quota_reflects_submissions(self, client: TestClient) -> None:
        headers = {**HEADERS, "X-Forwarded-For": "198.51.100.51"}
        client.post("/v1/forms/contact", json=_contact(), headers=headers)

        data = client.get("/v1/quota?client_id=portfolio", headers=headers).json()

        assert data["ip_remaining"] == 2
        assert data["client_id"] == "portfolio"
        assert data["email_remaining"] == 4
        assert data["email_window_seconds"] == 86400


class TestHealth:
    def test_health_reports_storage(self, client: TestClient) -> None:
        resp = client.get("/health")

        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "storage": "enabled"}

    def test_health_with_storage_disabled(self, app) -> None:
        app.dependency_overrides[get_store] = lambda: None

        resp = TestClient(app).get("/health")

        assert resp.json()["storage"] == "disabled"
