"""Component providers for FastAPI routes.

The store is cached in-module so the in-memory backend keeps its state
across requests. If the store configuration changes (primarily in tests) it
is rebuilt. Services are cheap and built per request on top of it; tests
swap them through ``app.dependency_overrides``.
"""

from __future__ import annotations

from app.adapters.mail.base import AbstractMailSender
from app.adapters.mail.log_only import LogOnlyMailSender
from app.adapters.store.base import AbstractKeyValueStore
from app.adapters.store.factory import create_store
from app.core.config import settings
from app.services.rate_limiter import SlidingWindowRateLimiter
from app.services.rate_window import policies_from_settings
from app.services.submission_recorder import SubmissionRecorder
from app.services.submission_service import FormSubmissionService, parse_client_email_mappings

_store: AbstractKeyValueStore | None = None
_store_config: tuple[str, str, str, str] | None = None
_mail_sender: AbstractMailSender | None = None


def get_store() -> AbstractKeyValueStore | None:
    """Return the process-wide store, or None when storage is disabled."""

    global _store, _store_config

    config = (
        settings.store.backend,
        settings.store.table_name,
        settings.store.redis_url,
        settings.store.client_index_name,
    )
    if _store_config != config:
        _store = create_store(settings.store)
        _store_config = config
    return _store


def reset_store() -> None:
    """Drop the cached store so the next call rebuilds it."""

    global _store, _store_config
    _store = None
    _store_config = None


def get_rate_limiter() -> SlidingWindowRateLimiter:
    return SlidingWindowRateLimiter(get_store(), policies=policies_from_settings(settings.app))


def get_submission_recorder() -> SubmissionRecorder:
    return SubmissionRecorder(get_store(), client_index_name=settings.store.client_index_name)


def get_mail_sender() -> AbstractMailSender:
    global _mail_sender
    if _mail_sender is None:
        _mail_sender = LogOnlyMailSender()
    return _mail_sender


def get_submission_service() -> FormSubmissionService:
    return FormSubmissionService(
        limiter=get_rate_limiter(),
        recorder=get_submission_recorder(),
        mail_sender=get_mail_sender(),
        client_emails=parse_client_email_mappings(settings.app.client_email_mappings),
        mail_settings=settings.mail,
    )
