"""Durable audit trail of accepted form submissions.

Every accepted submission is written once under ``submission:<uuid>`` as a
fixed envelope plus one ``field_<name>`` attribute per form field, so any form
type shares the same record shape. Records are never updated or deleted.

Storage failures never fail the request: ``record`` logs and returns ``""``,
and the query methods return empty results.
"""

from __future__ import annotations

import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Protocol

from app.adapters.store.base import AbstractKeyValueStore
from app.core.config import settings

logger = logging.getLogger(__name__)

SUBMISSION_PREFIX = "submission:"
FIELD_PREFIX = "field_"
DEFAULT_QUERY_LIMIT = 100


class FormSnapshot(Protocol):
    """Projection every form variant exposes to the recorder."""

    client_id: str

    @property
    def form_type(self) -> str: ...

    def to_form_data(self) -> dict[str, str | None]: ...


def _new_submission_id() -> str:
    return str(uuid.uuid4())


def submission_key(submission_id: str) -> str:
    return f"{SUBMISSION_PREFIX}{submission_id}"


def extract_fields(item: dict[str, Any]) -> dict[str, str]:
    """Return the original form fields of a stored record, unprefixed."""
    return {
        name[len(FIELD_PREFIX):]: value
        for name, value in item.items()
        if name.startswith(FIELD_PREFIX)
    }


class SubmissionRecorder:
    """Write and read immutable submission records."""

    def __init__(
        self,
        store: AbstractKeyValueStore | None,
        *,
        client_index_name: str | None = None,
        clock: Callable[[], float] = time.time,
        id_factory: Callable[[], str] = _new_submission_id,
    ) -> None:
        self._store = store
        self._client_index_name = client_index_name or settings.store.client_index_name
        self._clock = clock
        self._id_factory = id_factory

    @property
    def enabled(self) -> bool:
        return self._store is not None

    def build_item(
        self,
        submission_id: str,
        form: FormSnapshot,
        source_ip: str,
        external_message_id: str | None,
    ) -> dict[str, Any]:
        """Assemble the stored envelope for one submission."""
        now = self._clock()
        item: dict[str, Any] = {
            "pk": submission_key(submission_id),
            "submissionId": submission_id,
            "timestamp": int(now),
            "timestampIso": datetime.fromtimestamp(now, tz=timezone.utc).isoformat(),
            "ipAddress": source_ip,
            "clientId": form.client_id,
            "formType": form.form_type,
        }
        if external_message_id:
            item["sesMessageId"] = external_message_id

        for name, value in form.to_form_data().items():
            item[f"{FIELD_PREFIX}{name}"] = "" if value is None else str(value)
        return item

    def record(
        self,
        form: FormSnapshot,
        source_ip: str,
        external_message_id: str | None = None,
    ) -> str:
        """Persist one submission.

        Args:
            form: Validated form exposing ``client_id``, ``form_type`` and
                ``to_form_data()``.
            source_ip: Caller IP address.
            external_message_id: Message id returned by the mail sender, if any.

        Returns:
            The new submission id, or ``""`` if storage is disabled or failed.
        """
        if self._store is None:
            logger.warning(
                "submission.store_skipped",
                extra={"reason": "store_not_configured", "form_type": form.form_type},
            )
            return ""

        submission_id = self._id_factory()
        try:
            item = self.build_item(submission_id, form, source_ip, external_message_id)
            self._store.put(submission_key(submission_id), item)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "submission.store_failed",
                extra={
                    "form_type": form.form_type,
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )
            return ""

        logger.info(
            "submission.stored",
            extra={
                "submission_id": submission_id,
                "form_type": form.form_type,
                "has_message_id": bool(external_message_id),
            },
        )
        return submission_id

    def get_by_id(self, submission_id: str) -> dict[str, Any] | None:
        """Fetch one record, or None if missing, disabled or on error."""
        if self._store is None or not submission_id:
            return None

        try:
            return self._store.get(submission_key(submission_id))
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "submission.get_failed",
                extra={
                    "submission_id": submission_id,
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )
            return None

    def get_by_client(self, client_id: str, limit: int = DEFAULT_QUERY_LIMIT) -> list[dict[str, Any]]:
        """Fetch a client's records, newest first.

        Returns:
            Up to ``limit`` records; empty when disabled or on error.
        """
        if self._store is None or limit < 1:
            return []

        try:
            return self._store.query(
                self._client_index_name,
                client_id,
                descending=True,
                limit=limit,
            )
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "submission.query_failed",
                extra={
                    "index_name": self._client_index_name,
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )
            return []
