"""Read-only view of how much of a subject's window is still available."""

from __future__ import annotations

import logging
import time
from typing import Callable

from app.adapters.store.base import AbstractKeyValueStore
from app.services.rate_window import (
    RatePolicy,
    hash_subject,
    live_timestamps,
    policies_from_settings,
    resolve_policy,
    subject_key,
)

logger = logging.getLogger(__name__)


class QuotaInspector:
    """Report remaining quota without ever writing to the store.

    Any failure (missing store, missing record, backend error, malformed
    record) yields the full budget.
    """

    def __init__(
        self,
        store: AbstractKeyValueStore | None,
        *,
        policies: dict[str, RatePolicy] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._policies = policies if policies is not None else policies_from_settings()
        self._clock = clock

    def remaining(
        self,
        kind: str,
        identifier: str,
        window_seconds: int | None = None,
        max_events: int | None = None,
    ) -> int:
        """Return ``max(0, max_events - live_count)`` for the subject.

        Args:
            kind: Subject kind (``"ip"`` or ``"email"``).
            identifier: IP address or client id.
            window_seconds: Override for the configured window length.
            max_events: Override for the configured event budget.

        Returns:
            Remaining events in the current window.

        Raises:
            ValueError: If ``kind`` has no policy and no overrides are given,
                or an override is below 1.
        """
        policy = resolve_policy(self._policies, kind, window_seconds, max_events)

        if self._store is None:
            return policy.max_events

        now = int(self._clock())
        window_start = now - policy.window_seconds
        key = subject_key(kind, identifier)

        try:
            item = self._store.get(key)
            live = live_timestamps(item, window_start)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "quota.inspect_failed",
                extra={
                    "subject_kind": kind,
                    "subject_hash": hash_subject(key),
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )
            return policy.max_events

        return max(0, policy.max_events - len(live))
