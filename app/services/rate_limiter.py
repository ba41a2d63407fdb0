"""Sliding-window rate limiter over the shared key-value store.

Each accepted event appends ``now`` to the subject's timestamp list and
rewrites the whole list. Rejected attempts are not recorded.

Limits are soft: concurrent invocations may read the same list, both admit,
and the last write wins. The store is never locked.

Any store or parsing failure admits the request (fail-open) so an unavailable
store never blocks legitimate traffic.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from app.adapters.store.base import AbstractKeyValueStore
from app.services.quota_inspector import QuotaInspector
from app.services.rate_window import (
    EMAIL_KIND,
    IP_KIND,
    RatePolicy,
    hash_subject,
    live_timestamps,
    policies_from_settings,
    resolve_policy,
    subject_key,
)

logger = logging.getLogger(__name__)


class SlidingWindowRateLimiter:
    """Per-subject sliding-window limiter.

    Args:
        store: Shared store, or None to disable limiting (always admits).
        policies: Window/budget per subject kind; defaults to configuration.
        clock: Time source function returning UNIX time in seconds.
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
        self._inspector = QuotaInspector(store, policies=self._policies, clock=clock)

    @property
    def enabled(self) -> bool:
        return self._store is not None

    def policy(self, kind: str) -> RatePolicy:
        return resolve_policy(self._policies, kind, None, None)

    def admit(
        self,
        kind: str,
        identifier: str,
        window_seconds: int | None = None,
        max_events: int | None = None,
    ) -> bool:
        """Record one event for the subject if its window has room.

        Args:
            kind: Subject kind (``"ip"`` or ``"email"``).
            identifier: IP address or client id.
            window_seconds: Override for the configured window length.
            max_events: Override for the configured event budget.

        Returns:
            True if admitted (or on any infrastructure failure), False if the
            subject already has ``max_events`` events inside the window.

        Raises:
            ValueError: If ``kind`` has no policy and no overrides are given,
                or an override is below 1. Infrastructure errors never raise.
        """
        policy = resolve_policy(self._policies, kind, window_seconds, max_events)

        if self._store is None:
            return True

        now = int(self._clock())
        window_start = now - policy.window_seconds
        key = subject_key(kind, identifier)
        key_hash = hash_subject(key)

        try:
            live = live_timestamps(self._store.get(key), window_start)

            if len(live) >= policy.max_events:
                logger.warning(
                    "rate_limit.rejected",
                    extra={
                        "subject_kind": kind,
                        "subject_hash": key_hash,
                        "limit": policy.max_events,
                        "window_s": policy.window_seconds,
                        "live_count": len(live),
                    },
                )
                return False

            live.append(now)
            self._store.put(
                key,
                {"pk": key, "timestamps": live, "ttl": now + 2 * policy.window_seconds},
                expires_at=now + 2 * policy.window_seconds,
            )
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "rate_limit.check_failed",
                extra={
                    "subject_kind": kind,
                    "subject_hash": key_hash,
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                    "fail_open": True,
                },
            )
            return True

        logger.info(
            "rate_limit.admitted",
            extra={
                "subject_kind": kind,
                "subject_hash": key_hash,
                "limit": policy.max_events,
                "remaining": max(0, policy.max_events - len(live)),
                "window_s": policy.window_seconds,
            },
        )
        return True

    def remaining(
        self,
        kind: str,
        identifier: str,
        window_seconds: int | None = None,
        max_events: int | None = None,
    ) -> int:
        """Remaining events for the subject; never writes."""
        return self._inspector.remaining(kind, identifier, window_seconds, max_events)

    def check_ip(self, ip_address: str) -> bool:
        return self.admit(IP_KIND, ip_address)

    def check_client(self, client_id: str) -> bool:
        return self.admit(EMAIL_KIND, client_id)
