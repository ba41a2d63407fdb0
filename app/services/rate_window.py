"""Sliding-window primitives shared by the rate limiter and quota inspector.

A rate window is stored as one item per subject::

    {"pk": "ip:203.0.113.7", "timestamps": [1718000000, ...], "ttl": 1718007200}

``timestamps`` is rewritten in full on every accepted event. Entries older
than the window are dropped on that write; otherwise they linger until the
store expires the whole item at ``ttl``.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Any, Iterable

from app.core.config import AppSettings, settings

IP_KIND = "ip"
EMAIL_KIND = "email"


@dataclass(frozen=True)
class RatePolicy:
    """Window length and event budget for one subject kind."""

    window_seconds: int
    max_events: int

    def __post_init__(self) -> None:
        if self.window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")
        if self.max_events < 1:
            raise ValueError("max_events must be >= 1")


def policies_from_settings(app_settings: AppSettings | None = None) -> dict[str, RatePolicy]:
    """Build the per-kind policies from configuration."""
    cfg = app_settings or settings.app
    return {
        IP_KIND: RatePolicy(
            window_seconds=cfg.ip_window_seconds,
            max_events=cfg.ip_max_requests_per_hour,
        ),
        EMAIL_KIND: RatePolicy(
            window_seconds=cfg.email_window_seconds,
            max_events=cfg.email_max_per_day,
        ),
    }


def resolve_policy(
    policies: dict[str, RatePolicy],
    kind: str,
    window_seconds: int | None,
    max_events: int | None,
) -> RatePolicy:
    """Merge explicit overrides onto the configured policy for ``kind``."""
    base = policies.get(kind)
    if base is None and (window_seconds is None or max_events is None):
        raise ValueError(f"no rate policy configured for subject kind '{kind}'")
    return RatePolicy(
        window_seconds=window_seconds if window_seconds is not None else base.window_seconds,
        max_events=max_events if max_events is not None else base.max_events,
    )


def subject_key(kind: str, identifier: str) -> str:
    return f"{kind}:{identifier}"


def hash_subject(key: str) -> str:
    """Hash a subject key for logging without exposing IPs or client ids."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


def live_timestamps(item: dict[str, Any] | None, window_start: int) -> list[int]:
    """Return stored timestamps strictly newer than ``window_start``.

    Raises:
        ValueError: If the stored list is malformed.
        TypeError: If the stored list is malformed.
    """
    if not item:
        return []
    raw: Iterable[Any] = item.get("timestamps") or []
    if isinstance(raw, (str, bytes)) or not isinstance(raw, (list, tuple)):
        raise TypeError("timestamps attribute must be a list")
    return [ts for ts in (int(v) for v in raw) if ts > window_start]
