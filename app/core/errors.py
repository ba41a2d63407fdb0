"""Application-level exception types.

Domain errors shared by services, adapters and the HTTP layer. Store errors
are raised by adapters only; the rate limiter, quota inspector and submission
recorder recover from them locally and never let them reach a caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    code: str
    message: str
    hint: str
    field: str
    client_id: str
    limit: int
    remaining: int
    retry_after: int
    backend: str
    index_name: str
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class AuthenticationAppError(AppError):
    """Raised when authentication/authorization fails."""


class RateLimitAppError(AppError):
    """Raised when a client exhausted its notification email window."""


class DeliveryAppError(AppError):
    """Raised when the notification email could not be handed to the sender."""


class StoreError(AppError):
    """Raised by key-value store adapters on backend or data failures."""
