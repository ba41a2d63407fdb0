"""Form submission flow: throttle, notify, audit.

The per-IP limit is enforced by the HTTP dependency before a submission
reaches this service. Here the client's daily email budget is consumed, the
notification is handed to the mail sender, and the outcome is recorded.
Recording never blocks or rolls back delivery.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from app.adapters.mail.base import AbstractMailSender, OutboundEmail
from app.core.config import MailSettings, settings
from app.core.errors import DeliveryAppError, RateLimitAppError, ValidationAppError
from app.schemas.forms import FormSubmission
from app.services.rate_limiter import SlidingWindowRateLimiter
from app.services.rate_window import EMAIL_KIND
from app.services.submission_recorder import SubmissionRecorder

logger = logging.getLogger(__name__)

SUBJECTS = {
    "contact": "New Contact Form Submission",
    "vision": "New Vision Project Inquiry",
}


def parse_client_email_mappings(mappings: str | None) -> dict[str, str]:
    """Parse ``clientId:recipient`` pairs separated by commas.

    Examples:
        >>> parse_client_email_mappings("acme:a@acme.io, blog:me@blog.dev")
        {'acme': 'a@acme.io', 'blog': 'me@blog.dev'}
        >>> parse_client_email_mappings("broken,also:bad:pair")
        {}
    """
    result: dict[str, str] = {}
    if not mappings or not mappings.strip():
        return result

    for pair in mappings.split(","):
        parts = [p.strip() for p in pair.split(":")]
        if len(parts) != 2 or not all(parts):
            continue
        result[parts[0]] = parts[1]
    return result


def build_notification_text(form: FormSubmission, sent_at: datetime) -> str:
    lines = [f"New {form.form_type} form submission from {form.client_id}", ""]
    lines.extend(f"{name}: {value or ''}" for name, value in form.to_form_data().items())
    lines.extend(
        [
            "",
            "---",
            f"Sent: {sent_at.strftime('%Y-%m-%d %H:%M:%S UTC')}",
            f"Client: {form.client_id}",
        ]
    )
    return "\n".join(lines)


@dataclass(frozen=True)
class SubmissionOutcome:
    message_id: str
    submission_id: str


class FormSubmissionService:
    """Coordinate the client email limit, delivery and audit recording."""

    def __init__(
        self,
        *,
        limiter: SlidingWindowRateLimiter,
        recorder: SubmissionRecorder,
        mail_sender: AbstractMailSender,
        client_emails: dict[str, str],
        mail_settings: MailSettings | None = None,
    ) -> None:
        self._limiter = limiter
        self._recorder = recorder
        self._mail_sender = mail_sender
        self._client_emails = client_emails
        self._mail = mail_settings or settings.mail

    def recipient_for(self, client_id: str) -> str:
        """Resolve the notification recipient for a client.

        Raises:
            ValidationAppError: If the client id is not configured.
        """
        recipient = self._client_emails.get(client_id)
        if recipient is None:
            logger.warning("submission.unknown_client", extra={"client_id": client_id})
            raise ValidationAppError(
                code="invalid_client_id",
                message="Invalid client ID",
                details={"client_id": client_id},
            )
        return recipient

    def build_email(self, form: FormSubmission, recipient: str) -> OutboundEmail:
        subject = SUBJECTS.get(form.form_type, "New Form Submission")
        if self._mail.subject_prefix:
            subject = f"{self._mail.subject_prefix} {subject}"
        return OutboundEmail(
            sender=self._mail.verified_sender,
            to=[recipient],
            subject=subject,
            text_body=build_notification_text(form, datetime.now(timezone.utc)),
            reply_to=[form.email],
        )

    async def submit(self, form: FormSubmission, source_ip: str) -> SubmissionOutcome:
        """Deliver and record one validated submission.

        Args:
            form: Validated form variant.
            source_ip: Caller IP address (already admitted by the IP limit).

        Returns:
            SubmissionOutcome with the sender message id and audit record id.

        Raises:
            ValidationAppError: Unknown client id.
            RateLimitAppError: Client exhausted its email budget.
            DeliveryAppError: The mail sender failed; the attempt is still recorded.
        """
        recipient = self.recipient_for(form.client_id)

        if not self._limiter.check_client(form.client_id):
            policy = self._limiter.policy(EMAIL_KIND)
            raise RateLimitAppError(
                code="email_rate_limited",
                message="Daily email limit reached for this client. Try again later.",
                details={
                    "limit": policy.max_events,
                    "remaining": 0,
                    "retry_after": policy.window_seconds,
                },
            )

        email = self.build_email(form, recipient)
        try:
            message_id = await self._mail_sender.send(email)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "submission.delivery_failed",
                extra={
                    "form_type": form.form_type,
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )
            self._recorder.record(form, source_ip)
            raise DeliveryAppError(
                code="delivery_failed",
                message="The notification email could not be sent",
            ) from exc

        submission_id = self._recorder.record(form, source_ip, message_id)
        logger.info(
            "submission.accepted",
            extra={
                "form_type": form.form_type,
                "message_id": message_id,
                "submission_id": submission_id,
            },
        )
        return SubmissionOutcome(message_id=message_id, submission_id=submission_id)
