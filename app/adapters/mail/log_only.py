"""Mail sender that only logs; the default until a transport is wired in."""

from __future__ import annotations

import logging
import uuid

from app.adapters.mail.base import AbstractMailSender, OutboundEmail

logger = logging.getLogger(__name__)


class LogOnlyMailSender(AbstractMailSender):
    """Accept every email, log its envelope and return a synthetic id."""

    async def send(self, email: OutboundEmail) -> str:
        message_id = f"local-{uuid.uuid4()}"
        logger.info(
            "mail.logged",
            extra={
                "message_id": message_id,
                "recipient_count": len(email.to),
                "subject": email.subject,
                "body_chars": len(email.text_body),
            },
        )
        return message_id
