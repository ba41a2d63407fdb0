from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class OutboundEmail:
    """A notification ready to hand to a transport."""

    sender: str
    to: list[str]
    subject: str
    text_body: str
    reply_to: list[str] = field(default_factory=list)


class AbstractMailSender(ABC):
    """Interface for notification transports."""

    @abstractmethod
    async def send(self, email: OutboundEmail) -> str:
        """Hand an email to the transport.

        Args:
            email: Fully addressed notification.

        Returns:
            str: Transport message id used to correlate the audit record.

        Raises:
            DeliveryAppError: If the transport rejects or cannot accept the email.
        """
        ...
