"""Mail adapter layer - abstracts over the notification transport."""

from app.adapters.mail.base import AbstractMailSender, OutboundEmail
from app.adapters.mail.log_only import LogOnlyMailSender

__all__ = [
    "AbstractMailSender",
    "LogOnlyMailSender",
    "OutboundEmail",
]
