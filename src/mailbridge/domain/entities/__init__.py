"""Domain entities for MailBridge."""

from mailbridge.domain.entities.email import EmailSendResult, InboundEmail, OutboundEmail
from mailbridge.domain.entities.user import User

__all__ = [
    "EmailSendResult",
    "InboundEmail",
    "OutboundEmail",
    "User",
]
