"""Email provider adapters."""

from mailbridge.infrastructure.services.email.email_provider import EmailProvider
from mailbridge.infrastructure.services.email.logging_provider import LoggingEmailProvider
from mailbridge.infrastructure.services.email.resend_provider import (
    ResendProvider,
    ResendSettings,
)

__all__ = [
    "EmailProvider",
    "LoggingEmailProvider",
    "ResendProvider",
    "ResendSettings",
]
