"""Application services orchestrating domain rules and persistence."""

from mailbridge.application.services.auth_service import (
    AuthenticationError,
    AuthService,
    AuthServiceError,
    IssuedToken,
    Registration,
    RegistrationError,
)
from mailbridge.application.services.inbound_email_service import (
    InboundEmailService,
    clean_html,
    clean_text,
    generate_message_id,
    split_mailbox,
)

__all__ = [
    "AuthService",
    "AuthServiceError",
    "AuthenticationError",
    "InboundEmailService",
    "IssuedToken",
    "Registration",
    "RegistrationError",
    "clean_html",
    "clean_text",
    "generate_message_id",
    "split_mailbox",
]
