"""Infrastructure services for MailBridge."""

from mailbridge.infrastructure.services.email_service import EmailService, create_email_service

__all__ = ["EmailService", "create_email_service"]
