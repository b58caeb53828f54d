"""Resend email provider implementation.

Uses the Resend Python SDK for email sending via Resend API.
"""

import asyncio
from typing import Any

import resend
from pydantic import BaseModel, ConfigDict

from mailbridge.core.logging import get_logger
from mailbridge.domain.entities import OutboundEmail
from mailbridge.infrastructure.resilience.dispatch import (
    DispatchError,
    ErrorKind,
    classify_error,
)
from mailbridge.infrastructure.services.email.email_provider import EmailProvider

logger = get_logger(__name__)

DEFAULT_TEXT_BODY = "This email was sent via Resend service."

# Resend error_type values that also come with an HTTP status we may not see
_ERROR_TYPE_KINDS = {
    "rate_limit_exceeded": ErrorKind.RATE_LIMITED,
    "daily_quota_exceeded": ErrorKind.RATE_LIMITED,
    "application_error": ErrorKind.SERVER_ERROR,
    "internal_server_error": ErrorKind.SERVER_ERROR,
    "validation_error": ErrorKind.VALIDATION,
    "missing_required_field": ErrorKind.VALIDATION,
    "invalid_from_address": ErrorKind.VALIDATION,
    "missing_api_key": ErrorKind.AUTHENTICATION,
    "invalid_api_key": ErrorKind.AUTHENTICATION,
    "restricted_api_key": ErrorKind.AUTHENTICATION,
}


class ResendSettings(BaseModel):
    """Configuration settings for the Resend provider."""

    model_config = ConfigDict(from_attributes=True)

    api_key: str
    from_email: str
    reply_to: str | None = None


def to_dispatch_error(error: Exception) -> DispatchError:
    """Translate a Resend SDK or transport exception into a ``DispatchError``."""
    if isinstance(error, DispatchError):
        return error

    status = getattr(error, "code", None)
    if not isinstance(status, int):
        status = None

    error_type = getattr(error, "error_type", None)
    kind = _ERROR_TYPE_KINDS.get(error_type) if isinstance(error_type, str) else None
    if kind is None:
        kind = classify_error(error, status=status)

    message = getattr(error, "message", None) or str(error) or type(error).__name__
    return DispatchError(str(message), kind=kind, status=status)


class ResendProvider(EmailProvider):
    """Resend email provider implementation.

    Sends emails using the Resend API via the Resend Python SDK.
    """

    name = "resend"

    def __init__(self, settings: ResendSettings) -> None:
        """Initialize the Resend provider.

        Args:
            settings: Resend configuration settings.
        """
        if not settings.api_key:
            raise ValueError("Resend API key is required")
        self.settings = settings
        # Set the API key for the Resend SDK
        resend.api_key = settings.api_key

    def _build_params(self, message: OutboundEmail) -> dict[str, Any]:
        params: dict[str, Any] = {
            "from": message.from_address or self.settings.from_email,
            "to": list(message.to),
            "subject": message.subject,
        }

        if message.html:
            params["html"] = message.html
        if message.text:
            params["text"] = message.text
        # Resend requires at least one body
        if not message.html and not message.text:
            params["text"] = DEFAULT_TEXT_BODY

        if message.cc:
            params["cc"] = list(message.cc)
        if message.bcc:
            params["bcc"] = list(message.bcc)
        reply_addr = message.reply_to or self.settings.reply_to
        if reply_addr:
            params["reply_to"] = reply_addr
        if message.tags:
            params["tags"] = list(message.tags)
        if message.headers:
            params["headers"] = dict(message.headers)

        return params

    async def send(self, message: OutboundEmail) -> str:
        """Send an email via Resend.

        Args:
            message: The email to send.

        Returns:
            The Resend email id.

        Raises:
            DispatchError: If Resend rejected the message or could not be reached.
        """
        params = self._build_params(message)

        try:
            # Resend SDK is synchronous, so we run it in a thread pool
            response = await asyncio.to_thread(resend.Emails.send, params)
        except Exception as e:
            error = to_dispatch_error(e)
            logger.error(
                "Resend API error",
                error=error.message,
                kind=error.kind.value,
                status=error.status,
                to=message.primary_recipient,
            )
            raise error from e

        email_id = response.get("id") if isinstance(response, dict) else getattr(response, "id", None)
        if not email_id:
            raise DispatchError(
                "Resend response did not include an email id",
                kind=ErrorKind.SERVER_ERROR,
            )

        logger.info("Email sent via Resend", email_id=email_id, to=message.primary_recipient)
        return str(email_id)

    async def test_connection(self) -> tuple[bool, str | None]:
        """Test the Resend connection and API key.

        The SDK has no ping endpoint, so listing domains is used to validate
        the key.
        """
        try:
            response = await asyncio.to_thread(resend.Domains.list)
        except Exception as e:
            error = to_dispatch_error(e)
            logger.error("Resend connection test failed", error=error.message)
            if error.kind == ErrorKind.AUTHENTICATION:
                return False, "Resend connection failed: Invalid API key"
            if error.kind == ErrorKind.RATE_LIMITED:
                return False, "Resend connection failed: Rate limit exceeded"
            return False, f"Resend connection failed: {error.message}"

        logger.info(
            "Resend connection test successful",
            domains_count=len(response.get("data", [])) if isinstance(response, dict) else 0,
        )
        return True, "Resend connection successful"
