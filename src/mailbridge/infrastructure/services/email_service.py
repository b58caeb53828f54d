"""Email service for sending outbound mail.

Wraps an :class:`EmailProvider` in the resilient dispatch facade and converts
every outcome into an :class:`EmailSendResult`, so callers never see a
provider exception.
"""

import asyncio
import re
from typing import Any

from mailbridge.core.config import Settings
from mailbridge.core.logging import get_logger
from mailbridge.domain.entities import EmailSendResult, OutboundEmail
from mailbridge.infrastructure.resilience import (
    BreakerConfig,
    CircuitOpenError,
    ResilientDispatchFacade,
    RetryConfig,
)
from mailbridge.infrastructure.services.email.email_provider import EmailProvider
from mailbridge.infrastructure.services.email.logging_provider import LoggingEmailProvider
from mailbridge.infrastructure.services.email.resend_provider import (
    ResendProvider,
    ResendSettings,
)

logger = get_logger(__name__)

BULK_BATCH_SIZE = 100
BULK_BATCH_PAUSE_SECONDS = 0.1

_EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


class EmailService:
    """Service for sending emails through a provider with retry and circuit breaking."""

    def __init__(
        self,
        provider: EmailProvider,
        dispatcher: ResilientDispatchFacade | None = None,
    ) -> None:
        """Initialize the email service.

        Args:
            provider: The provider client messages are sent through.
            dispatcher: Retry/breaker facade owned by this service.
        """
        self.provider = provider
        self.dispatcher = dispatcher or ResilientDispatchFacade()

    async def send_email(self, message: OutboundEmail) -> EmailSendResult:
        """Send one email.

        Args:
            message: The email to send.

        Returns:
            A successful result with the provider message id, or a failed
            result carrying the error message. Never raises for provider failures.
        """
        context = f"send email to {message.primary_recipient}"
        logger.info(
            "Sending email",
            provider=self.provider.name,
            to=message.to,
            subject=message.subject,
        )

        try:
            message_id = await self.dispatcher.execute_email_operation(
                lambda: self.provider.send(message),
                context,
            )
        except CircuitOpenError as e:
            logger.warning("Email not sent: circuit breaker open", context=context)
            return EmailSendResult(success=False, error=str(e), retryable=False, circuit_open=True)
        except Exception as e:
            logger.error("Email send failed", context=context, error=str(e))
            return EmailSendResult(
                success=False,
                error=str(e) or "Unknown error after retries",
                retryable=False,
            )

        return EmailSendResult(success=True, message_id=message_id)

    async def send_bulk_emails(self, messages: list[OutboundEmail]) -> list[EmailSendResult]:
        """Send many emails in concurrent batches, pausing briefly between batches.

        Results are returned in the same order as ``messages``.
        """
        results: list[EmailSendResult] = []

        for start in range(0, len(messages), BULK_BATCH_SIZE):
            batch = messages[start : start + BULK_BATCH_SIZE]
            results.extend(await asyncio.gather(*(self.send_email(m) for m in batch)))

            if start + BULK_BATCH_SIZE < len(messages):
                await asyncio.sleep(BULK_BATCH_PAUSE_SECONDS)

        return results

    @staticmethod
    def validate_email_address(email: str) -> bool:
        """Basic syntactic check of an email address."""
        return bool(email) and _EMAIL_PATTERN.fullmatch(email) is not None

    async def health_check(self) -> bool:
        ok, detail = await self.provider.test_connection()
        if not ok:
            logger.warning("Email provider health check failed", detail=detail)
        return ok

    def get_configuration(self) -> dict[str, Any]:
        return {
            "provider": self.provider.name,
            **self.dispatcher.get_configuration(),
        }

    def reset(self) -> None:
        """Administrative override: close the circuit breaker."""
        self.dispatcher.reset()


def create_email_service(settings: Settings) -> EmailService:
    """Build the process-wide email service from settings.

    Uses Resend when an API key is configured and the logging provider
    otherwise.
    """
    provider: EmailProvider
    if settings.resend_api_key:
        provider = ResendProvider(
            ResendSettings(api_key=settings.resend_api_key, from_email=settings.email_from)
        )
    else:
        if settings.is_production:
            logger.warning("No Resend API key configured; outbound email will only be logged")
        provider = LoggingEmailProvider()

    dispatcher = ResilientDispatchFacade.from_config(
        RetryConfig(
            max_retries=settings.retry_max_retries,
            base_delay_ms=settings.retry_base_delay_ms,
            max_delay_ms=settings.retry_max_delay_ms,
            backoff_multiplier=settings.retry_backoff_multiplier,
        ),
        BreakerConfig(
            failure_threshold=settings.breaker_failure_threshold,
            recovery_timeout_ms=settings.breaker_recovery_timeout_ms,
            success_threshold=settings.breaker_success_threshold,
        ),
    )

    logger.info("Email service created", provider=provider.name)
    return EmailService(provider, dispatcher)
