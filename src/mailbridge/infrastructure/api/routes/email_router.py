"""Outbound email API routes."""

from datetime import datetime, timezone

from fastapi import APIRouter, status

from mailbridge.core.config import get_settings
from mailbridge.core.logging import get_logger
from mailbridge.domain.entities import OutboundEmail
from mailbridge.domain.error_codes import ErrorCode
from mailbridge.infrastructure.api.dependencies import AuthenticatedUser, EmailServiceDep
from mailbridge.infrastructure.api.errors import ApiError
from mailbridge.infrastructure.api.schemas import (
    SendEmailData,
    SendEmailRequest,
    SendEmailResponse,
)

logger = get_logger(__name__)

router = APIRouter()

DEFAULT_SUBJECT = "Test Email from MailBridge"
DEFAULT_TEXT = "This is a test email sent from the MailBridge service."


@router.post(
    "/send-email",
    response_model=SendEmailResponse,
    responses={
        502: {"description": "The provider rejected the email"},
        503: {"description": "Dispatch suspended by the circuit breaker"},
    },
)
async def send_email(
    request: SendEmailRequest,
    current_user: AuthenticatedUser,
    email_service: EmailServiceDep,
) -> SendEmailResponse:
    """Send an email through the configured provider.

    The reply-to address is the sender's own mailbox.
    """
    settings = get_settings()
    message = OutboundEmail(
        from_address=settings.email_from,
        to=[str(request.to)],
        subject=request.subject or DEFAULT_SUBJECT,
        text=request.message or DEFAULT_TEXT,
        html=request.html,
        reply_to=current_user.mailbox_address(settings.mail_domain),
        tags=[{"name": "type", "value": "api"}],
    )

    result = await email_service.send_email(message)

    if result.circuit_open:
        raise ApiError(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            ErrorCode.SERVICE_UNAVAILABLE,
            "Email dispatch is temporarily unavailable",
        )
    if not result.success:
        logger.error("Send email failed", to=str(request.to), error=result.error)
        raise ApiError(
            status.HTTP_502_BAD_GATEWAY,
            ErrorCode.INTERNAL_ERROR,
            result.error or "Failed to send email",
        )

    return SendEmailResponse(
        data=SendEmailData(
            message_id=result.message_id,
            to=str(request.to),
            subject=message.subject,
            timestamp=datetime.now(timezone.utc),
        )
    )
