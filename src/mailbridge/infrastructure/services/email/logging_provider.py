"""Development email provider that logs messages instead of sending them."""

import uuid
from collections import deque

from mailbridge.core.logging import get_logger
from mailbridge.domain.entities import OutboundEmail
from mailbridge.infrastructure.services.email.email_provider import EmailProvider

logger = get_logger(__name__)


class LoggingEmailProvider(EmailProvider):
    """Writes outbound email to the log. Used when no Resend API key is configured."""

    name = "logging"

    def __init__(self) -> None:
        self.sent: deque[OutboundEmail] = deque(maxlen=100)

    async def send(self, message: OutboundEmail) -> str:
        email_id = f"log_{uuid.uuid4().hex}"
        self.sent.append(message)
        logger.info(
            "[EMAIL] Outbound email (not sent, logging provider)",
            email_id=email_id,
            from_address=message.from_address,
            to=message.to,
            subject=message.subject,
            body=message.text or message.html,
        )
        return email_id

    async def test_connection(self) -> tuple[bool, str | None]:
        return True, "Logging provider is always available"
