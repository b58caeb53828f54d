"""Inbound email ingestion.

Turns a received message into a row in the recipient's queue. Mailbox
addresses are ``<username>@<domain>`` or ``<prefix>.<username>@<domain>``;
the prefix lets a user sort mail by the address it was sent to.
"""

import email
import json
import re
import secrets
import time
from email import policy
from email.message import EmailMessage
from email.utils import parseaddr

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mailbridge.core.logging import get_logger
from mailbridge.domain.entities import InboundEmail
from mailbridge.domain.services import is_valid_mailbox_name
from mailbridge.infrastructure.persistence.models import MessageModel
from mailbridge.infrastructure.persistence.repositories import (
    MessageRepository,
    UserRepository,
)

logger = get_logger(__name__)

_EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")
_SCRIPT_BLOCK = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_IFRAME_BLOCK = re.compile(r"<iframe\b[^<]*(?:(?!</iframe>)<[^<]*)*</iframe>", re.IGNORECASE)
_JAVASCRIPT_URL = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"on\w+\s*=", re.IGNORECASE)


def clean_text(text: str | None) -> str | None:
    """Normalize line endings, collapse runs of blank lines and trim."""
    if not text:
        return None
    cleaned = text.replace("\r\n", "\n").replace("\r", "\n")
    cleaned = _EXCESS_NEWLINES.sub("\n\n", cleaned).strip()
    return cleaned or None


def clean_html(html: str | None) -> str | None:
    """Strip script and iframe blocks, ``javascript:`` URLs and inline handlers."""
    if not html:
        return None
    cleaned = _SCRIPT_BLOCK.sub("", html)
    cleaned = _IFRAME_BLOCK.sub("", cleaned)
    cleaned = _JAVASCRIPT_URL.sub("", cleaned)
    cleaned = _EVENT_HANDLER.sub("", cleaned).strip()

    if cleaned and len(cleaned) < len(html):
        logger.info("Removed potentially unsafe HTML", removed_chars=len(html) - len(cleaned))
    return cleaned or None


def generate_message_id() -> str:
    """Return a unique id of the form ``<epoch millis>-<random>``."""
    return f"{int(time.time() * 1000)}-{secrets.token_hex(6)}"


def split_mailbox(address: str) -> tuple[str | None, str] | None:
    """Split an address into (prefix, username).

    Returns None if the address is malformed or the username is not a valid
    mailbox name.
    """
    if not address or address.count("@") != 1:
        return None

    local_part = address.split("@")[0].strip().lower()
    prefix, _, username = local_part.rpartition(".")
    if not is_valid_mailbox_name(username):
        return None
    return (prefix or None), username


class InboundEmailService:
    """Stores received email in the owning user's message queue."""

    def __init__(self, session: AsyncSession, mail_domain: str) -> None:
        self.users = UserRepository(session)
        self.messages = MessageRepository(session)
        self.mail_domain = mail_domain

    @staticmethod
    def parse_raw(raw: bytes, recipient: str | None = None) -> InboundEmail:
        """Parse an RFC 822 message.

        Args:
            raw: The message bytes as delivered by the MTA.
            recipient: Envelope recipient. Falls back to ``Delivered-To``,
                ``X-Original-To`` and finally ``To``.

        Returns:
            The decoded message.
        """
        message: EmailMessage = email.message_from_bytes(raw, policy=policy.default)

        to_header = recipient or next(
            (message[h] for h in ("Delivered-To", "X-Original-To", "To") if message[h]),
            "",
        )
        _, to_address = parseaddr(str(to_header))
        _, from_address = parseaddr(str(message["From"] or ""))

        text_part = message.get_body(preferencelist=("plain",))
        html_part = message.get_body(preferencelist=("html",))

        return InboundEmail(
            from_address=from_address,
            to_address=to_address,
            subject=str(message["Subject"]) if message["Subject"] is not None else None,
            text=text_part.get_content() if text_part is not None else None,
            html=html_part.get_content() if html_part is not None else None,
            headers={name: str(value) for name, value in message.items()},
            size=len(raw),
            message_id=str(message["Message-ID"]) if message["Message-ID"] else None,
        )

    def validate_email(self, message: InboundEmail) -> bool:
        """Check sender and recipient format and that the recipient is ours."""
        if not message.from_address or not message.to_address:
            return False

        if not _EMAIL_PATTERN.fullmatch(message.from_address):
            return False
        if not _EMAIL_PATTERN.fullmatch(message.to_address):
            return False

        return message.to_address.lower().endswith(f"@{self.mail_domain}")

    async def handle_incoming_email(self, message: InboundEmail) -> bool:
        """Store a message for the user it is addressed to.

        Returns:
            True if stored, False if the address or user is unknown or the
            insert failed.
        """
        mailbox = split_mailbox(message.to_address)
        if mailbox is None:
            logger.warning("Rejected inbound email: invalid recipient", to=message.to_address)
            return False
        prefix, username = mailbox

        user = await self.users.get_by_username(username)
        if user is None:
            logger.warning("Rejected inbound email: unknown user", to=message.to_address)
            return False

        message_id = generate_message_id()
        model = MessageModel(
            user_id=user.id,
            message_id=message_id,
            from_address=message.from_address,
            to_address=message.to_address,
            subject=clean_text(message.subject),
            body_text=clean_text(message.text),
            body_html=clean_html(message.html),
            raw_headers=json.dumps(message.headers or {}),
            raw_size=message.size,
        )

        try:
            await self.messages.create(model)
        except SQLAlchemyError as e:
            logger.error(
                "Failed to store inbound email",
                from_address=message.from_address,
                to=message.to_address,
                error=str(e),
            )
            await self.messages.session.rollback()
            return False

        logger.info(
            "Inbound email stored",
            username=username,
            prefix=prefix,
            message_id=message_id,
        )
        return True
