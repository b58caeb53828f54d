"""Email value objects for inbound storage and outbound dispatch."""

from dataclasses import dataclass, field


@dataclass
class InboundEmail:
    """A received email, already decoded from its MIME representation.

    Attributes:
        from_address: Envelope or header sender.
        to_address: Recipient address that selects the mailbox.
        subject: Decoded subject line.
        text: Plain text body.
        html: HTML body.
        headers: Header name to value mapping.
        size: Size of the raw message in bytes.
        message_id: Original ``Message-ID`` header, if any.
    """

    from_address: str
    to_address: str
    subject: str | None = None
    text: str | None = None
    html: str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    size: int = 0
    message_id: str | None = None


@dataclass
class OutboundEmail:
    """An email to be sent through the dispatch provider."""

    from_address: str
    to: list[str]
    subject: str
    text: str | None = None
    html: str | None = None
    cc: list[str] = field(default_factory=list)
    bcc: list[str] = field(default_factory=list)
    reply_to: str | None = None
    tags: list[dict[str, str]] = field(default_factory=list)
    headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if isinstance(self.to, str):
            self.to = [self.to]
        if not self.to:
            raise ValueError("At least one recipient is required")

    @property
    def primary_recipient(self) -> str:
        return self.to[0]


@dataclass(frozen=True)
class EmailSendResult:
    """Outcome of a send, returned instead of raising past the email service.

    Attributes:
        success: Whether the provider accepted the message.
        message_id: Provider message id on success.
        error: Error message on failure.
        retryable: Always False once retries are exhausted.
        circuit_open: True when the call was rejected without reaching the provider.
    """

    success: bool
    message_id: str | None = None
    error: str | None = None
    retryable: bool = False
    circuit_open: bool = False
