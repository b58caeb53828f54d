"""User entity for authentication and mailbox ownership.

Each user owns exactly one mailbox, addressed as ``<username>@<mail_domain>``.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass
class User:
    """User entity representing a mailbox owner.

    Attributes:
        id: Unique identifier (autoincrement integer).
        username: Login identity, also the mailbox local part.
        password_hash: Encoded salt and derived key (never store plaintext).
        created_at: Timestamp when the user was created.
        last_access: Timestamp of last successful login (nullable).
    """

    id: int
    username: str
    password_hash: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    last_access: datetime | None = None

    def __post_init__(self) -> None:
        """Validate user data after initialization."""
        if not self.username:
            raise ValueError("Username is required")
        if not self.password_hash:
            raise ValueError("Password hash is required")

    def mailbox_address(self, mail_domain: str) -> str:
        """Return the inbound address for this user."""
        return f"{self.username}@{mail_domain}"
