"""Repositories for database access."""

from mailbridge.infrastructure.persistence.repositories.message_repository import (
    MessagePage,
    MessageRepository,
)
from mailbridge.infrastructure.persistence.repositories.user_repository import (
    DuplicateUsernameError,
    UserRepository,
)

__all__ = [
    "DuplicateUsernameError",
    "MessagePage",
    "MessageRepository",
    "UserRepository",
]
