"""Authentication infrastructure components.

This module provides password hashing and signed token services.
"""

from mailbridge.infrastructure.auth.password_hasher import (
    DUMMY_PASSWORD_HASH,
    PasswordHasher,
    hash_password,
    verify_password,
)
from mailbridge.infrastructure.auth.token_service import TokenPayload, TokenService

__all__ = [
    "DUMMY_PASSWORD_HASH",
    "PasswordHasher",
    "TokenPayload",
    "TokenService",
    "hash_password",
    "verify_password",
]
