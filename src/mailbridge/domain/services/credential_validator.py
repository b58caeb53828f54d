"""Credential validation rules.

Usernames double as mailbox local parts, so they are restricted to lowercase
ASCII letters, digits and hyphens. Passwords only have a length bound.

Both validators return an ``ErrorCode`` instead of raising, so callers can
turn a failure straight into a 400 response.
"""

import re

from mailbridge.domain.error_codes import ErrorCode

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128

_USERNAME_PATTERN = re.compile(r"[a-z0-9-]+")


def validate_identity(username: object) -> ErrorCode | None:
    """Validate a username.

    Args:
        username: Candidate username. Non-string values are rejected.

    Returns:
        ``ErrorCode.INVALID_USERNAME`` if invalid, None otherwise.

    Example:
        >>> validate_identity("ab")
        <ErrorCode.INVALID_USERNAME: 'INVALID_USERNAME'>
        >>> validate_identity("valid-user1") is None
        True
    """
    if not isinstance(username, str):
        return ErrorCode.INVALID_USERNAME

    if not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
        return ErrorCode.INVALID_USERNAME

    if _USERNAME_PATTERN.fullmatch(username) is None:
        return ErrorCode.INVALID_USERNAME

    return None


def validate_secret(password: object) -> ErrorCode | None:
    """Validate a password.

    Any character is allowed, including whitespace and control characters.

    Args:
        password: Candidate password. Non-string values are rejected.

    Returns:
        ``ErrorCode.INVALID_PASSWORD`` if invalid, None otherwise.
    """
    if not isinstance(password, str):
        return ErrorCode.INVALID_PASSWORD

    if not PASSWORD_MIN_LENGTH <= len(password) <= PASSWORD_MAX_LENGTH:
        return ErrorCode.INVALID_PASSWORD

    return None


def is_valid_mailbox_name(local_part: str) -> bool:
    """Check whether a mailbox local part could belong to a user."""
    return validate_identity(local_part) is None
