"""Password hashing utility using PBKDF2-HMAC-SHA256.

Hashes are stored as base64(salt || derived_key): a 16-byte random salt
followed by a 32-byte key derived with 100,000 iterations, which always
encodes to 64 characters. The KDF is deliberately slow, so the async helpers
run it in a worker thread to keep the event loop responsive.
"""

import asyncio
import base64
import binascii
import os

from cryptography.hazmat.primitives import constant_time, hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from mailbridge.core.logging import get_logger

logger = get_logger(__name__)

SALT_LENGTH = 16
KEY_LENGTH = 32
DEFAULT_ITERATIONS = 100_000


class PasswordHasher:
    """Salted, iterated password hasher with constant-time verification."""

    def __init__(self, iterations: int = DEFAULT_ITERATIONS) -> None:
        """Initialize the hasher.

        Args:
            iterations: PBKDF2 iteration count. Stored hashes do not record it,
                so every hasher sharing a user table must use the same value.
        """
        if iterations < 1:
            raise ValueError("iterations must be positive")
        self.iterations = iterations

    def _derive(self, password: str, salt: bytes) -> bytes:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=KEY_LENGTH,
            salt=salt,
            iterations=self.iterations,
        )
        return kdf.derive(password.encode("utf-8"))

    def hash(self, password: str) -> str:
        """Hash a password with a fresh random salt.

        Args:
            password: The plaintext password to hash.

        Returns:
            The 64-character base64 encoding of salt and derived key.

        Example:
            >>> hashed = PasswordHasher().hash("password123")
            >>> len(hashed)
            64
        """
        salt = os.urandom(SALT_LENGTH)
        derived = self._derive(password, salt)
        return base64.b64encode(salt + derived).decode("ascii")

    def verify(self, password: str, hashed: str) -> bool:
        """Verify a password against a stored hash.

        Never raises: malformed base64, a hash of the wrong length, or a
        password that cannot be encoded all verify as False.

        Args:
            password: The plaintext password to verify.
            hashed: The stored hash produced by :meth:`hash`.

        Returns:
            True if the password matches, False otherwise.
        """
        try:
            combined = base64.b64decode(hashed, validate=True)
        except (binascii.Error, ValueError, TypeError):
            logger.debug("Password verification failed: malformed hash")
            return False

        salt = combined[:SALT_LENGTH]
        stored = combined[SALT_LENGTH:]
        if len(salt) != SALT_LENGTH or len(stored) != KEY_LENGTH:
            logger.debug("Password verification failed: unexpected hash length")
            return False

        try:
            derived = self._derive(password, salt)
        except (ValueError, AttributeError) as e:
            logger.debug("Password verification failed", error=str(e))
            return False

        return constant_time.bytes_eq(stored, derived)

    async def hash_async(self, password: str) -> str:
        """Hash a password without blocking the event loop."""
        return await asyncio.to_thread(self.hash, password)

    async def verify_async(self, password: str, hashed: str) -> bool:
        """Verify a password without blocking the event loop."""
        return await asyncio.to_thread(self.verify, password, hashed)


_hasher = PasswordHasher()

# Verified against when a login names an unknown user, so both paths
# spend the same time in the KDF.
DUMMY_PASSWORD_HASH = _hasher.hash("mailbridge-dummy-password")


def hash_password(password: str) -> str:
    """Hash a password with the default hasher."""
    return _hasher.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password with the default hasher."""
    return _hasher.verify(password, hashed)
