"""Stateless signed token service.

Tokens are HS256 JWTs carrying only the username (``sub``), issue time
(``iat``) and expiry (``exp``). Nothing is stored server-side: a token is
valid until it expires or the client discards it.
"""

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

import jwt

from mailbridge.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TOKEN_TTL_SECONDS = 24 * 60 * 60


@dataclass(frozen=True)
class TokenPayload:
    """Verified token claims."""

    sub: str
    iat: int
    exp: int

    @property
    def expires_at(self) -> datetime:
        return datetime.fromtimestamp(self.exp, tz=timezone.utc)


class TokenService:
    """Issues and verifies signed, time-bounded tokens."""

    ALGORITHM = "HS256"
    REQUIRED_CLAIMS = ["sub", "iat", "exp"]

    def __init__(
        self,
        secret_key: str,
        ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the token service.

        Args:
            secret_key: Symmetric secret used to sign tokens.
            ttl_seconds: Lifetime of issued tokens.
            clock: Source of the current time in seconds, used at issuance.
        """
        if not secret_key:
            raise ValueError("secret_key is required")
        self._secret_key = secret_key
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    def issue(self, subject: str) -> str:
        """Issue a token for a subject.

        Args:
            subject: The username the token asserts.

        Returns:
            Encoded three-segment JWT.
        """
        token, _ = self.issue_with_payload(subject)
        return token

    def issue_with_payload(self, subject: str) -> tuple[str, TokenPayload]:
        """Issue a token and return it with the claims it was signed with."""
        now = int(self._clock())
        payload = TokenPayload(sub=subject, iat=now, exp=now + self.ttl_seconds)
        logger.debug("Issuing token", subject=subject)
        token = jwt.encode(
            {"sub": payload.sub, "iat": payload.iat, "exp": payload.exp},
            self._secret_key,
            algorithm=self.ALGORITHM,
        )
        return token, payload

    def verify(self, token: str) -> TokenPayload | None:
        """Verify a token's structure, signature, algorithm and expiry.

        Every failure is logged here and reported to the caller as None,
        so an expired token looks the same as a forged one.

        Args:
            token: The encoded JWT.

        Returns:
            The verified payload, or None if the token is not valid.
        """
        try:
            claims = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.ALGORITHM],
                options={"require": self.REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError:
            logger.info("Token verification failed: token expired")
            return None
        except jwt.PyJWTError as e:
            logger.info("Token verification failed", error=str(e))
            return None

        subject = claims.get("sub")
        if not isinstance(subject, str) or not subject:
            logger.info("Token verification failed: invalid subject claim")
            return None

        try:
            return TokenPayload(sub=subject, iat=int(claims["iat"]), exp=int(claims["exp"]))
        except (TypeError, ValueError):
            logger.info("Token verification failed: non-numeric time claims")
            return None

    @staticmethod
    def extract_from_header(header: str | None) -> str | None:
        """Extract the token from an ``Authorization`` header value.

        The header must be exactly ``"Bearer <token>"``: two parts separated
        by a single space, scheme spelled exactly. Surrounding whitespace is
        not trimmed.

        Args:
            header: The raw header value, or None when absent.

        Returns:
            The token, or None if the header does not match.
        """
        if not header:
            return None

        parts = header.split(" ")
        if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
            return None

        return parts[1]
