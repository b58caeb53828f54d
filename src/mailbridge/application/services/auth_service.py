"""Authentication use cases: register, login, refresh and bearer authentication.

Routes stay thin: they translate the exceptions raised here into the
``{"success": false, "error": {...}}`` envelope.
"""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from mailbridge.core.logging import get_logger
from mailbridge.domain.entities import User
from mailbridge.domain.error_codes import ErrorCode
from mailbridge.domain.services import validate_identity, validate_secret
from mailbridge.infrastructure.auth import (
    DUMMY_PASSWORD_HASH,
    PasswordHasher,
    TokenService,
)
from mailbridge.infrastructure.persistence.models import UserModel
from mailbridge.infrastructure.persistence.repositories import (
    DuplicateUsernameError,
    UserRepository,
)

logger = get_logger(__name__)


class AuthServiceError(Exception):
    """Base class for authentication failures carrying an error code."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(message)


class RegistrationError(AuthServiceError):
    """Raised when registration input is rejected."""


class AuthenticationError(AuthServiceError):
    """Raised when credentials or a bearer token are not accepted."""


@dataclass(frozen=True)
class IssuedToken:
    """A freshly issued token and its expiry."""

    token: str
    expires_at: datetime


@dataclass(frozen=True)
class Registration:
    """Result of a successful registration."""

    user: User
    token: str


def _to_entity(model: UserModel) -> User:
    return User(
        id=model.id,
        username=model.username,
        password_hash=model.password_hash,
        created_at=model.created_at,
        last_access=model.last_access,
    )


class AuthService:
    """Coordinates credential validation, password hashing, tokens and users."""

    def __init__(
        self,
        session: AsyncSession,
        password_hasher: PasswordHasher,
        token_service: TokenService,
    ) -> None:
        self.users = UserRepository(session)
        self.password_hasher = password_hasher
        self.token_service = token_service

    def _issue(self, subject: str) -> IssuedToken:
        token, payload = self.token_service.issue_with_payload(subject)
        return IssuedToken(token=token, expires_at=payload.expires_at)

    async def register(self, username: object, password: object) -> Registration:
        """Create a user and issue its first token.

        The username is validated before the password, so a request with
        both invalid reports ``INVALID_USERNAME``.

        Raises:
            RegistrationError: On invalid input or a taken username.
        """
        if validate_identity(username) is not None:
            logger.info("Registration failed: invalid username")
            raise RegistrationError(ErrorCode.INVALID_USERNAME, "Invalid username format")

        if validate_secret(password) is not None:
            logger.info("Registration failed: invalid password", username=username)
            raise RegistrationError(ErrorCode.INVALID_PASSWORD, "Invalid password format")

        password_hash = await self.password_hasher.hash_async(password)

        try:
            model = await self.users.create(username, password_hash)
        except DuplicateUsernameError:
            logger.info("Registration failed: username exists", username=username)
            raise RegistrationError(ErrorCode.USER_EXISTS, "Username already exists")

        logger.info("User registered", username=username, user_id=model.id)
        return Registration(user=_to_entity(model), token=self.token_service.issue(username))

    async def login(self, username: str, password: str) -> IssuedToken:
        """Check credentials and issue a token.

        Unknown users and wrong passwords fail identically. Unknown users are
        checked against a dummy hash so both paths run the KDF.

        Raises:
            AuthenticationError: With ``INVALID_CREDENTIALS``.
        """
        model = await self.users.get_by_username(username)
        password_hash = model.password_hash if model is not None else DUMMY_PASSWORD_HASH
        is_valid = await self.password_hasher.verify_async(password, password_hash)

        if model is None or not is_valid:
            logger.info("Login failed: invalid credentials", username=username)
            raise AuthenticationError(ErrorCode.INVALID_CREDENTIALS, "Invalid credentials")

        await self.users.update_last_access(model.id)
        logger.info("Login successful", username=username, user_id=model.id)
        return self._issue(model.username)

    async def refresh(self, authorization: str | None) -> IssuedToken:
        """Re-issue a token for the subject of a still-valid bearer token.

        Raises:
            AuthenticationError: With ``UNAUTHORIZED``.
        """
        token = TokenService.extract_from_header(authorization)
        if token is None:
            raise AuthenticationError(ErrorCode.UNAUTHORIZED, "Missing or invalid token")

        payload = self.token_service.verify(token)
        if payload is None:
            raise AuthenticationError(ErrorCode.UNAUTHORIZED, "Invalid token")

        return self._issue(payload.sub)

    async def authenticate(self, authorization: str | None) -> User:
        """Resolve the user behind an ``Authorization`` header.

        Raises:
            AuthenticationError: With ``UNAUTHORIZED`` when the header, token
                or user is not valid.
        """
        token = TokenService.extract_from_header(authorization)
        if token is None:
            raise AuthenticationError(ErrorCode.UNAUTHORIZED, "Missing or invalid token")

        payload = self.token_service.verify(token)
        if payload is None:
            raise AuthenticationError(ErrorCode.UNAUTHORIZED, "Invalid token")

        model = await self.users.get_by_username(payload.sub)
        if model is None:
            logger.info("Authentication failed: user not found", username=payload.sub)
            raise AuthenticationError(ErrorCode.UNAUTHORIZED, "User not found")

        return _to_entity(model)
