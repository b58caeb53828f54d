"""FastAPI dependencies for services and authentication.

Process-wide services live on ``app.state``; they are built in the app
lifespan and lazily here when the lifespan has not run.
"""

from typing import Annotated

from fastapi import Depends, Header, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from mailbridge.application.services import (
    AuthenticationError,
    AuthService,
)
from mailbridge.core.config import Settings, get_settings
from mailbridge.core.logging import get_logger
from mailbridge.domain.entities import User
from mailbridge.infrastructure.api.errors import ApiError
from mailbridge.infrastructure.auth import PasswordHasher, TokenService
from mailbridge.infrastructure.persistence.database import get_db_session
from mailbridge.infrastructure.services import EmailService, create_email_service

logger = get_logger(__name__)


def install_services(app_state, settings: Settings) -> None:
    """Attach the process-wide services to application state."""
    app_state.token_service = TokenService(
        settings.secret_key,
        ttl_seconds=settings.token_expire_seconds,
    )
    app_state.password_hasher = PasswordHasher(iterations=settings.password_iterations)
    app_state.email_service = create_email_service(settings)


def _ensure_services(request: Request) -> None:
    if not hasattr(request.app.state, "token_service"):
        install_services(request.app.state, get_settings())


def get_token_service(request: Request) -> TokenService:
    _ensure_services(request)
    return request.app.state.token_service


def get_password_hasher(request: Request) -> PasswordHasher:
    _ensure_services(request)
    return request.app.state.password_hasher


def get_email_service(request: Request) -> EmailService:
    """Get the email service from app state.

    Args:
        request: FastAPI request object.

    Returns:
        The shared EmailService, whose circuit breaker spans all requests.
    """
    _ensure_services(request)
    return request.app.state.email_service


async def get_auth_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    password_hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    token_service: Annotated[TokenService, Depends(get_token_service)],
) -> AuthService:
    return AuthService(session, password_hasher, token_service)


async def get_current_user(
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
    authorization: Annotated[str | None, Header()] = None,
) -> User:
    """Resolve the authenticated user from the Authorization header.

    Args:
        auth_service: Auth service bound to the request session.
        authorization: The Authorization header value ("Bearer <token>").

    Returns:
        The authenticated user.

    Raises:
        ApiError: 401 if the header, token or user is not valid.
    """
    try:
        return await auth_service.authenticate(authorization)
    except AuthenticationError as e:
        logger.info("Authentication failed", reason=e.message)
        raise ApiError(
            status.HTTP_401_UNAUTHORIZED,
            e.code,
            e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )


# Type aliases for dependency injection
AuthenticatedUser = Annotated[User, Depends(get_current_user)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
EmailServiceDep = Annotated[EmailService, Depends(get_email_service)]
