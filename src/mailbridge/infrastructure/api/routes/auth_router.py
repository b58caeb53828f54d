"""Authentication API routes.

Provides endpoints for registration, login and token refresh.
"""

from typing import Annotated

from fastapi import APIRouter, Header, status

from mailbridge.application.services import AuthenticationError, RegistrationError
from mailbridge.core.config import get_settings
from mailbridge.core.logging import get_logger
from mailbridge.infrastructure.api.dependencies import AuthServiceDep
from mailbridge.infrastructure.api.errors import ApiError
from mailbridge.infrastructure.api.schemas import (
    LoginRequest,
    RegisterData,
    RegisterRequest,
    RegisterResponse,
    TokenData,
    TokenResponse,
)

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=RegisterResponse,
    responses={400: {"description": "Invalid username or password, or username taken"}},
)
async def register(request: RegisterRequest, auth_service: AuthServiceDep) -> RegisterResponse:
    """Register a new user and its mailbox.

    Returns the mailbox address and a token for immediate use.
    """
    try:
        registration = await auth_service.register(request.username, request.password)
    except RegistrationError as e:
        raise ApiError(status.HTTP_400_BAD_REQUEST, e.code, e.message)

    user = registration.user
    return RegisterResponse(
        data=RegisterData(
            username=user.username,
            email=user.mailbox_address(get_settings().mail_domain),
            token=registration.token,
        )
    )


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={401: {"description": "Invalid credentials"}},
)
async def login(request: LoginRequest, auth_service: AuthServiceDep) -> TokenResponse:
    """Exchange username and password for a token."""
    try:
        issued = await auth_service.login(request.username, request.password)
    except AuthenticationError as e:
        raise ApiError(status.HTTP_401_UNAUTHORIZED, e.code, e.message)

    return TokenResponse(data=TokenData(token=issued.token, expires_at=issued.expires_at))


@router.post(
    "/refresh",
    response_model=TokenResponse,
    responses={401: {"description": "Missing or invalid token"}},
)
async def refresh(
    auth_service: AuthServiceDep,
    authorization: Annotated[str | None, Header()] = None,
) -> TokenResponse:
    """Issue a new token for the bearer of a still-valid one."""
    try:
        issued = await auth_service.refresh(authorization)
    except AuthenticationError as e:
        raise ApiError(
            status.HTTP_401_UNAUTHORIZED,
            e.code,
            e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    return TokenResponse(data=TokenData(token=issued.token, expires_at=issued.expires_at))
