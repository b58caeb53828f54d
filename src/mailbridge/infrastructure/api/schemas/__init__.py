"""Pydantic schemas for API requests and responses."""

from mailbridge.infrastructure.api.schemas.auth_schemas import (
    LoginRequest,
    RegisterData,
    RegisterRequest,
    RegisterResponse,
    TokenData,
    TokenResponse,
)
from mailbridge.infrastructure.api.schemas.email_schemas import (
    SendEmailData,
    SendEmailRequest,
    SendEmailResponse,
)
from mailbridge.infrastructure.api.schemas.message_schemas import (
    MessageActionData,
    MessageActionResponse,
    MessageDetailResponse,
    MessageListData,
    MessageListResponse,
    MessageResponse,
)

__all__ = [
    "LoginRequest",
    "MessageActionData",
    "MessageActionResponse",
    "MessageDetailResponse",
    "MessageListData",
    "MessageListResponse",
    "MessageResponse",
    "RegisterData",
    "RegisterRequest",
    "RegisterResponse",
    "SendEmailData",
    "SendEmailRequest",
    "SendEmailResponse",
    "TokenData",
    "TokenResponse",
]
