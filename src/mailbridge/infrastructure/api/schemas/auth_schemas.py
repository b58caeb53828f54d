"""Pydantic schemas for authentication endpoints.

Username and password format rules are applied by the auth service, not
here, so that they fail with their own error codes.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    """Request body for registration."""

    username: str = Field(..., description="Mailbox name, 3-50 chars of a-z, 0-9 and '-'")
    password: str = Field(..., description="Password, 8-128 characters")


class LoginRequest(BaseModel):
    """Request body for login."""

    username: str = Field(..., description="Username")
    password: str = Field(..., description="Password")


class RegisterData(BaseModel):
    username: str = Field(..., description="Registered username")
    email: str = Field(..., description="Inbound address of the new mailbox")
    token: str = Field(..., description="Signed access token")


class RegisterResponse(BaseModel):
    """Response for successful registration."""

    success: bool = True
    data: RegisterData


class TokenData(BaseModel):
    token: str = Field(..., description="Signed access token")
    expires_at: datetime = Field(..., description="When the token expires")


class TokenResponse(BaseModel):
    """Response for login and refresh."""

    success: bool = True
    data: TokenData
