"""Pydantic schemas for outbound email endpoints."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class SendEmailRequest(BaseModel):
    """Request body for sending an email."""

    to: EmailStr = Field(..., description="Recipient address")
    subject: str | None = Field(None, max_length=998, description="Subject line")
    message: str | None = Field(None, description="Plain text body")
    html: str | None = Field(None, description="HTML body")


class SendEmailData(BaseModel):
    message_id: str = Field(..., description="Provider message id")
    to: str
    subject: str
    timestamp: datetime


class SendEmailResponse(BaseModel):
    success: bool = True
    data: SendEmailData
