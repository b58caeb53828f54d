"""Pydantic schemas for message endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """A stored inbound message."""

    id: int
    message_id: str | None = None
    from_address: str
    to_address: str
    subject: str | None = None
    body_text: str | None = None
    body_html: str | None = None
    raw_headers: str | None = Field(None, description="Original headers as a JSON object")
    raw_size: int | None = None
    is_read: bool
    received_at: datetime

    model_config = {"from_attributes": True}


class MessageListData(BaseModel):
    messages: list[MessageResponse]
    count: int = Field(..., description="Total messages matching the query")
    has_more: bool = Field(..., description="Whether more messages follow this page")


class MessageListResponse(BaseModel):
    success: bool = True
    data: MessageListData


class MessageDetailResponse(BaseModel):
    success: bool = True
    data: MessageResponse


class MessageActionData(BaseModel):
    id: int
    is_read: bool | None = None
    deleted: bool | None = None


class MessageActionResponse(BaseModel):
    """Response for mark-as-read and delete."""

    success: bool = True
    data: MessageActionData
