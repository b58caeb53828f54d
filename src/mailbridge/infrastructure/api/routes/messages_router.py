"""Message queue API routes.

All endpoints act only on the authenticated user's own messages; a message
owned by someone else is reported as not found.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from mailbridge.core.config import get_settings
from mailbridge.core.logging import get_logger
from mailbridge.domain.error_codes import ErrorCode
from mailbridge.infrastructure.api.dependencies import AuthenticatedUser
from mailbridge.infrastructure.api.errors import ApiError
from mailbridge.infrastructure.api.schemas import (
    MessageActionData,
    MessageActionResponse,
    MessageDetailResponse,
    MessageListData,
    MessageListResponse,
    MessageResponse,
)
from mailbridge.infrastructure.persistence.database import get_db_session
from mailbridge.infrastructure.persistence.repositories import MessageRepository

logger = get_logger(__name__)

router = APIRouter()

SessionDep = Annotated[AsyncSession, Depends(get_db_session)]


def _not_found() -> ApiError:
    return ApiError(status.HTTP_404_NOT_FOUND, ErrorCode.NOT_FOUND, "Message not found")


@router.get("/messages", response_model=MessageListResponse)
async def list_messages(
    current_user: AuthenticatedUser,
    session: SessionDep,
    limit: Annotated[int | None, Query(ge=1)] = None,
    offset: Annotated[int, Query(ge=0)] = 0,
    prefix: Annotated[str | None, Query(pattern=r"^[a-z0-9-]+$", max_length=50)] = None,
) -> MessageListResponse:
    """List the user's messages, newest first.

    ``limit`` defaults to 50 and is capped at 200. ``prefix`` restricts the
    list to mail sent to ``<prefix>.<username>@<domain>``.
    """
    settings = get_settings()
    page_size = min(limit or settings.messages_default_limit, settings.messages_max_limit)

    page = await MessageRepository(session).list_for_user(
        current_user.id,
        limit=page_size,
        offset=offset,
        prefix=prefix,
    )

    return MessageListResponse(
        data=MessageListData(
            messages=[MessageResponse.model_validate(m) for m in page.messages],
            count=page.count,
            has_more=page.has_more,
        )
    )


@router.get("/messages/{message_id}", response_model=MessageDetailResponse)
async def get_message(
    message_id: int,
    current_user: AuthenticatedUser,
    session: SessionDep,
) -> MessageDetailResponse:
    """Get one of the user's messages."""
    message = await MessageRepository(session).get_for_user(message_id, current_user.id)
    if message is None:
        raise _not_found()

    return MessageDetailResponse(data=MessageResponse.model_validate(message))


@router.post("/messages/{message_id}/read", response_model=MessageActionResponse)
async def mark_message_read(
    message_id: int,
    current_user: AuthenticatedUser,
    session: SessionDep,
) -> MessageActionResponse:
    """Mark one of the user's messages as read."""
    if not await MessageRepository(session).mark_as_read(message_id, current_user.id):
        raise _not_found()

    return MessageActionResponse(data=MessageActionData(id=message_id, is_read=True))


@router.delete("/messages/{message_id}", response_model=MessageActionResponse)
async def delete_message(
    message_id: int,
    current_user: AuthenticatedUser,
    session: SessionDep,
) -> MessageActionResponse:
    """Delete one of the user's messages."""
    if not await MessageRepository(session).delete_for_user(message_id, current_user.id):
        raise _not_found()

    logger.info("Message deleted", message_id=message_id, user_id=current_user.id)
    return MessageActionResponse(data=MessageActionData(id=message_id, deleted=True))
