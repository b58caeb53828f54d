"""Message repository for database operations."""

from dataclasses import dataclass

from sqlalchemy import and_, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from mailbridge.infrastructure.persistence.models import MessageModel


@dataclass
class MessagePage:
    """One page of a user's messages."""

    messages: list[MessageModel]
    count: int
    has_more: bool


class MessageRepository:
    """Repository for queued inbound messages."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, message: MessageModel) -> MessageModel:
        """Insert a message and commit."""
        self.session.add(message)
        await self.session.commit()
        await self.session.refresh(message)
        return message

    async def list_for_user(
        self,
        user_id: int,
        limit: int = 50,
        offset: int = 0,
        prefix: str | None = None,
    ) -> MessagePage:
        """List a user's messages, newest first.

        Args:
            user_id: Owner of the messages.
            limit: Page size.
            offset: Number of messages to skip.
            prefix: Only messages addressed to ``<prefix>.<anything>@<domain>``.

        Returns:
            The page, the total matching count and whether more remain.
        """
        conditions = [MessageModel.user_id == user_id]
        if prefix:
            conditions.append(MessageModel.to_address.like(f"{prefix}.%@%"))
        where = and_(*conditions)

        total = await self.session.scalar(select(func.count()).select_from(MessageModel).where(where))
        total = total or 0

        result = await self.session.execute(
            select(MessageModel)
            .where(where)
            .order_by(MessageModel.received_at.desc(), MessageModel.id.desc())
            .limit(limit)
            .offset(offset)
        )

        return MessagePage(
            messages=list(result.scalars().all()),
            count=total,
            has_more=offset + limit < total,
        )

    async def get_for_user(self, message_id: int, user_id: int) -> MessageModel | None:
        """Get a message only if it belongs to the user."""
        result = await self.session.execute(
            select(MessageModel).where(
                MessageModel.id == message_id,
                MessageModel.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def mark_as_read(self, message_id: int, user_id: int) -> bool:
        """Mark a message read. Returns False if no owned message matched."""
        result = await self.session.execute(
            update(MessageModel)
            .where(MessageModel.id == message_id, MessageModel.user_id == user_id)
            .values(is_read=True)
        )
        await self.session.commit()
        return result.rowcount > 0

    async def delete_for_user(self, message_id: int, user_id: int) -> bool:
        """Delete a message. Returns False if no owned message matched."""
        result = await self.session.execute(
            delete(MessageModel).where(
                MessageModel.id == message_id,
                MessageModel.user_id == user_id,
            )
        )
        await self.session.commit()
        return result.rowcount > 0
