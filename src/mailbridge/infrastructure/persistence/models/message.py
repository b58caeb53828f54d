"""SQLAlchemy model for the messages table.

Each row is one inbound email queued for a user.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mailbridge.infrastructure.persistence.database import Base

if TYPE_CHECKING:
    from mailbridge.infrastructure.persistence.models.user import UserModel


class MessageModel(Base):
    """SQLAlchemy model for the messages table."""

    __tablename__ = "messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    message_id: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    from_address: Mapped[str] = mapped_column(String(255), nullable=False)
    to_address: Mapped[str] = mapped_column(String(255), nullable=False)
    subject: Mapped[str | None] = mapped_column(Text, nullable=True)
    body_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    body_html: Mapped[str | None] = mapped_column(Text, nullable=True)
    raw_headers: Mapped[str | None] = mapped_column(Text, nullable=True, comment="JSON object")
    raw_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    received_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        index=True,
    )

    user: Mapped["UserModel"] = relationship(back_populates="messages")

    __table_args__ = (Index("ix_messages_user_received", "user_id", "received_at"),)

    def __repr__(self) -> str:
        return f"<MessageModel(id={self.id}, user_id={self.user_id}, subject={self.subject!r})>"
