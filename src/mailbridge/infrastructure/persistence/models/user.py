"""SQLAlchemy model for the users table."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mailbridge.infrastructure.persistence.database import Base

if TYPE_CHECKING:
    from mailbridge.infrastructure.persistence.models.message import MessageModel


class UserModel(Base):
    """SQLAlchemy model for the users table.

    Attributes:
        id: Primary key.
        username: Unique login name and mailbox local part.
        password_hash: base64(salt || PBKDF2 key).
        created_at: Timestamp when the user was created.
        last_access: Timestamp of last successful login.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="Login name, also the mailbox local part",
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="base64(salt || PBKDF2-SHA256 key)",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )
    last_access: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    messages: Mapped[list["MessageModel"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<UserModel(id={self.id}, username={self.username})>"
