"""User repository for database operations."""

from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mailbridge.infrastructure.persistence.models import UserModel


class DuplicateUsernameError(Exception):
    """Raised when a username is already taken."""

    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(f"Username already exists: {username}")


class UserRepository:
    """Repository for user database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def get_by_username(self, username: str) -> UserModel | None:
        """Get a user by username.

        Args:
            username: The exact username.

        Returns:
            User model if found, None otherwise.
        """
        result = await self.session.execute(
            select(UserModel).where(UserModel.username == username)
        )
        return result.scalar_one_or_none()

    async def create(self, username: str, password_hash: str) -> UserModel:
        """Insert a new user and commit.

        Args:
            username: Validated username.
            password_hash: Encoded password hash.

        Returns:
            The created user model.

        Raises:
            DuplicateUsernameError: If the username is already taken.
        """
        user = UserModel(username=username, password_hash=password_hash)
        self.session.add(user)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise DuplicateUsernameError(username) from e
        await self.session.refresh(user)
        return user

    async def update_last_access(self, user_id: int) -> None:
        """Record a successful login."""
        await self.session.execute(
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(last_access=datetime.now(timezone.utc))
        )
        await self.session.commit()
