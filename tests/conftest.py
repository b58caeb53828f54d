"""Pytest configuration for all tests."""

import os

os.environ.setdefault("MAILBRIDGE_ENVIRONMENT", "testing")
os.environ.setdefault("MAILBRIDGE_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("MAILBRIDGE_SECRET_KEY", "test-secret-key-for-mailbridge")
os.environ.setdefault("MAILBRIDGE_MAIL_DOMAIN", "mailbridge.test")

from typing import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from mailbridge.core.config import get_settings  # noqa: E402
from mailbridge.infrastructure.auth import PasswordHasher, TokenService  # noqa: E402
from mailbridge.infrastructure.persistence.database import Base  # noqa: E402
from mailbridge.infrastructure.persistence.models import MessageModel, UserModel  # noqa: E402
from mailbridge.infrastructure.resilience import (  # noqa: E402
    CircuitBreaker,
    ResilientDispatchFacade,
    RetryConfig,
    RetryExecutor,
)
from mailbridge.infrastructure.services import EmailService  # noqa: E402
from mailbridge.infrastructure.services.email import LoggingEmailProvider  # noqa: E402

TEST_PASSWORD = "correct-horse-battery"


async def _no_sleep(seconds: float) -> None:
    return None


@pytest.fixture
def test_password() -> str:
    return TEST_PASSWORD


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(get_settings().secret_key)


@pytest.fixture
def password_hasher() -> PasswordHasher:
    return PasswordHasher()


@pytest.fixture
def email_provider() -> LoggingEmailProvider:
    return LoggingEmailProvider()


@pytest.fixture
def email_service(email_provider: LoggingEmailProvider) -> EmailService:
    """Email service that retries without sleeping."""
    dispatcher = ResilientDispatchFacade(
        retry_executor=RetryExecutor(RetryConfig(max_retries=2), sleep=_no_sleep),
        circuit_breaker=CircuitBreaker(failure_threshold=2),
    )
    return EmailService(email_provider, dispatcher)


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session.

    Uses an in-memory SQLite database for testing.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession,
    token_service: TokenService,
    password_hasher: PasswordHasher,
    email_service: EmailService,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with overridden database dependency and services."""
    from mailbridge.infrastructure.api.app import app
    from mailbridge.infrastructure.persistence.database import get_db_session

    app.dependency_overrides[get_db_session] = lambda: db_session
    app.state.token_service = token_service
    app.state.password_hasher = password_hasher
    app.state.email_service = email_service

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides = {}


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession, password_hasher: PasswordHasher) -> UserModel:
    """Create a user named ``alice`` with ``TEST_PASSWORD``."""
    user = UserModel(username="alice", password_hash=password_hasher.hash(TEST_PASSWORD))
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
def auth_headers(test_user: UserModel, token_service: TokenService) -> dict[str, str]:
    return {"Authorization": f"Bearer {token_service.issue(test_user.username)}"}


@pytest.fixture
def make_message(db_session: AsyncSession):
    """Factory fixture that stores a message for a user."""

    async def _make(user: UserModel, **overrides) -> MessageModel:
        values = {
            "user_id": user.id,
            "from_address": "sender@example.com",
            "to_address": f"{user.username}@mailbridge.test",
            "subject": "Hello",
            "body_text": "Hi there",
        }
        values.update(overrides)
        message = MessageModel(**values)
        db_session.add(message)
        await db_session.commit()
        await db_session.refresh(message)
        return message

    return _make
