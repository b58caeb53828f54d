"""Unit tests for AuthService."""

import time
from unittest.mock import patch

import jwt
import pytest

from mailbridge.application.services import (
    AuthenticationError,
    AuthService,
    RegistrationError,
)
from mailbridge.domain.error_codes import ErrorCode
from mailbridge.infrastructure.auth import DUMMY_PASSWORD_HASH, TokenService

CLOCK_SECRET = "clock-test-secret"


@pytest.fixture
def auth_service(db_session, password_hasher, token_service) -> AuthService:
    return AuthService(db_session, password_hasher, token_service)


class TestRegister:
    @pytest.mark.asyncio
    async def test_register_returns_user_and_token(self, auth_service, token_service):
        registration = await auth_service.register("new-user", "long-enough-pw")

        assert registration.user.username == "new-user"
        assert registration.user.id is not None
        assert token_service.verify(registration.token).sub == "new-user"

    @pytest.mark.asyncio
    async def test_register_hashes_password(self, auth_service, password_hasher):
        registration = await auth_service.register("new-user", "long-enough-pw")

        stored = registration.user.password_hash
        assert stored != "long-enough-pw"
        assert password_hasher.verify("long-enough-pw", stored) is True

    @pytest.mark.asyncio
    async def test_username_checked_before_password(self, auth_service):
        with pytest.raises(RegistrationError) as exc_info:
            await auth_service.register("X", "short")

        assert exc_info.value.code == ErrorCode.INVALID_USERNAME

    @pytest.mark.asyncio
    async def test_invalid_password(self, auth_service):
        with pytest.raises(RegistrationError) as exc_info:
            await auth_service.register("valid-name", "short")

        assert exc_info.value.code == ErrorCode.INVALID_PASSWORD

    @pytest.mark.asyncio
    async def test_duplicate_username(self, auth_service, test_user):
        with pytest.raises(RegistrationError) as exc_info:
            await auth_service.register("alice", "long-enough-pw")

        assert exc_info.value.code == ErrorCode.USER_EXISTS


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_success(
        self, auth_service, test_user, token_service, db_session, test_password
    ):
        issued = await auth_service.login("alice", test_password)

        assert token_service.verify(issued.token).sub == "alice"
        await db_session.refresh(test_user)
        assert test_user.last_access is not None

    @pytest.mark.asyncio
    async def test_wrong_password(self, auth_service, test_user):
        with pytest.raises(AuthenticationError) as exc_info:
            await auth_service.login("alice", "wrong-password")

        assert exc_info.value.code == ErrorCode.INVALID_CREDENTIALS

    @pytest.mark.asyncio
    async def test_unknown_user_is_indistinguishable(
        self, auth_service, password_hasher, test_password
    ):
        with patch.object(
            password_hasher, "verify_async", wraps=password_hasher.verify_async
        ) as verify:
            with pytest.raises(AuthenticationError) as exc_info:
                await auth_service.login("nobody", test_password)

        assert exc_info.value.code == ErrorCode.INVALID_CREDENTIALS
        assert exc_info.value.message == "Invalid credentials"
        verify.assert_called_once_with(test_password, DUMMY_PASSWORD_HASH)


class TestRefreshAndAuthenticate:
    @pytest.mark.asyncio
    async def test_refresh_reissues_for_same_subject(self, auth_service, token_service):
        token = token_service.issue("alice")

        issued = await auth_service.refresh(f"Bearer {token}")

        assert token_service.verify(issued.token).sub == "alice"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("header", [None, "", "Token abc", "Bearer not-a-jwt"])
    async def test_refresh_rejects_bad_header(self, auth_service, header):
        with pytest.raises(AuthenticationError) as exc_info:
            await auth_service.refresh(header)

        assert exc_info.value.code == ErrorCode.UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_authenticate_returns_user(self, auth_service, test_user, token_service):
        user = await auth_service.authenticate(f"Bearer {token_service.issue('alice')}")

        assert user.id == test_user.id
        assert user.username == "alice"

    @pytest.mark.asyncio
    async def test_authenticate_unknown_user(self, auth_service, token_service):
        with pytest.raises(AuthenticationError) as exc_info:
            await auth_service.authenticate(f"Bearer {token_service.issue('ghost')}")

        assert exc_info.value.message == "User not found"

    @pytest.mark.asyncio
    async def test_authenticate_foreign_token(self, auth_service, test_user):
        foreign = TokenService("another-secret").issue("alice")

        with pytest.raises(AuthenticationError):
            await auth_service.authenticate(f"Bearer {foreign}")


class TickingClock:
    """Clock that advances one second on every read."""

    def __init__(self, start: float):
        self.now = start

    def __call__(self) -> float:
        self.now += 1
        return self.now


@pytest.mark.asyncio
async def test_reported_expiry_matches_token_claim(db_session, password_hasher):
    ticking = TokenService(CLOCK_SECRET, clock=TickingClock(time.time()))
    auth_service = AuthService(db_session, password_hasher, ticking)
    token = ticking.issue("alice")

    issued = await auth_service.refresh(f"Bearer {token}")

    claims = jwt.decode(issued.token, CLOCK_SECRET, algorithms=["HS256"])
    assert int(issued.expires_at.timestamp()) == claims["exp"]
