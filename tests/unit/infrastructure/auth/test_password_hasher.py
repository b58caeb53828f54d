"""Unit tests for password hashing utilities."""

import base64

import pytest

from mailbridge.infrastructure.auth.password_hasher import (
    DUMMY_PASSWORD_HASH,
    PasswordHasher,
    hash_password,
    verify_password,
)


class TestHashPassword:
    """Tests for hashing."""

    def test_hash_is_64_char_base64_of_salt_and_key(self):
        hashed = hash_password("SecureP@ss123!")

        assert len(hashed) == 64
        assert len(base64.b64decode(hashed)) == 48

    def test_hash_password_different_for_same_input(self):
        """Hashing the same password twice gives different hashes (random salt)."""
        assert hash_password("SecureP@ss123!") != hash_password("SecureP@ss123!")

    def test_hash_password_with_special_characters(self):
        password = "P@ssw0rd!#$%^&*() пароль"
        assert verify_password(password, hash_password(password)) is True


class TestVerifyPassword:
    """Tests for verification."""

    def test_verify_password_correct(self):
        hashed = hash_password("SecureP@ss123!")
        assert verify_password("SecureP@ss123!", hashed) is True

    def test_verify_password_incorrect(self):
        hashed = hash_password("SecureP@ss123!")
        assert verify_password("WrongPassword1!", hashed) is False

    def test_verify_password_case_sensitive(self):
        hashed = hash_password("SecureP@ss123!")
        assert verify_password("securep@ss123!", hashed) is False

    @pytest.mark.parametrize(
        "hashed",
        [
            "",
            "not-base64!!!",
            base64.b64encode(b"short").decode(),
            base64.b64encode(b"x" * 47).decode(),
            base64.b64encode(b"x" * 49).decode(),
        ],
    )
    def test_malformed_hash_returns_false(self, hashed):
        assert verify_password("SecureP@ss123!", hashed) is False

    def test_dummy_hash_rejects_arbitrary_password(self):
        assert len(DUMMY_PASSWORD_HASH) == 64
        assert verify_password("anything-at-all", DUMMY_PASSWORD_HASH) is False


class TestPasswordHasher:
    """Tests for the PasswordHasher class."""

    def test_iterations_must_be_positive(self):
        with pytest.raises(ValueError):
            PasswordHasher(iterations=0)

    def test_hash_from_other_iteration_count_does_not_verify(self):
        hashed = PasswordHasher(iterations=1000).hash("SecureP@ss123!")

        assert PasswordHasher(iterations=1000).verify("SecureP@ss123!", hashed) is True
        assert PasswordHasher().verify("SecureP@ss123!", hashed) is False

    @pytest.mark.asyncio
    async def test_async_variants(self):
        hasher = PasswordHasher()
        hashed = await hasher.hash_async("SecureP@ss123!")

        assert await hasher.verify_async("SecureP@ss123!", hashed) is True
        assert await hasher.verify_async("nope-nope-nope", hashed) is False
