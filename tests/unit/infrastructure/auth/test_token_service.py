"""Unit tests for the signed token service."""

import time

import jwt
import pytest

from mailbridge.infrastructure.auth import TokenService

SECRET = "unit-test-secret"


@pytest.fixture
def service() -> TokenService:
    return TokenService(SECRET)


class TestIssue:
    def test_token_has_three_segments(self, service):
        assert len(service.issue("alice").split(".")) == 3

    def test_payload_claims(self, service):
        token = service.issue("alice")
        claims = jwt.decode(token, SECRET, algorithms=["HS256"])

        assert claims["sub"] == "alice"
        assert claims["exp"] - claims["iat"] == 86400

    def test_uses_injected_clock(self):
        service = TokenService(SECRET, clock=lambda: 1_000_000)
        payload = jwt.decode(
            service.issue("alice"),
            SECRET,
            algorithms=["HS256"],
            options={"verify_exp": False},
        )
        assert payload["iat"] == 1_000_000
        assert payload["exp"] == 1_086_400

    def test_issue_with_payload_matches_signed_claims(self):
        service = TokenService(SECRET, clock=lambda: 1_000_000)

        token, payload = service.issue_with_payload("alice")

        claims = jwt.decode(token, SECRET, algorithms=["HS256"], options={"verify_exp": False})
        assert (payload.sub, payload.iat, payload.exp) == ("alice", claims["iat"], claims["exp"])
        assert int(payload.expires_at.timestamp()) == 1_086_400

    def test_requires_secret(self):
        with pytest.raises(ValueError):
            TokenService("")


class TestVerify:
    def test_round_trip(self, service):
        payload = service.verify(service.issue("alice"))

        assert payload is not None
        assert payload.sub == "alice"
        assert payload.exp == payload.iat + 86400

    def test_expired_token(self):
        issued_long_ago = TokenService(SECRET, clock=lambda: time.time() - 90000)
        token = issued_long_ago.issue("alice")

        assert TokenService(SECRET).verify(token) is None

    def test_wrong_secret(self, service):
        token = TokenService("other-secret").issue("alice")
        assert service.verify(token) is None

    def test_tampered_signature(self, service):
        token = service.issue("alice")
        header, payload, signature = token.split(".")
        tampered = f"{header}.{payload}.{signature[:-2]}xx"

        assert service.verify(tampered) is None

    def test_other_algorithm_rejected(self, service):
        now = int(time.time())
        token = jwt.encode(
            {"sub": "alice", "iat": now, "exp": now + 60},
            SECRET,
            algorithm="HS512",
        )
        assert service.verify(token) is None

    def test_missing_claim_rejected(self, service):
        token = jwt.encode({"sub": "alice"}, SECRET, algorithm="HS256")
        assert service.verify(token) is None

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
    def test_malformed(self, service, token):
        assert service.verify(token) is None


class TestExtractFromHeader:
    @pytest.mark.parametrize(
        "header,expected",
        [
            ("Bearer abc.def.ghi", "abc.def.ghi"),
            (None, None),
            ("", None),
            ("Bearer", None),
            ("Bearer ", None),
            ("bearer abc", None),
            ("Basic abc", None),
            ("Bearer a b", None),
            ("Bearer  abc", None),
            (" Bearer abc", None),
        ],
    )
    def test_extract(self, header, expected):
        assert TokenService.extract_from_header(header) == expected
