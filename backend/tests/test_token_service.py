"""
Natours Backend — Token Service Unit Tests
============================================

What:  Signing and verification of JWTs.
How:   Real python-jose calls with a test secret; no database.
"""

from datetime import timedelta
from uuid import uuid4

import pytest
from jose import jwt

from app.config import parse_duration
from app.exceptions import AuthenticationError, TokenSigningError
from app.services.token_service import (
    EXPIRED_TOKEN_MESSAGE,
    INVALID_TOKEN_MESSAGE,
    TokenService,
)

SECRET = "unit-test-secret"


class TestTokenSigning:
    """Tests for TokenService.sign()."""

    def setup_method(self):
        self.service = TokenService(secret=SECRET, expires_in=timedelta(hours=1))

    @pytest.mark.asyncio
    async def test_sign_embeds_user_id(self):
        """The payload carries the user id as a string."""
        user_id = uuid4()
        token = await self.service.sign(user_id)

        claims = jwt.decode(token, SECRET, algorithms=["HS256"])
        assert claims["id"] == str(user_id)

    @pytest.mark.asyncio
    async def test_sign_sets_expiry_from_settings(self):
        """exp - iat equals the configured lifetime."""
        token = await self.service.sign(uuid4())

        claims = jwt.decode(token, SECRET, algorithms=["HS256"])
        assert claims["exp"] - claims["iat"] == 3600

    @pytest.mark.asyncio
    async def test_sign_without_secret_raises_signing_error(self):
        """A missing secret is an internal failure, not a client error."""
        service = TokenService(secret="", expires_in=timedelta(hours=1))

        with pytest.raises(TokenSigningError) as exc_info:
            await service.sign(uuid4())

        assert exc_info.value.status_code == 500
        assert exc_info.value.is_operational is False

    @pytest.mark.asyncio
    async def test_sign_with_unknown_algorithm_raises_signing_error(self):
        """Library failures are wrapped and keep their cause."""
        service = TokenService(secret=SECRET, expires_in=timedelta(hours=1), algorithm="NOPE")

        with pytest.raises(TokenSigningError) as exc_info:
            await service.sign(uuid4())

        assert exc_info.value.cause is not None


class TestTokenVerification:
    """Tests for TokenService.verify()."""

    def setup_method(self):
        self.service = TokenService(secret=SECRET, expires_in=timedelta(hours=1))

    @pytest.mark.asyncio
    async def test_verify_round_trip(self):
        user_id = uuid4()
        token = await self.service.sign(user_id)

        payload = await self.service.verify(token)
        assert payload["id"] == str(user_id)

    @pytest.mark.asyncio
    async def test_verify_rejects_wrong_secret(self):
        """A token signed with another secret is invalid."""
        other = TokenService(secret="someone-else", expires_in=timedelta(hours=1))
        token = await other.sign(uuid4())

        with pytest.raises(AuthenticationError, match=INVALID_TOKEN_MESSAGE):
            await self.service.verify(token)

    @pytest.mark.asyncio
    async def test_verify_rejects_garbage(self):
        with pytest.raises(AuthenticationError, match=INVALID_TOKEN_MESSAGE):
            await self.service.verify("not-a-jwt")

    @pytest.mark.asyncio
    async def test_verify_reports_expired_tokens(self):
        """Expired tokens get their own message."""
        token = jwt.encode({"id": str(uuid4()), "iat": 1000, "exp": 2000}, SECRET, algorithm="HS256")

        with pytest.raises(AuthenticationError) as exc_info:
            await self.service.verify(token)

        assert exc_info.value.message == EXPIRED_TOKEN_MESSAGE
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_verify_rejects_token_without_subject(self):
        token = jwt.encode({"sub": "nobody"}, SECRET, algorithm="HS256")

        with pytest.raises(AuthenticationError, match=INVALID_TOKEN_MESSAGE):
            await self.service.verify(token)


class TestDurationParsing:
    """Tests for the JWT_EXPIRES_IN notation."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("90d", timedelta(days=90)),
            ("12h", timedelta(hours=12)),
            ("30m", timedelta(minutes=30)),
            ("45s", timedelta(seconds=45)),
            ("600", timedelta(seconds=600)),
            (120, timedelta(seconds=120)),
        ],
    )
    def test_parse_duration(self, raw, expected):
        assert parse_duration(raw) == expected

    @pytest.mark.parametrize("raw", ["", "ninety days", "10y", "0"])
    def test_parse_duration_rejects_bad_values(self, raw):
        with pytest.raises(ValueError):
            parse_duration(raw)
