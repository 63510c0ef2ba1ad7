"""Tests for password hashing and JWT helpers."""

import pytest
from authlib.jose import jwt

from vidtube.auth.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    hash_token,
    verify_password,
)
from vidtube.config import get_settings
from vidtube.errors import UnauthorizedError


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("correct horse")

        assert hashed != "correct horse"
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong horse", hashed)

    def test_token_digest_is_stable(self):
        assert hash_token("abc") == hash_token("abc")
        assert hash_token("abc") != hash_token("abd")


class TestTokens:
    @pytest.mark.asyncio
    async def test_access_token_claims(self, test_user):
        claims = decode_token(create_access_token(test_user), "access")

        assert claims["sub"] == test_user.id
        assert claims["username"] == "testuser"
        assert claims["type"] == "access"

    @pytest.mark.asyncio
    async def test_refresh_token_is_not_an_access_token(self, test_user):
        refresh = create_refresh_token(test_user)

        assert decode_token(refresh, "refresh")["sub"] == test_user.id
        with pytest.raises(UnauthorizedError):
            decode_token(refresh, "access")

    @pytest.mark.asyncio
    async def test_tokens_are_unique(self, test_user):
        assert create_refresh_token(test_user) != create_refresh_token(test_user)

    @pytest.mark.asyncio
    async def test_tampered_token_rejected(self, test_user):
        token = create_access_token(test_user)
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, signature[::-1]])

        with pytest.raises(UnauthorizedError):
            decode_token(tampered, "access")

    def test_garbage_rejected(self):
        with pytest.raises(UnauthorizedError):
            decode_token("not-a-token", "access")

    @pytest.mark.asyncio
    async def test_expired_token_rejected(self, test_user):
        payload = {"sub": test_user.id, "type": "access", "iat": 1, "exp": 2}
        token = jwt.encode({"alg": "HS256"}, payload, get_settings().access_token_secret).decode()

        with pytest.raises(UnauthorizedError):
            decode_token(token, "access")
