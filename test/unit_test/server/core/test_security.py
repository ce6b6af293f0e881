import time

import pytest
from jose import jwt

from level.core.errors import UnauthorizedError
from level.server.core.config import settings
from level.server.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("correct horse")
        assert hashed != "correct horse"
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong horse", hashed)

    def test_malformed_hash_never_matches(self):
        assert verify_password("anything", "not-a-bcrypt-hash") is False

    def test_only_first_72_bytes_count(self):
        base = "x" * 72
        hashed = hash_password(base + "tail")
        assert verify_password(base + "different tail", hashed)


class TestAccessTokens:
    def test_round_trip(self):
        token = create_access_token("user-1")
        claims = decode_access_token(token)

        assert claims.sub == "user-1"
        assert claims.iss == settings.auth.issuer
        assert claims.exp - claims.iat == settings.auth.token_ttl_seconds

    def test_expired_token(self):
        issued = int(time.time()) - settings.auth.token_ttl_seconds - 60
        token = create_access_token("user-1", now=issued)

        with pytest.raises(UnauthorizedError, match="expired"):
            decode_access_token(token)

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
    def test_malformed_tokens(self, token):
        with pytest.raises(UnauthorizedError):
            decode_access_token(token)

    def test_foreign_signature(self):
        now = int(time.time())
        token = jwt.encode(
            {"sub": "user-1", "iat": now, "exp": now + 60, "iss": settings.auth.issuer},
            "another-secret",
            algorithm="HS256",
        )
        with pytest.raises(UnauthorizedError):
            decode_access_token(token)

    def test_wrong_issuer(self):
        now = int(time.time())
        token = jwt.encode(
            {"sub": "user-1", "iat": now, "exp": now + 60, "iss": "someone-else"},
            settings.auth.jwt_secret,
            algorithm=settings.auth.jwt_algorithm,
        )
        with pytest.raises(UnauthorizedError):
            decode_access_token(token)
