"""
Password hashing and access tokens.

Passwords are hashed with bcrypt. bcrypt only looks at the first 72 bytes of a
secret, so longer inputs are truncated explicitly before hashing and checking.

Access tokens are HS256 JWTs signed with ``AUTH__JWT_SECRET`` carrying the
user id in ``sub``.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from level.core.errors import UnauthorizedError

from .config import settings

_BCRYPT_MAX_BYTES = 72


def _secret_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.auth.bcrypt_rounds)
    return bcrypt.hashpw(_secret_bytes(password), salt).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(_secret_bytes(password), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed hash stored for the account
        return False


@dataclass
class TokenClaims:
    sub: str
    iat: int
    exp: int
    iss: str
    claims: Dict[str, Any]


def create_access_token(subject: str, *, now: Optional[int] = None) -> str:
    """Sign a token for ``subject`` valid for ``AUTH__TOKEN_TTL_SECONDS``."""
    issued_at = int(now if now is not None else time.time())
    claims = {
        "sub": subject,
        "iat": issued_at,
        "exp": issued_at + settings.auth.token_ttl_seconds,
        "iss": settings.auth.issuer,
    }
    return jwt.encode(claims, settings.auth.jwt_secret, algorithm=settings.auth.jwt_algorithm)


def decode_access_token(token: str) -> TokenClaims:
    """Verify signature, expiry and issuer of ``token``.

    Raises:
        UnauthorizedError: when the token is expired, malformed or forged
    """
    if not token:
        raise UnauthorizedError()
    try:
        claims = jwt.decode(
            token,
            settings.auth.jwt_secret,
            algorithms=[settings.auth.jwt_algorithm],
            issuer=settings.auth.issuer,
        )
    except ExpiredSignatureError:
        raise UnauthorizedError("Your session has expired") from None
    except JWTError:
        raise UnauthorizedError() from None

    sub = claims.get("sub")
    if not isinstance(sub, str) or not sub:
        raise UnauthorizedError()
    return TokenClaims(
        sub=sub,
        iat=int(claims.get("iat", 0)),
        exp=int(claims.get("exp", 0)),
        iss=str(claims.get("iss", "")),
        claims=claims,
    )
