"""Password hashing and JWT access/refresh tokens."""

import hashlib
import time
import uuid
from typing import Any, Literal

from authlib.jose import JoseError, jwt
from passlib.context import CryptContext

from vidtube.config import get_settings
from vidtube.errors import UnauthorizedError
from vidtube.models.user import User

TokenKind = Literal["access", "refresh"]

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

_JWT_HEADER = {"alg": "HS256"}


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)


def hash_token(token: str) -> str:
    """Digest stored in place of the raw refresh token."""
    return hashlib.sha256(token.encode()).hexdigest()


def _secret_for(kind: TokenKind) -> str:
    settings = get_settings()
    return settings.access_token_secret if kind == "access" else settings.refresh_token_secret


def create_access_token(user: User) -> str:
    """Short-lived token carrying the public identity claims."""
    settings = get_settings()
    now = int(time.time())
    payload = {
        "sub": user.id,
        "username": user.username,
        "email": user.email,
        "type": "access",
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": now + settings.access_token_expire_minutes * 60,
    }
    return jwt.encode(_JWT_HEADER, payload, _secret_for("access")).decode()


def create_refresh_token(user: User) -> str:
    settings = get_settings()
    now = int(time.time())
    payload = {
        "sub": user.id,
        "type": "refresh",
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": now + settings.refresh_token_expire_days * 24 * 60 * 60,
    }
    return jwt.encode(_JWT_HEADER, payload, _secret_for("refresh")).decode()


def decode_token(token: str, kind: TokenKind) -> dict[str, Any]:
    """Verify signature, expiry and token type.

    Raises:
        UnauthorizedError: for anything that is not a valid token of ``kind``
    """
    try:
        claims = jwt.decode(token, _secret_for(kind))
        claims.validate()
    except (JoseError, ValueError) as e:
        raise UnauthorizedError(f"Invalid {kind} token") from e

    if claims.get("type") != kind or not claims.get("sub"):
        raise UnauthorizedError(f"Invalid {kind} token")
    return dict(claims)
