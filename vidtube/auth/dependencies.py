"""Authentication dependencies for FastAPI."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.auth.security import decode_token
from vidtube.constants import ACCESS_TOKEN_COOKIE
from vidtube.db import get_db
from vidtube.errors import UnauthorizedError
from vidtube.models.user import User


def extract_access_token(request: Request) -> str | None:
    """Access token from the cookie, falling back to the Authorization header."""
    token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if token:
        return token
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return None


async def get_optional_user(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User | None:
    """Get current user from the access token if one is presented.

    An invalid or expired token is treated like no token at all.
    """
    token = extract_access_token(request)
    if not token:
        return None

    try:
        claims = decode_token(token, "access")
    except UnauthorizedError:
        return None

    result = await db.execute(select(User).where(User.id == claims["sub"]))
    return result.scalar_one_or_none()


async def get_current_user(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Get current user, raising 401 if not authenticated."""
    token = extract_access_token(request)
    if not token:
        raise UnauthorizedError("Unauthorized access, token missing")

    claims = decode_token(token, "access")

    result = await db.execute(select(User).where(User.id == claims["sub"]))
    user = result.scalar_one_or_none()
    if not user:
        raise UnauthorizedError("Unauthorized access, user not found")
    return user
