"""CRUD operations for users, sessions and watch history."""

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.auth.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    hash_token,
    verify_password,
)
from vidtube.errors import BadRequestError, ConflictError, NotFoundError, UnauthorizedError
from vidtube.models import User, WatchHistoryEntry
from vidtube.models.base import utcnow
from vidtube.models.schemas import AccountUpdate, TokenPair, UserRegister
from vidtube.services.storage import StoredBlob


async def get_user(db: AsyncSession, user_id: str) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def find_user(
    db: AsyncSession, username: str | None = None, email: str | None = None
) -> User | None:
    """Find a user matching either the username or the email."""
    conditions = []
    if username:
        conditions.append(User.username == username.strip().lower())
    if email:
        conditions.append(User.email == email.strip().lower())
    if not conditions:
        return None
    result = await db.execute(select(User).where(or_(*conditions)).limit(1))
    return result.scalar_one_or_none()


async def create_user(
    db: AsyncSession,
    data: UserRegister,
    avatar: StoredBlob,
    cover: StoredBlob | None = None,
) -> User:
    """Create a new user.

    Raises:
        ConflictError: username or email already taken
    """
    await ensure_available(db, data.username, data.email)

    user = User(
        username=data.username,
        email=data.email,
        full_name=data.full_name,
        password_hash=hash_password(data.password),
        avatar_url=avatar.url,
        cover_url=cover.url if cover else None,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


async def ensure_available(db: AsyncSession, username: str, email: str) -> None:
    """Fail fast on duplicates before any file is uploaded."""
    if await find_user(db, username=username, email=email):
        raise ConflictError("User with email or username already exists")


async def authenticate_user(
    db: AsyncSession, password: str, username: str | None = None, email: str | None = None
) -> User:
    user = await find_user(db, username=username, email=email)
    if user is None:
        raise NotFoundError("User does not exist")
    if not verify_password(password, user.password_hash):
        raise UnauthorizedError("Invalid user credentials")
    return user


async def issue_tokens(db: AsyncSession, user: User) -> TokenPair:
    """Mint a token pair and remember the refresh token's digest."""
    access_token = create_access_token(user)
    refresh_token = create_refresh_token(user)
    user.refresh_token_hash = hash_token(refresh_token)
    await db.flush()
    return TokenPair(access_token=access_token, refresh_token=refresh_token)


async def revoke_refresh_token(db: AsyncSession, user: User) -> None:
    user.refresh_token_hash = None
    await db.flush()


async def rotate_refresh_token(db: AsyncSession, refresh_token: str) -> tuple[User, TokenPair]:
    """Exchange a refresh token for a new pair.

    A token is accepted only while it is the latest one issued to the user.
    """
    claims = decode_token(refresh_token, "refresh")
    user = await get_user(db, claims["sub"])
    if user is None:
        raise UnauthorizedError("Invalid refresh token")
    if user.refresh_token_hash != hash_token(refresh_token):
        raise UnauthorizedError("Refresh token is expired or used")
    return user, await issue_tokens(db, user)


async def change_password(db: AsyncSession, user: User, old_password: str, new_password: str) -> None:
    if not verify_password(old_password, user.password_hash):
        raise BadRequestError("Invalid old password")
    user.password_hash = hash_password(new_password)
    await db.flush()


async def update_account(db: AsyncSession, user: User, data: AccountUpdate) -> User:
    if data.email is not None and data.email != user.email:
        taken = await db.execute(select(User.id).where(User.email == data.email, User.id != user.id))
        if taken.first() is not None:
            raise ConflictError("Email is already in use")
        user.email = data.email
    if data.full_name is not None:
        user.full_name = data.full_name
    await db.flush()
    await db.refresh(user)
    return user


async def replace_avatar(db: AsyncSession, user: User, blob: StoredBlob) -> str | None:
    """Point the user at a new avatar. Returns the previous avatar URL."""
    previous = user.avatar_url
    user.avatar_url = blob.url
    await db.flush()
    await db.refresh(user)
    return previous


async def replace_cover(db: AsyncSession, user: User, blob: StoredBlob) -> str | None:
    previous = user.cover_url
    user.cover_url = blob.url
    await db.flush()
    await db.refresh(user)
    return previous


async def record_watch(db: AsyncSession, user_id: str, video_id: str) -> None:
    """Add a video to the watch history, or refresh its recency if present."""
    result = await db.execute(
        select(WatchHistoryEntry).where(
            WatchHistoryEntry.user_id == user_id,
            WatchHistoryEntry.video_id == video_id,
        )
    )
    entry = result.scalar_one_or_none()
    if entry is None:
        db.add(WatchHistoryEntry(user_id=user_id, video_id=video_id, watched_at=utcnow()))
    else:
        entry.watched_at = utcnow()
    await db.flush()
