"""Pytest configuration and fixtures."""

import os
import tempfile
from collections.abc import AsyncGenerator, Awaitable, Callable
from functools import lru_cache
from pathlib import Path

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("APP_SECRET_KEY", "test-app-secret-key-0123456789abcdef")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ACCESS_TOKEN_SECRET", "test-access-token-secret-0123456789abcdef")
os.environ.setdefault("REFRESH_TOKEN_SECRET", "test-refresh-token-secret-0123456789abcdef")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="vidtube-spool-"))

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from vidtube.auth.dependencies import get_current_user, get_optional_user
from vidtube.auth.security import create_access_token, hash_password
from vidtube.db.database import get_db
from vidtube.main import app
from vidtube.models import (
    Comment,
    Like,
    LikeTarget,
    Playlist,
    PlaylistVideo,
    Subscription,
    Tweet,
    User,
    Video,
    WatchHistoryEntry,
)
from vidtube.models.base import Base
from vidtube.services.storage import StoredBlob, get_storage

# Test database URL (uses SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_PASSWORD = "password123"


@lru_cache
def _test_password_hash() -> str:
    return hash_password(TEST_PASSWORD)


class FakeStorage:
    """In-memory blob store recording uploads and deletions."""

    def __init__(self) -> None:
        self.uploaded: list[StoredBlob] = []
        self.deleted: list[tuple[str, str]] = []
        self.fail_deletes = False
        self._counter = 0

    async def upload(self, local_path: Path, *, resource_type: str = "auto") -> StoredBlob:
        local_path.unlink(missing_ok=True)
        self._counter += 1
        kind = "video" if resource_type == "video" else "image"
        public_id = f"vidtube/{kind}-{self._counter}"
        extension = "mp4" if kind == "video" else "png"
        blob = StoredBlob(
            url=f"https://res.cloudinary.com/demo/{kind}/upload/v1/{public_id}.{extension}",
            public_id=public_id,
            resource_type=kind,
            duration=42.5 if kind == "video" else 0.0,
        )
        self.uploaded.append(blob)
        return blob

    async def delete(self, public_id: str, *, resource_type: str = "image") -> None:
        if self.fail_deletes:
            raise ValueError(f"storage refused to delete {public_id}")
        self.deleted.append((public_id, resource_type))

    async def close(self) -> None:
        return None


def auth_headers(user: User) -> dict[str, str]:
    """Bearer header carrying a real access token for ``user``."""
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session on a fresh in-memory database."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )
    async with session_maker() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def fake_storage() -> FakeStorage:
    return FakeStorage()


# =============================================================================
# Factories
# =============================================================================


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    async def _make_user(username: str, **overrides) -> User:
        user = User(
            username=username,
            email=overrides.pop("email", f"{username}@example.com"),
            full_name=overrides.pop("full_name", username.replace("_", " ").title()),
            password_hash=overrides.pop("password_hash", _test_password_hash()),
            avatar_url=overrides.pop("avatar_url", f"https://cdn.example.com/{username}.png"),
            **overrides,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_video(db_session: AsyncSession) -> Callable[..., Awaitable[Video]]:
    async def _make_video(owner: User, title: str = "A video", **overrides) -> Video:
        video = Video(
            owner_id=owner.id,
            title=title,
            description=overrides.pop("description", f"About {title}"),
            media_url=overrides.pop("media_url", "https://res.cloudinary.com/demo/video/upload/v1/clip.mp4"),
            media_public_id=overrides.pop("media_public_id", "clip"),
            thumbnail_url=overrides.pop("thumbnail_url", "https://res.cloudinary.com/demo/image/upload/v1/thumb.png"),
            thumbnail_public_id=overrides.pop("thumbnail_public_id", "thumb"),
            duration_seconds=overrides.pop("duration_seconds", 60.0),
            **overrides,
        )
        db_session.add(video)
        await db_session.commit()
        await db_session.refresh(video)
        return video

    return _make_video


@pytest.fixture
def make_comment(db_session: AsyncSession) -> Callable[..., Awaitable[Comment]]:
    async def _make_comment(video: Video, owner: User, content: str = "Nice video") -> Comment:
        comment = Comment(video_id=video.id, owner_id=owner.id, content=content)
        db_session.add(comment)
        await db_session.commit()
        await db_session.refresh(comment)
        return comment

    return _make_comment


@pytest.fixture
def make_tweet(db_session: AsyncSession) -> Callable[..., Awaitable[Tweet]]:
    async def _make_tweet(owner: User, content: str = "Hello there") -> Tweet:
        tweet = Tweet(owner_id=owner.id, content=content)
        db_session.add(tweet)
        await db_session.commit()
        await db_session.refresh(tweet)
        return tweet

    return _make_tweet


@pytest.fixture
def make_like(db_session: AsyncSession) -> Callable[..., Awaitable[Like]]:
    async def _make_like(user: User, target: LikeTarget) -> Like:
        like = Like.for_target(user.id, target)
        db_session.add(like)
        await db_session.commit()
        await db_session.refresh(like)
        return like

    return _make_like


@pytest.fixture
def make_playlist(db_session: AsyncSession) -> Callable[..., Awaitable[Playlist]]:
    async def _make_playlist(owner: User, name: str = "Favourites", videos: list[Video] = ()) -> Playlist:
        playlist = Playlist(owner_id=owner.id, name=name, description="")
        db_session.add(playlist)
        await db_session.flush()
        for position, video in enumerate(videos):
            db_session.add(PlaylistVideo(playlist_id=playlist.id, video_id=video.id, position=position))
        await db_session.commit()
        await db_session.refresh(playlist)
        return playlist

    return _make_playlist


@pytest.fixture
def subscribe(db_session: AsyncSession) -> Callable[..., Awaitable[Subscription]]:
    async def _subscribe(subscriber: User, channel: User) -> Subscription:
        subscription = Subscription(subscriber_id=subscriber.id, channel_id=channel.id)
        db_session.add(subscription)
        await db_session.commit()
        await db_session.refresh(subscription)
        return subscription

    return _subscribe


@pytest.fixture
def watch(db_session: AsyncSession) -> Callable[..., Awaitable[None]]:
    async def _watch(user: User, video: Video) -> None:
        db_session.add(WatchHistoryEntry(user_id=user.id, video_id=video.id))
        await db_session.commit()

    return _watch


# =============================================================================
# Users & clients
# =============================================================================


@pytest_asyncio.fixture
async def test_user(make_user) -> User:
    """Create a test user for authenticated tests."""
    return await make_user("testuser")


@pytest_asyncio.fixture
async def other_user(make_user) -> User:
    """Create another test user for isolation tests."""
    return await make_user("otheruser")


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession, fake_storage: FakeStorage
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client that authenticates through real tokens."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: fake_storage

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def authenticated_client(
    db_session: AsyncSession, test_user: User, fake_storage: FakeStorage
) -> AsyncGenerator[AsyncClient, None]:
    """Create an authenticated test client with a test user."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    def override_get_current_user() -> User:
        return test_user

    def override_get_optional_user() -> User:
        return test_user

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user
    app.dependency_overrides[get_optional_user] = override_get_optional_user
    app.dependency_overrides[get_storage] = lambda: fake_storage

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
