"""Pydantic schemas for API validation and serialization.

All schemas serialize with camelCase keys and accept either snake_case or
camelCase on input.
"""

import re
from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from vidtube.constants import (
    COMMENT_MAX_LENGTH,
    EMAIL_PATTERN,
    PASSWORD_MAX_LENGTH,
    PASSWORD_MIN_LENGTH,
    PLAYLIST_NAME_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    TWEET_MAX_LENGTH,
    USERNAME_PATTERN,
)
from vidtube.errors import BadRequestError
from vidtube.utils.pagination import PageParams, total_pages

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


class CamelModel(BaseModel):
    """Base schema with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def parse_or_400(model: type[M], **data: object) -> M:
    """Validate handler-built input, turning validation failures into 400s."""
    try:
        return model(**data)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ()))
        message = first.get("msg", "invalid value").removeprefix("Value error, ")
        raise BadRequestError(f"{field}: {message}" if field else message) from e


def _require_text(value: str, field: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError(f"{field} is required")
    return value


# Envelopes
class ApiResponse(CamelModel, Generic[T]):
    """Uniform success envelope."""

    status_code: int = 200
    message: str = "Success"
    data: T | None = None
    success: bool = True


class Page(CamelModel, Generic[T]):
    """Paginated listing."""

    items: list[T]
    total_count: int
    page: int
    page_size: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, items: list[T], total_count: int, params: PageParams) -> "Page[T]":
        pages = total_pages(total_count, params.page_size)
        return cls(
            items=items,
            total_count=total_count,
            page=params.page,
            page_size=params.page_size,
            total_pages=pages,
            has_next=params.page < pages,
            has_prev=params.page > 1,
        )


def ok(data: object = None, message: str = "Success", status_code: int = 200) -> ApiResponse:
    """Wrap a payload in the success envelope."""
    return ApiResponse(status_code=status_code, message=message, data=data)


# User schemas
class OwnerSnippet(CamelModel):
    """Public projection of a user attached to other entities."""

    id: str
    username: str
    full_name: str
    avatar_url: str


class UserRead(CamelModel):
    """User read schema (never includes credentials)."""

    id: str
    username: str
    email: str
    full_name: str
    avatar_url: str
    cover_url: str | None = None
    created_at: datetime
    updated_at: datetime


class UserRegister(CamelModel):
    """Registration input (multipart form fields)."""

    username: str
    email: str
    full_name: str
    password: str

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        v = v.strip()
        if not re.fullmatch(USERNAME_PATTERN, v):
            raise ValueError("username must be 3-30 letters, digits or underscores")
        return v.lower()

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip().lower()
        if not re.fullmatch(EMAIL_PATTERN, v):
            raise ValueError("email is not valid")
        return v

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, v: str) -> str:
        return _require_text(v, "full name")

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not PASSWORD_MIN_LENGTH <= len(v) <= PASSWORD_MAX_LENGTH:
            raise ValueError(
                f"password must be {PASSWORD_MIN_LENGTH}-{PASSWORD_MAX_LENGTH} characters"
            )
        return v


class LoginRequest(CamelModel):
    """Login with username or email."""

    username: str | None = None
    email: str | None = None
    password: str = Field(min_length=1)

    @model_validator(mode="after")
    def require_identifier(self) -> "LoginRequest":
        if not (self.username or self.email):
            raise ValueError("username or email is required")
        return self


class LoginResponse(CamelModel):
    user: UserRead
    access_token: str
    refresh_token: str


class TokenPair(CamelModel):
    access_token: str
    refresh_token: str


class RefreshTokenRequest(CamelModel):
    refresh_token: str | None = None


class ChangePasswordRequest(CamelModel):
    old_password: str = Field(min_length=1)
    new_password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)


class AccountUpdate(CamelModel):
    """Account details update; at least one field."""

    full_name: str | None = None
    email: str | None = None

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, v: str | None) -> str | None:
        return _require_text(v, "full name") if v is not None else None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip().lower()
        if not re.fullmatch(EMAIL_PATTERN, v):
            raise ValueError("email is not valid")
        return v

    @model_validator(mode="after")
    def require_one_field(self) -> "AccountUpdate":
        if self.full_name is None and self.email is None:
            raise ValueError("fullName or email is required")
        return self


class ChannelProfile(CamelModel):
    """Public channel page."""

    id: str
    username: str
    full_name: str
    avatar_url: str
    cover_url: str | None = None
    subscribers_count: int
    channels_subscribed_to_count: int
    is_subscribed: bool


class ChannelSnippet(OwnerSnippet):
    """User snippet with channel counters."""

    subscribers_count: int = 0
    videos_count: int | None = None


# Video schemas
class VideoCreate(CamelModel):
    title: str = Field(max_length=TITLE_MAX_LENGTH)
    description: str

    @field_validator("title", "description")
    @classmethod
    def validate_text(cls, v: str) -> str:
        return _require_text(v, "title and description")


class VideoUpdate(CamelModel):
    title: str | None = Field(None, max_length=TITLE_MAX_LENGTH)
    description: str | None = None

    @field_validator("title", "description")
    @classmethod
    def validate_text(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()


class VideoRead(CamelModel):
    id: str
    title: str
    description: str
    media_url: str
    thumbnail_url: str | None = None
    duration_seconds: float
    views: int
    is_published: bool
    owner_id: str
    created_at: datetime
    updated_at: datetime


class VideoListItem(VideoRead):
    """Video with owner snippet and engagement counters."""

    owner: OwnerSnippet
    likes_count: int = 0
    comments_count: int = 0


class VideoDetail(VideoListItem):
    """Single video as seen by a (possibly anonymous) viewer."""

    owner_subscribers_count: int = 0
    is_liked: bool = False
    is_subscribed: bool = False


class LikedVideoItem(CamelModel):
    liked_at: datetime
    video: VideoListItem


# Comment schemas
class CommentCreate(CamelModel):
    content: str = Field(max_length=COMMENT_MAX_LENGTH)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return _require_text(v, "content")


class CommentRead(CamelModel):
    id: str
    content: str
    video_id: str
    owner_id: str
    created_at: datetime
    updated_at: datetime


class CommentListItem(CommentRead):
    owner: OwnerSnippet
    likes_count: int = 0


# Tweet schemas
class TweetCreate(CamelModel):
    content: str

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        v = _require_text(v, "content")
        if len(v) > TWEET_MAX_LENGTH:
            raise ValueError(f"content must be at most {TWEET_MAX_LENGTH} characters")
        return v


class TweetRead(CamelModel):
    id: str
    content: str
    owner_id: str
    created_at: datetime
    updated_at: datetime


class TweetListItem(TweetRead):
    owner: OwnerSnippet
    likes_count: int = 0


# Like schemas
class LikeToggleResult(CamelModel):
    is_liked: bool


# Subscription schemas
class SubscriptionToggleResult(CamelModel):
    is_subscribed: bool
    subscribers_count: int


class SubscriberItem(CamelModel):
    subscribed_at: datetime
    subscriber: ChannelSnippet


class SubscribedChannelItem(CamelModel):
    subscribed_at: datetime
    channel: ChannelSnippet


# Playlist schemas
class PlaylistCreate(CamelModel):
    name: str = Field(max_length=PLAYLIST_NAME_MAX_LENGTH)
    description: str = ""

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _require_text(v, "name")

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str) -> str:
        return v.strip()


class PlaylistUpdate(CamelModel):
    name: str | None = Field(None, max_length=PLAYLIST_NAME_MAX_LENGTH)
    description: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        return _require_text(v, "name") if v is not None else None

    @model_validator(mode="after")
    def require_one_field(self) -> "PlaylistUpdate":
        if self.name is None and self.description is None:
            raise ValueError("name or description is required")
        return self


class PlaylistRead(CamelModel):
    id: str
    name: str
    description: str
    owner_id: str
    created_at: datetime
    updated_at: datetime


class PlaylistListItem(PlaylistRead):
    owner: OwnerSnippet
    videos_count: int = 0
    preview_thumbnail_url: str | None = None


class PlaylistDetail(PlaylistRead):
    owner: OwnerSnippet
    videos: list[VideoListItem]
    total_videos: int
    total_views: int


# Dashboard schemas
class ChannelStats(CamelModel):
    total_videos: int
    total_views: int
    total_subscribers: int
    total_likes: int
