"""User model and watch history."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from vidtube.models.base import Base, IdMixin, TimestampMixin, utcnow


class User(Base, IdMixin, TimestampMixin):
    """Registered account; also the channel that owns uploaded videos."""

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(30), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    avatar_url: Mapped[str] = mapped_column(String(2000), nullable=False)
    cover_url: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    # SHA-256 of the current refresh token; cleared on logout
    refresh_token_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username})>"


class WatchHistoryEntry(Base):
    """One video in a user's watch history (an ordered set)."""

    __tablename__ = "watch_history"

    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    video_id: Mapped[str] = mapped_column(
        ForeignKey("videos.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    watched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

