"""Playlist model and its ordered video entries."""

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from vidtube.models.base import Base, IdMixin, TimestampMixin


class Playlist(Base, IdMixin, TimestampMixin):
    """User-curated, ordered list of videos."""

    __tablename__ = "playlists"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    owner_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)

    def __repr__(self) -> str:
        return f"<Playlist(id={self.id}, name={self.name})>"


class PlaylistVideo(Base):
    """Position of a video inside a playlist. A video appears at most once."""

    __tablename__ = "playlist_videos"

    playlist_id: Mapped[str] = mapped_column(
        ForeignKey("playlists.id", ondelete="CASCADE"), primary_key=True
    )
    video_id: Mapped[str] = mapped_column(
        ForeignKey("videos.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
