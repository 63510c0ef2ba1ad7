"""Video model."""

from sqlalchemy import Boolean, CheckConstraint, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from vidtube.models.base import Base, IdMixin, TimestampMixin


class Video(Base, IdMixin, TimestampMixin):
    """Uploaded video owned by a user (channel)."""

    __tablename__ = "videos"

    owner_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # Blob storage
    media_url: Mapped[str] = mapped_column(String(2000), nullable=False)
    media_public_id: Mapped[str | None] = mapped_column(String(500), nullable=True)
    thumbnail_url: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    thumbnail_public_id: Mapped[str | None] = mapped_column(String(500), nullable=True)

    duration_seconds: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    views: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_published: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    __table_args__ = (
        CheckConstraint("duration_seconds >= 0", name="ck_video_duration_non_negative"),
        CheckConstraint("views >= 0", name="ck_video_views_non_negative"),
        Index("ix_video_published_created", "is_published", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Video(id={self.id}, title={self.title})>"
