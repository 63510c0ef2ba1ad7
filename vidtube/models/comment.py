"""Comment model."""

from sqlalchemy import ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column

from vidtube.models.base import Base, IdMixin, TimestampMixin


class Comment(Base, IdMixin, TimestampMixin):
    """Comment left by a user on a video."""

    __tablename__ = "comments"

    content: Mapped[str] = mapped_column(Text, nullable=False)
    video_id: Mapped[str] = mapped_column(ForeignKey("videos.id", ondelete="CASCADE"), index=True)
    owner_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)

    def __repr__(self) -> str:
        return f"<Comment(id={self.id}, video_id={self.video_id})>"
