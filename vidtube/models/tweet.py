"""Tweet model."""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from vidtube.models.base import Base, IdMixin, TimestampMixin


class Tweet(Base, IdMixin, TimestampMixin):
    """Short text post (1-280 chars) on a user's channel."""

    __tablename__ = "tweets"

    content: Mapped[str] = mapped_column(String(280), nullable=False)
    owner_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)

    def __repr__(self) -> str:
        return f"<Tweet(id={self.id}, owner_id={self.owner_id})>"
