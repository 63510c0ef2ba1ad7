"""Like model with a tagged polymorphic target."""

import enum
from dataclasses import dataclass

from sqlalchemy import Enum, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from vidtube.models.base import Base, IdMixin, TimestampMixin, is_valid_object_id


class LikeTargetKind(str, enum.Enum):
    """What a like points at."""

    VIDEO = "video"
    COMMENT = "comment"
    TWEET = "tweet"


@dataclass(frozen=True)
class LikeTarget:
    """Exactly one likeable entity, identified by kind and id."""

    kind: LikeTargetKind
    id: str

    def __post_init__(self) -> None:
        if not isinstance(self.kind, LikeTargetKind):
            raise ValueError(f"Unknown like target kind: {self.kind!r}")
        if not is_valid_object_id(self.id):
            raise ValueError(f"Invalid {self.kind.value} id: {self.id!r}")


class Like(Base, IdMixin, TimestampMixin):
    """A user's like on a video, comment or tweet."""

    __tablename__ = "likes"

    liked_by: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    target_kind: Mapped[LikeTargetKind] = mapped_column(Enum(LikeTargetKind), nullable=False)
    target_id: Mapped[str] = mapped_column(String(24), nullable=False)

    __table_args__ = (
        UniqueConstraint("liked_by", "target_kind", "target_id", name="uq_like_user_target"),
        Index("ix_like_target", "target_kind", "target_id"),
    )

    @property
    def target(self) -> LikeTarget:
        return LikeTarget(self.target_kind, self.target_id)

    @classmethod
    def for_target(cls, liked_by: str, target: LikeTarget) -> "Like":
        return cls(liked_by=liked_by, target_kind=target.kind, target_id=target.id)

    def __repr__(self) -> str:
        return f"<Like(id={self.id}, {self.target_kind.value}={self.target_id})>"
