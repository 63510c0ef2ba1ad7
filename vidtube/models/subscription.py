"""Subscription model."""

from sqlalchemy import CheckConstraint, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from vidtube.models.base import Base, IdMixin, TimestampMixin


class Subscription(Base, IdMixin, TimestampMixin):
    """A subscriber following a channel (both are users)."""

    __tablename__ = "subscriptions"

    subscriber_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    channel_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)

    __table_args__ = (
        UniqueConstraint("subscriber_id", "channel_id", name="uq_subscription_pair"),
        CheckConstraint("subscriber_id != channel_id", name="ck_subscription_not_self"),
    )

    def __repr__(self) -> str:
        return f"<Subscription(subscriber={self.subscriber_id}, channel={self.channel_id})>"
