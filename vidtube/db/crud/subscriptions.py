"""Channel subscriptions."""

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db.crud.common import ToggleOutcome, get_or_404, require_object_id
from vidtube.errors import ConflictError
from vidtube.models import Subscription, User
from vidtube.services.guard import ensure_not_self


async def count_subscribers(db: AsyncSession, channel_id: str) -> int:
    result = await db.execute(
        select(func.count(Subscription.id)).where(Subscription.channel_id == channel_id)
    )
    return result.scalar_one()


async def toggle_subscription(
    db: AsyncSession, subscriber_id: str, channel_id: str
) -> ToggleOutcome:
    """Subscribe to a channel, or unsubscribe if already subscribed.

    Raises:
        BadRequestError: malformed id or self-subscription
        NotFoundError: channel does not exist
        ConflictError: a concurrent request created the same subscription first
    """
    require_object_id(channel_id, "channel")
    ensure_not_self(subscriber_id, channel_id)
    await get_or_404(db, User, channel_id, "channel")

    result = await db.execute(
        select(Subscription).where(
            Subscription.subscriber_id == subscriber_id,
            Subscription.channel_id == channel_id,
        )
    )
    existing = result.scalar_one_or_none()
    if existing is not None:
        await db.delete(existing)
        await db.flush()
        return ToggleOutcome.REMOVED

    db.add(Subscription(subscriber_id=subscriber_id, channel_id=channel_id))
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        raise ConflictError("Already subscribed") from e
    return ToggleOutcome.CREATED
