"""Channel subscription endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.auth import get_current_user
from vidtube.constants import MAX_SUBSCRIPTIONS_PAGE_SIZE
from vidtube.db import get_db
from vidtube.db.crud import ToggleOutcome, count_subscribers, require_object_id, toggle_subscription
from vidtube.db.queries import list_channel_subscribers, list_subscribed_channels
from vidtube.models.schemas import (
    ApiResponse,
    Page,
    SubscribedChannelItem,
    SubscriberItem,
    SubscriptionToggleResult,
    ok,
)
from vidtube.models.user import User
from vidtube.services.guard import authorize
from vidtube.utils.cache import invalidate_channel_stats
from vidtube.utils.pagination import parse_page_params

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/c/{channel_id}", response_model=ApiResponse[SubscriptionToggleResult])
async def toggle_channel_subscription(
    channel_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    """Subscribe to or unsubscribe from a channel."""
    outcome = await toggle_subscription(db, user.id, channel_id)
    is_subscribed = outcome is ToggleOutcome.CREATED
    await db.commit()
    await invalidate_channel_stats(channel_id)

    action = "subscribed to" if is_subscribed else "unsubscribed from"
    logger.info(f"User {user.id} {action} channel {channel_id}")
    result = SubscriptionToggleResult(
        is_subscribed=is_subscribed,
        subscribers_count=await count_subscribers(db, channel_id),
    )
    message = "Subscribed successfully" if is_subscribed else "Unsubscribed successfully"
    return ok(result, message)


@router.get("/c/{channel_id}/subscribers", response_model=ApiResponse[Page[SubscriberItem]])
async def get_channel_subscribers(
    channel_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    page: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
) -> ApiResponse:
    """Subscribers of the caller's own channel."""
    require_object_id(channel_id, "channel")
    authorize(user.id, channel_id, resource="channel's subscribers")

    params = parse_page_params(page, limit, max_limit=MAX_SUBSCRIPTIONS_PAGE_SIZE)
    rows, total = await list_channel_subscribers(db, channel_id, params)
    items = [SubscriberItem(subscribed_at=at, subscriber=snippet) for at, snippet in rows]
    return ok(Page.build(items, total, params), "Subscribers fetched successfully")


@router.get("/u/{subscriber_id}/channels", response_model=ApiResponse[Page[SubscribedChannelItem]])
async def get_subscribed_channels(
    subscriber_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    page: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
) -> ApiResponse:
    """Channels the caller subscribes to."""
    require_object_id(subscriber_id, "subscriber")
    authorize(user.id, subscriber_id, resource="subscription list")

    params = parse_page_params(page, limit, max_limit=MAX_SUBSCRIPTIONS_PAGE_SIZE)
    rows, total = await list_subscribed_channels(db, subscriber_id, params)
    items = [SubscribedChannelItem(subscribed_at=at, channel=snippet) for at, snippet in rows]
    return ok(Page.build(items, total, params), "Subscribed channels fetched successfully")
