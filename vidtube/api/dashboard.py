"""Channel dashboard endpoints for the signed-in creator."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.auth import get_current_user
from vidtube.constants import MAX_VIDEOS_PAGE_SIZE
from vidtube.db import get_db
from vidtube.db.crud import get_cached_channel_stats
from vidtube.db.queries import list_channel_videos
from vidtube.models.schemas import ApiResponse, ChannelStats, Page, VideoListItem, ok
from vidtube.models.user import User
from vidtube.utils.pagination import parse_page_params

router = APIRouter()


@router.get("/stats", response_model=ApiResponse[ChannelStats])
async def get_stats(
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    """Total videos, views, subscribers and likes for the caller's channel."""
    stats = await get_cached_channel_stats(db, user.id)
    return ok(stats, "Channel stats fetched successfully")


@router.get("/videos", response_model=ApiResponse[Page[VideoListItem]])
async def get_channel_videos(
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    page: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
) -> ApiResponse:
    """All of the caller's videos, unpublished included."""
    params = parse_page_params(page, limit, max_limit=MAX_VIDEOS_PAGE_SIZE)
    items, total = await list_channel_videos(db, user.id, params)
    return ok(Page.build(items, total, params), "Channel videos fetched successfully")
