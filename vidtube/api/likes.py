"""Like toggles and the liked-videos listing."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.auth import get_current_user
from vidtube.constants import MAX_LIKED_VIDEOS_PAGE_SIZE
from vidtube.db import get_db
from vidtube.db.crud import ToggleOutcome, get_video_or_404, require_object_id, toggle_like
from vidtube.db.queries import list_liked_videos
from vidtube.models import LikeTarget, LikeTargetKind
from vidtube.models.schemas import ApiResponse, LikedVideoItem, LikeToggleResult, Page, ok
from vidtube.models.user import User
from vidtube.utils.cache import invalidate_channel_stats
from vidtube.utils.pagination import parse_page_params

router = APIRouter()
logger = logging.getLogger(__name__)


async def _toggle(db: AsyncSession, user: User, kind: LikeTargetKind, target_id: str) -> ApiResponse:
    require_object_id(target_id, kind.value)
    outcome = await toggle_like(db, user.id, LikeTarget(kind, target_id))
    is_liked = outcome is ToggleOutcome.CREATED
    if kind is LikeTargetKind.VIDEO:
        owner_id = (await get_video_or_404(db, target_id)).owner_id
        await db.commit()
        await invalidate_channel_stats(owner_id)
    logger.info(f"User {user.id} {'liked' if is_liked else 'unliked'} {kind.value} {target_id}")
    message = f"{kind.value.capitalize()} {'liked' if is_liked else 'unliked'} successfully"
    return ok(LikeToggleResult(is_liked=is_liked), message)


@router.post("/toggle/v/{video_id}", response_model=ApiResponse[LikeToggleResult])
async def toggle_video_like(
    video_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    return await _toggle(db, user, LikeTargetKind.VIDEO, video_id)


@router.post("/toggle/c/{comment_id}", response_model=ApiResponse[LikeToggleResult])
async def toggle_comment_like(
    comment_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    return await _toggle(db, user, LikeTargetKind.COMMENT, comment_id)


@router.post("/toggle/t/{tweet_id}", response_model=ApiResponse[LikeToggleResult])
async def toggle_tweet_like(
    tweet_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    return await _toggle(db, user, LikeTargetKind.TWEET, tweet_id)


@router.get("/videos", response_model=ApiResponse[Page[LikedVideoItem]])
async def get_liked_videos(
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    page: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
) -> ApiResponse:
    """Videos the current user liked, most recently liked first."""
    params = parse_page_params(page, limit, max_limit=MAX_LIKED_VIDEOS_PAGE_SIZE)
    rows, total = await list_liked_videos(db, user.id, params)
    items = [LikedVideoItem(liked_at=liked_at, video=video) for liked_at, video in rows]
    return ok(Page.build(items, total, params), "Liked videos fetched successfully")
