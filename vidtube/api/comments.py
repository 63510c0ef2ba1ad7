"""Comment endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.auth import get_current_user
from vidtube.constants import MAX_COMMENTS_PAGE_SIZE
from vidtube.db import get_db
from vidtube.db.crud import add_comment, delete_comment, get_visible_video_or_404, update_comment
from vidtube.db.queries import list_video_comments
from vidtube.models.schemas import (
    ApiResponse,
    CommentCreate,
    CommentListItem,
    CommentRead,
    Page,
    ok,
)
from vidtube.models.user import User
from vidtube.utils.pagination import parse_page_params

router = APIRouter()


@router.get("/{video_id}", response_model=ApiResponse[Page[CommentListItem]])
async def get_video_comments(
    video_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    page: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
) -> ApiResponse:
    """Comments on a video, newest first."""
    await get_visible_video_or_404(db, video_id, user.id)
    params = parse_page_params(page, limit, max_limit=MAX_COMMENTS_PAGE_SIZE)
    items, total = await list_video_comments(db, video_id, params)
    return ok(Page.build(items, total, params), "Comments fetched successfully")


@router.post("/{video_id}", response_model=ApiResponse[CommentRead], status_code=201)
async def add_video_comment(
    video_id: str,
    data: CommentCreate,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    comment = await add_comment(db, video_id, user.id, data.content)
    return ok(CommentRead.model_validate(comment), "Comment added successfully", 201)


@router.patch("/c/{comment_id}", response_model=ApiResponse[CommentRead])
async def edit_comment(
    comment_id: str,
    data: CommentCreate,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    comment = await update_comment(db, comment_id, user.id, data.content)
    return ok(CommentRead.model_validate(comment), "Comment updated successfully")


@router.delete("/c/{comment_id}", response_model=ApiResponse[dict])
async def remove_comment(
    comment_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    await delete_comment(db, comment_id, user.id)
    return ok({}, "Comment deleted successfully")
