"""Video endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.auth import get_current_user, get_optional_user
from vidtube.constants import MAX_VIDEOS_PAGE_SIZE
from vidtube.db import get_db
from vidtube.db.crud import (
    create_video,
    delete_video,
    get_owned_video,
    require_object_id,
    toggle_publish,
    update_video,
    view_video,
)
from vidtube.db.queries import list_videos
from vidtube.errors import BadRequestError
from vidtube.models import is_valid_object_id
from vidtube.models.schemas import (
    ApiResponse,
    Page,
    VideoCreate,
    VideoDetail,
    VideoListItem,
    VideoRead,
    VideoUpdate,
    ok,
    parse_or_400,
)
from vidtube.models.user import User
from vidtube.services.storage import BlobStorage, delete_quietly, get_storage, upload_or_none
from vidtube.utils.cache import invalidate_channel_stats
from vidtube.utils.pagination import parse_page_params

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=ApiResponse[Page[VideoListItem]])
async def get_all_videos(
    db: Annotated[AsyncSession, Depends(get_db)],
    page: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
    query: Annotated[str | None, Query()] = None,
    sort_by: Annotated[str | None, Query(alias="sortBy")] = None,
    sort_type: Annotated[str | None, Query(alias="sortType")] = None,
    user_id: Annotated[str | None, Query(alias="userId")] = None,
) -> ApiResponse:
    """List published videos with search, sorting and an optional channel filter.

    A malformed ``userId`` is ignored rather than rejected.
    """
    params = parse_page_params(page, limit, max_limit=MAX_VIDEOS_PAGE_SIZE)
    owner_id = user_id if is_valid_object_id(user_id) else None

    items, total = await list_videos(
        db,
        params,
        owner_id=owner_id,
        search=query,
        sort_by=sort_by,
        sort_type=sort_type,
    )
    return ok(Page.build(items, total, params), "Videos fetched successfully")


@router.post("", response_model=ApiResponse[VideoRead], status_code=201)
async def publish_video(
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    storage: Annotated[BlobStorage, Depends(get_storage)],
    title: Annotated[str, Form()],
    description: Annotated[str, Form()],
    video_file: Annotated[UploadFile | None, File(alias="videoFile")] = None,
    thumbnail: Annotated[UploadFile | None, File()] = None,
) -> ApiResponse:
    """Upload a video file (and optional thumbnail) and publish it."""
    data = parse_or_400(VideoCreate, title=title, description=description)
    if video_file is None or not video_file.filename:
        raise BadRequestError("Video file is required")

    media = await upload_or_none(storage, video_file, resource_type="video")
    if media is None:
        raise BadRequestError("Video file is required")
    thumbnail_blob = await upload_or_none(storage, thumbnail, resource_type="image")

    video = await create_video(db, user.id, data, media, thumbnail_blob)
    result = VideoRead.model_validate(video)
    await db.commit()
    await invalidate_channel_stats(user.id)
    logger.info(f"Video {result.id} published by {user.id}")
    return ok(result, "Video published successfully", 201)


@router.get("/{video_id}", response_model=ApiResponse[VideoDetail])
async def get_video_by_id(
    video_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    viewer: Annotated[User | None, Depends(get_optional_user)],
) -> ApiResponse:
    """Watch a video: counts a view and records watch history for signed-in viewers."""
    require_object_id(video_id, "video")
    detail = await view_video(db, video_id, viewer.id if viewer else None)
    return ok(detail, "Video fetched successfully")


@router.patch("/{video_id}", response_model=ApiResponse[VideoRead])
async def update_video_details(
    video_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    storage: Annotated[BlobStorage, Depends(get_storage)],
    title: Annotated[str | None, Form()] = None,
    description: Annotated[str | None, Form()] = None,
    thumbnail: Annotated[UploadFile | None, File()] = None,
) -> ApiResponse:
    """Update title, description and/or thumbnail (owner only)."""
    data = parse_or_400(VideoUpdate, title=title, description=description)
    has_thumbnail = thumbnail is not None and bool(thumbnail.filename)
    if data.title is None and data.description is None and not has_thumbnail:
        raise BadRequestError("At least one field is required to update")

    video = await get_owned_video(db, video_id, user.id)
    thumbnail_blob = await upload_or_none(storage, thumbnail, resource_type="image")
    replaced_thumbnail = await update_video(db, video, data, thumbnail_blob)
    await delete_quietly(storage, replaced_thumbnail, resource_type="image")
    return ok(VideoRead.model_validate(video), "Video updated successfully")


@router.delete("/{video_id}", response_model=ApiResponse[dict])
async def delete_video_by_id(
    video_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    storage: Annotated[BlobStorage, Depends(get_storage)],
) -> ApiResponse:
    """Delete a video with its likes, comments, playlist and history entries."""
    await delete_video(db, video_id, user.id, storage)
    await invalidate_channel_stats(user.id)
    return ok({}, "Video deleted successfully")


@router.patch("/toggle/publish/{video_id}", response_model=ApiResponse[VideoRead])
async def toggle_publish_status(
    video_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    video = await get_owned_video(db, video_id, user.id)
    video = await toggle_publish(db, video)
    state = "published" if video.is_published else "unpublished"
    logger.info(f"Video {video.id} {state} by {user.id}")
    return ok(VideoRead.model_validate(video), f"Video {state} successfully")
