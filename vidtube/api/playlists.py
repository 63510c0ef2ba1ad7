"""Playlist endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.auth import get_current_user
from vidtube.constants import MAX_PLAYLISTS_PAGE_SIZE
from vidtube.db import get_db
from vidtube.db.crud import (
    add_video_to_playlist,
    create_playlist,
    delete_playlist,
    get_or_404,
    remove_video_from_playlist,
    require_object_id,
    update_playlist,
)
from vidtube.db.queries import get_playlist_detail, list_user_playlists
from vidtube.errors import NotFoundError
from vidtube.models.schemas import (
    ApiResponse,
    Page,
    PlaylistCreate,
    PlaylistDetail,
    PlaylistListItem,
    PlaylistRead,
    PlaylistUpdate,
    ok,
)
from vidtube.models.user import User
from vidtube.utils.pagination import parse_page_params

router = APIRouter()


async def _detail_or_404(db: AsyncSession, playlist_id: str, viewer_id: str) -> PlaylistDetail:
    detail = await get_playlist_detail(db, playlist_id, viewer_id)
    if detail is None:
        raise NotFoundError("Playlist not found")
    return detail


@router.post("", response_model=ApiResponse[PlaylistRead], status_code=201)
async def create_new_playlist(
    data: PlaylistCreate,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    playlist = await create_playlist(db, user.id, data)
    return ok(PlaylistRead.model_validate(playlist), "Playlist created successfully", 201)


@router.get("/user/{user_id}", response_model=ApiResponse[Page[PlaylistListItem]])
async def get_user_playlists(
    user_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    page: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
) -> ApiResponse:
    await get_or_404(db, User, user_id, "user")
    params = parse_page_params(page, limit, max_limit=MAX_PLAYLISTS_PAGE_SIZE)
    items, total = await list_user_playlists(db, user_id, params, viewer_id=user.id)
    return ok(Page.build(items, total, params), "Playlists fetched successfully")


@router.get("/{playlist_id}", response_model=ApiResponse[PlaylistDetail])
async def get_playlist_by_id(
    playlist_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    require_object_id(playlist_id, "playlist")
    return ok(await _detail_or_404(db, playlist_id, user.id), "Playlist fetched successfully")


@router.patch("/add/{video_id}/{playlist_id}", response_model=ApiResponse[PlaylistDetail])
async def add_video(
    video_id: str,
    playlist_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    require_object_id(video_id, "video")
    await add_video_to_playlist(db, playlist_id, video_id, user.id)
    return ok(await _detail_or_404(db, playlist_id, user.id), "Video added to playlist successfully")


@router.patch("/remove/{video_id}/{playlist_id}", response_model=ApiResponse[PlaylistDetail])
async def remove_video(
    video_id: str,
    playlist_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    require_object_id(video_id, "video")
    await remove_video_from_playlist(db, playlist_id, video_id, user.id)
    return ok(await _detail_or_404(db, playlist_id, user.id), "Video removed from playlist successfully")


@router.patch("/{playlist_id}", response_model=ApiResponse[PlaylistRead])
async def edit_playlist(
    playlist_id: str,
    data: PlaylistUpdate,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    playlist = await update_playlist(db, playlist_id, user.id, data)
    return ok(PlaylistRead.model_validate(playlist), "Playlist updated successfully")


@router.delete("/{playlist_id}", response_model=ApiResponse[dict])
async def remove_playlist(
    playlist_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    await delete_playlist(db, playlist_id, user.id)
    return ok({}, "Playlist deleted successfully")
