"""CRUD operations for playlists and their entries."""

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db.crud.common import get_or_404
from vidtube.db.crud.videos import get_video_or_404, get_visible_video_or_404
from vidtube.errors import ConflictError, NotFoundError
from vidtube.models import Playlist, PlaylistVideo
from vidtube.models.schemas import PlaylistCreate, PlaylistUpdate
from vidtube.services.guard import authorize


async def create_playlist(db: AsyncSession, owner_id: str, data: PlaylistCreate) -> Playlist:
    playlist = Playlist(name=data.name, description=data.description, owner_id=owner_id)
    db.add(playlist)
    await db.flush()
    await db.refresh(playlist)
    return playlist


async def get_playlist_or_404(db: AsyncSession, playlist_id: str) -> Playlist:
    return await get_or_404(db, Playlist, playlist_id, "playlist")


async def get_owned_playlist(db: AsyncSession, playlist_id: str, caller_id: str) -> Playlist:
    playlist = await get_playlist_or_404(db, playlist_id)
    authorize(caller_id, playlist.owner_id, resource="playlist")
    return playlist


async def update_playlist(
    db: AsyncSession, playlist_id: str, caller_id: str, data: PlaylistUpdate
) -> Playlist:
    playlist = await get_owned_playlist(db, playlist_id, caller_id)
    if data.name is not None:
        playlist.name = data.name
    if data.description is not None:
        playlist.description = data.description.strip()
    await db.flush()
    await db.refresh(playlist)
    return playlist


async def delete_playlist(db: AsyncSession, playlist_id: str, caller_id: str) -> None:
    await get_owned_playlist(db, playlist_id, caller_id)
    await db.execute(delete(PlaylistVideo).where(PlaylistVideo.playlist_id == playlist_id))
    await db.execute(delete(Playlist).where(Playlist.id == playlist_id))


async def _get_entry(db: AsyncSession, playlist_id: str, video_id: str) -> PlaylistVideo | None:
    result = await db.execute(
        select(PlaylistVideo).where(
            PlaylistVideo.playlist_id == playlist_id,
            PlaylistVideo.video_id == video_id,
        )
    )
    return result.scalar_one_or_none()


async def add_video_to_playlist(
    db: AsyncSession, playlist_id: str, video_id: str, caller_id: str
) -> None:
    """Append a video at the end of the playlist.

    Raises:
        NotFoundError: playlist or video missing
        ForbiddenError: caller does not own the playlist
        ConflictError: video already in the playlist
    """
    playlist = await get_owned_playlist(db, playlist_id, caller_id)
    await get_visible_video_or_404(db, video_id, caller_id)

    if await _get_entry(db, playlist.id, video_id) is not None:
        raise ConflictError("Video already exists in playlist")

    last_position = (
        await db.execute(
            select(func.max(PlaylistVideo.position)).where(PlaylistVideo.playlist_id == playlist.id)
        )
    ).scalar_one()
    position = 0 if last_position is None else last_position + 1
    db.add(PlaylistVideo(playlist_id=playlist.id, video_id=video_id, position=position))
    await db.flush()


async def remove_video_from_playlist(
    db: AsyncSession, playlist_id: str, video_id: str, caller_id: str
) -> None:
    playlist = await get_owned_playlist(db, playlist_id, caller_id)
    await get_video_or_404(db, video_id)

    entry = await _get_entry(db, playlist.id, video_id)
    if entry is None:
        raise NotFoundError("Video not found in playlist")
    await db.delete(entry)
    await db.flush()
