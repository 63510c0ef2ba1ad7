"""CRUD operations for videos, including the cascading delete."""

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db.crud.common import get_or_404
from vidtube.db.crud.users import record_watch
from vidtube.db.queries import get_video_detail
from vidtube.errors import InternalError, NotFoundError
from vidtube.models import Comment, Like, LikeTargetKind, PlaylistVideo, Video, WatchHistoryEntry
from vidtube.models.schemas import VideoCreate, VideoDetail, VideoUpdate
from vidtube.services.guard import authorize
from vidtube.services.storage import BlobStorage, StoredBlob, delete_quietly, thumbnail_from_video_url
from vidtube.utils.logging import LogContext, get_logger

logger = get_logger(__name__)


async def get_video_or_404(db: AsyncSession, video_id: str) -> Video:
    return await get_or_404(db, Video, video_id, "video")


async def get_visible_video_or_404(db: AsyncSession, video_id: str, viewer_id: str | None) -> Video:
    """Load a video the viewer may see. Another user's draft is reported as missing."""
    video = await get_video_or_404(db, video_id)
    if not video.is_published and video.owner_id != viewer_id:
        raise NotFoundError("Video not found")
    return video


async def get_owned_video(db: AsyncSession, video_id: str, caller_id: str) -> Video:
    """Load a video the caller owns: BadRequest, then NotFound, then Forbidden."""
    video = await get_video_or_404(db, video_id)
    authorize(caller_id, video.owner_id, resource="video")
    return video


async def create_video(
    db: AsyncSession,
    owner_id: str,
    data: VideoCreate,
    media: StoredBlob,
    thumbnail: StoredBlob | None = None,
) -> Video:
    """Create a published video from uploaded blobs.

    Without an uploaded thumbnail the poster frame URL is derived from the
    video URL.
    """
    video = Video(
        owner_id=owner_id,
        title=data.title,
        description=data.description,
        media_url=media.url,
        media_public_id=media.public_id,
        thumbnail_url=thumbnail.url if thumbnail else thumbnail_from_video_url(media.url),
        thumbnail_public_id=thumbnail.public_id if thumbnail else None,
        duration_seconds=max(media.duration, 0.0),
    )
    db.add(video)
    await db.flush()
    await db.refresh(video)
    return video


async def view_video(db: AsyncSession, video_id: str, viewer_id: str | None = None) -> VideoDetail:
    """Fetch a video for watching.

    Every fetch counts as a view. Authenticated viewers get the video added
    to their watch history. Unpublished videos exist only for their owner.
    """
    await get_visible_video_or_404(db, video_id, viewer_id)

    await db.execute(
        update(Video).where(Video.id == video_id).values(views=Video.views + 1)
    )
    if viewer_id:
        await record_watch(db, viewer_id, video_id)

    detail = await get_video_detail(db, video_id, viewer_id)
    if detail is None:
        raise NotFoundError("Video not found")
    return detail


async def update_video(
    db: AsyncSession, video: Video, data: VideoUpdate, thumbnail: StoredBlob | None = None
) -> str | None:
    """Apply a metadata/thumbnail update.

    Returns:
        Public id of the replaced thumbnail, for the caller to clean up.
    """
    replaced: str | None = None
    if data.title is not None:
        video.title = data.title
    if data.description is not None:
        video.description = data.description
    if thumbnail is not None:
        replaced = video.thumbnail_public_id
        video.thumbnail_url = thumbnail.url
        video.thumbnail_public_id = thumbnail.public_id
    await db.flush()
    await db.refresh(video)
    return replaced


async def toggle_publish(db: AsyncSession, video: Video) -> Video:
    video.is_published = not video.is_published
    await db.flush()
    await db.refresh(video)
    return video


async def delete_video_likes(db: AsyncSession, video_id: str) -> None:
    """Likes on the video and on each of its comments."""
    comment_ids = select(Comment.id).where(Comment.video_id == video_id)
    await db.execute(
        delete(Like).where(Like.target_kind == LikeTargetKind.VIDEO, Like.target_id == video_id)
    )
    await db.execute(
        delete(Like).where(
            Like.target_kind == LikeTargetKind.COMMENT, Like.target_id.in_(comment_ids)
        )
    )


async def delete_video_comments(db: AsyncSession, video_id: str) -> None:
    await db.execute(delete(Comment).where(Comment.video_id == video_id))


async def remove_from_playlists(db: AsyncSession, video_id: str) -> None:
    await db.execute(delete(PlaylistVideo).where(PlaylistVideo.video_id == video_id))


async def remove_from_watch_histories(db: AsyncSession, video_id: str) -> None:
    await db.execute(delete(WatchHistoryEntry).where(WatchHistoryEntry.video_id == video_id))


async def delete_video(
    db: AsyncSession, video_id: str, caller_id: str, storage: BlobStorage
) -> None:
    """Delete a video and everything that references it, atomically.

    Likes (on the video and its comments), comments, playlist entries and
    watch-history entries go in the same transaction as the video row. Blob
    removal happens only after commit and never fails the request.

    Raises:
        BadRequestError: malformed id
        NotFoundError: no such video
        ForbiddenError: caller is not the owner
        InternalError: the transaction failed and was rolled back
    """
    video = await get_owned_video(db, video_id, caller_id)
    media_public_id = video.media_public_id
    thumbnail_public_id = video.thumbnail_public_id

    with LogContext(logger, video_id=video_id, owner_id=caller_id) as ctx:
        try:
            await delete_video_likes(db, video_id)
            await delete_video_comments(db, video_id)
            await remove_from_playlists(db, video_id)
            await remove_from_watch_histories(db, video_id)
            await db.execute(delete(Video).where(Video.id == video_id))
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            ctx.error(f"Video delete rolled back: {e}")
            raise InternalError("Failed to delete video") from e

        ctx.info("Video deleted")

    await delete_quietly(storage, media_public_id, resource_type="video")
    await delete_quietly(storage, thumbnail_public_id, resource_type="image")
