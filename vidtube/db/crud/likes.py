"""Like toggling for videos, comments and tweets."""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db.crud.common import ToggleOutcome, get_or_404
from vidtube.db.crud.videos import get_visible_video_or_404
from vidtube.errors import ConflictError
from vidtube.models import Comment, Like, LikeTarget, LikeTargetKind, Tweet


async def get_like(db: AsyncSession, actor_id: str, target: LikeTarget) -> Like | None:
    result = await db.execute(
        select(Like).where(
            Like.liked_by == actor_id,
            Like.target_kind == target.kind,
            Like.target_id == target.id,
        )
    )
    return result.scalar_one_or_none()


async def _require_target(db: AsyncSession, actor_id: str, target: LikeTarget) -> None:
    """Check the target exists and the actor can see it."""
    if target.kind is LikeTargetKind.VIDEO:
        await get_visible_video_or_404(db, target.id, actor_id)
    elif target.kind is LikeTargetKind.COMMENT:
        comment = await get_or_404(db, Comment, target.id, "comment")
        await get_visible_video_or_404(db, comment.video_id, actor_id)
    else:
        await get_or_404(db, Tweet, target.id, "tweet")


async def toggle_like(db: AsyncSession, actor_id: str, target: LikeTarget) -> ToggleOutcome:
    """Like the target, or remove the existing like.

    Raises:
        NotFoundError: target does not exist, or is a video (or a comment on
            a video) the actor cannot see
        ConflictError: a concurrent request created the same like first
    """
    await _require_target(db, actor_id, target)

    existing = await get_like(db, actor_id, target)
    if existing is not None:
        await db.delete(existing)
        await db.flush()
        return ToggleOutcome.REMOVED

    db.add(Like.for_target(actor_id, target))
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        raise ConflictError("Like already exists") from e
    return ToggleOutcome.CREATED
