"""CRUD operations for comments."""

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db.crud.common import get_or_404
from vidtube.db.crud.videos import get_visible_video_or_404
from vidtube.models import Comment, Like, LikeTargetKind
from vidtube.services.guard import authorize


async def add_comment(db: AsyncSession, video_id: str, owner_id: str, content: str) -> Comment:
    await get_visible_video_or_404(db, video_id, owner_id)
    comment = Comment(content=content, video_id=video_id, owner_id=owner_id)
    db.add(comment)
    await db.flush()
    await db.refresh(comment)
    return comment


async def get_owned_comment(db: AsyncSession, comment_id: str, caller_id: str) -> Comment:
    comment = await get_or_404(db, Comment, comment_id, "comment")
    authorize(caller_id, comment.owner_id, resource="comment")
    return comment


async def update_comment(db: AsyncSession, comment_id: str, caller_id: str, content: str) -> Comment:
    comment = await get_owned_comment(db, comment_id, caller_id)
    comment.content = content
    await db.flush()
    await db.refresh(comment)
    return comment


async def delete_comment(db: AsyncSession, comment_id: str, caller_id: str) -> None:
    """Delete a comment together with its likes."""
    await get_owned_comment(db, comment_id, caller_id)
    await db.execute(
        delete(Like).where(Like.target_kind == LikeTargetKind.COMMENT, Like.target_id == comment_id)
    )
    await db.execute(delete(Comment).where(Comment.id == comment_id))
