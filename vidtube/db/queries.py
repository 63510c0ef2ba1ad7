"""Aggregation queries behind the listing and detail endpoints.

Every listing is a single SELECT that joins the owning user for its public
snippet and attaches engagement counters as correlated scalar subqueries, so
counters never multiply rows and pagination stays a plain OFFSET/LIMIT.
Ordering always ends with the primary key in the same direction as the sort
key, which keeps pages stable when sort values tie.
"""

from collections.abc import Sequence
from typing import Any

from sqlalchemy import ColumnElement, Row, Select, and_, exists, false, func, literal, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from vidtube.constants import DEFAULT_SORT_FIELD, DEFAULT_SORT_ORDER
from vidtube.models import (
    Comment,
    Like,
    LikeTargetKind,
    Playlist,
    PlaylistVideo,
    Subscription,
    Tweet,
    User,
    Video,
    WatchHistoryEntry,
)
from vidtube.models.schemas import (
    ChannelSnippet,
    CommentListItem,
    OwnerSnippet,
    PlaylistDetail,
    PlaylistListItem,
    PlaylistRead,
    TweetListItem,
    VideoDetail,
    VideoListItem,
    VideoRead,
)
from vidtube.utils.pagination import PageParams

VIDEO_SORT_COLUMNS = {
    "created_at": Video.created_at,
    "createdAt": Video.created_at,
    "views": Video.views,
    "duration": Video.duration_seconds,
    "title": Video.title,
}


# =============================================================================
# Building blocks
# =============================================================================


def owner_columns(user: Any = User) -> list[ColumnElement]:
    """Public user fields, labelled for :func:`owner_from_row`."""
    return [
        user.id.label("owner_user_id"),
        user.username.label("owner_username"),
        user.full_name.label("owner_full_name"),
        user.avatar_url.label("owner_avatar_url"),
    ]


def owner_from_row(row: Row) -> OwnerSnippet:
    return OwnerSnippet(
        id=row.owner_user_id,
        username=row.owner_username,
        full_name=row.owner_full_name,
        avatar_url=row.owner_avatar_url,
    )


def likes_count(kind: LikeTargetKind, target_id: ColumnElement) -> ColumnElement[int]:
    """Number of likes on the target referenced by ``target_id``."""
    like = aliased(Like)
    return (
        select(func.count(like.id))
        .where(like.target_kind == kind, like.target_id == target_id)
        .scalar_subquery()
    )


def comments_count(video_id: ColumnElement) -> ColumnElement[int]:
    comment = aliased(Comment)
    return select(func.count(comment.id)).where(comment.video_id == video_id).scalar_subquery()


def subscribers_count(user_id: ColumnElement) -> ColumnElement[int]:
    subscription = aliased(Subscription)
    return (
        select(func.count(subscription.id))
        .where(subscription.channel_id == user_id)
        .scalar_subquery()
    )


def published_videos_count(user_id: ColumnElement) -> ColumnElement[int]:
    video = aliased(Video)
    return (
        select(func.count(video.id))
        .where(video.owner_id == user_id, video.is_published.is_(True))
        .scalar_subquery()
    )


def visible_to(viewer_id: str | None, video: Any = Video) -> ColumnElement[bool]:
    """Published videos, plus the viewer's own drafts."""
    if viewer_id is None:
        return video.is_published.is_(True)
    return or_(video.is_published.is_(True), video.owner_id == viewer_id)


def order_with_tiebreak(
    query: Select, sort_column: ColumnElement, id_column: ColumnElement, descending: bool
) -> Select:
    """Order by the sort key, then by id in the same direction."""
    if descending:
        return query.order_by(sort_column.desc(), id_column.desc())
    return query.order_by(sort_column.asc(), id_column.asc())


async def fetch_page(
    db: AsyncSession, query: Select, params: PageParams
) -> tuple[Sequence[Row], int]:
    """Execute a listing query for one page.

    Returns:
        (rows on this page, total matching rows). A page past the end yields
        no rows, not an error.
    """
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = (await db.execute(count_query)).scalar_one()

    if total == 0 or params.offset >= total:
        return [], total

    result = await db.execute(query.offset(params.offset).limit(params.page_size))
    return result.all(), total


# =============================================================================
# Videos
# =============================================================================


def video_listing_query(*, engagement: bool = True) -> Select:
    """Videos joined with their owner snippet and counters."""
    columns: list[Any] = [Video, *owner_columns()]
    if engagement:
        columns += [
            likes_count(LikeTargetKind.VIDEO, Video.id).label("likes_count"),
            comments_count(Video.id).label("comments_count"),
        ]
    return select(*columns).join(User, User.id == Video.owner_id)


def video_item_from_row(row: Row) -> VideoListItem:
    return VideoListItem(
        **VideoRead.model_validate(row.Video).model_dump(),
        owner=owner_from_row(row),
        likes_count=getattr(row, "likes_count", 0) or 0,
        comments_count=getattr(row, "comments_count", 0) or 0,
    )


def build_video_feed_query(
    *,
    owner_id: str | None = None,
    search: str | None = None,
    sort_by: str | None = None,
    sort_type: str | None = None,
    published_only: bool = True,
) -> Select:
    """Filtered, searchable, sortable video listing."""
    query = video_listing_query()

    if published_only:
        query = query.where(Video.is_published.is_(True))
    if owner_id:
        query = query.where(Video.owner_id == owner_id)
    if search and search.strip():
        term = search.strip()
        query = query.where(
            or_(
                Video.title.icontains(term, autoescape=True),
                Video.description.icontains(term, autoescape=True),
            )
        )

    sort_column = VIDEO_SORT_COLUMNS.get(sort_by or DEFAULT_SORT_FIELD, Video.created_at)
    descending = (sort_type or DEFAULT_SORT_ORDER) != "asc"
    return order_with_tiebreak(query, sort_column, Video.id, descending=descending)


async def list_videos(
    db: AsyncSession,
    params: PageParams,
    *,
    owner_id: str | None = None,
    search: str | None = None,
    sort_by: str | None = None,
    sort_type: str | None = None,
    published_only: bool = True,
) -> tuple[list[VideoListItem], int]:
    query = build_video_feed_query(
        owner_id=owner_id,
        search=search,
        sort_by=sort_by,
        sort_type=sort_type,
        published_only=published_only,
    )
    rows, total = await fetch_page(db, query, params)
    return [video_item_from_row(row) for row in rows], total


async def get_video_detail(
    db: AsyncSession, video_id: str, viewer_id: str | None = None
) -> VideoDetail | None:
    """Single video with owner, counters and the viewer's like/subscribe state."""
    if viewer_id:
        viewer_liked = exists().where(
            Like.liked_by == viewer_id,
            Like.target_kind == LikeTargetKind.VIDEO,
            Like.target_id == Video.id,
        )
        viewer_subscribed = exists().where(
            Subscription.subscriber_id == viewer_id,
            Subscription.channel_id == Video.owner_id,
        )
    else:
        viewer_liked = false()
        viewer_subscribed = false()

    query = video_listing_query().add_columns(
        subscribers_count(Video.owner_id).label("owner_subscribers_count"),
        viewer_liked.label("is_liked"),
        viewer_subscribed.label("is_subscribed"),
    ).where(Video.id == video_id).execution_options(populate_existing=True)

    row = (await db.execute(query)).first()
    if row is None:
        return None

    item = video_item_from_row(row)
    return VideoDetail(
        **item.model_dump(),
        owner_subscribers_count=row.owner_subscribers_count or 0,
        is_liked=bool(row.is_liked),
        is_subscribed=bool(row.is_subscribed),
    )


async def list_channel_videos(
    db: AsyncSession, owner_id: str, params: PageParams
) -> tuple[list[VideoListItem], int]:
    """A channel's own videos, unpublished included, newest first."""
    return await list_videos(db, params, owner_id=owner_id, published_only=False)


async def list_liked_videos(
    db: AsyncSession, user_id: str, params: PageParams
) -> tuple[list[tuple[Any, VideoListItem]], int]:
    """Videos the user liked, most recently liked first."""
    query = (
        video_listing_query()
        .add_columns(Like.created_at.label("liked_at"), Like.id.label("like_id"))
        .join(
            Like,
            and_(
                Like.target_kind == LikeTargetKind.VIDEO,
                Like.target_id == Video.id,
            ),
        )
        .where(Like.liked_by == user_id, visible_to(user_id))
    )
    query = order_with_tiebreak(query, Like.created_at, Like.id, descending=True)
    rows, total = await fetch_page(db, query, params)
    return [(row.liked_at, video_item_from_row(row)) for row in rows], total


async def get_watch_history(db: AsyncSession, user_id: str) -> list[VideoListItem]:
    """Watched videos, most recently watched first."""
    query = (
        video_listing_query(engagement=False)
        .join(WatchHistoryEntry, WatchHistoryEntry.video_id == Video.id)
        .where(WatchHistoryEntry.user_id == user_id, visible_to(user_id))
    )
    query = order_with_tiebreak(query, WatchHistoryEntry.watched_at, Video.id, descending=True)
    rows = (await db.execute(query)).all()
    return [video_item_from_row(row) for row in rows]


# =============================================================================
# Comments & tweets
# =============================================================================


def build_comment_feed_query(video_id: str) -> Select:
    query = (
        select(
            Comment,
            *owner_columns(),
            likes_count(LikeTargetKind.COMMENT, Comment.id).label("likes_count"),
        )
        .join(User, User.id == Comment.owner_id)
        .where(Comment.video_id == video_id)
    )
    return order_with_tiebreak(query, Comment.created_at, Comment.id, descending=True)


async def list_video_comments(
    db: AsyncSession, video_id: str, params: PageParams
) -> tuple[list[CommentListItem], int]:
    rows, total = await fetch_page(db, build_comment_feed_query(video_id), params)
    items = [
        CommentListItem(
            id=row.Comment.id,
            content=row.Comment.content,
            video_id=row.Comment.video_id,
            owner_id=row.Comment.owner_id,
            created_at=row.Comment.created_at,
            updated_at=row.Comment.updated_at,
            owner=owner_from_row(row),
            likes_count=row.likes_count or 0,
        )
        for row in rows
    ]
    return items, total


def build_tweet_feed_query(owner_id: str) -> Select:
    query = (
        select(
            Tweet,
            *owner_columns(),
            likes_count(LikeTargetKind.TWEET, Tweet.id).label("likes_count"),
        )
        .join(User, User.id == Tweet.owner_id)
        .where(Tweet.owner_id == owner_id)
    )
    return order_with_tiebreak(query, Tweet.created_at, Tweet.id, descending=True)


async def list_user_tweets(
    db: AsyncSession, owner_id: str, params: PageParams
) -> tuple[list[TweetListItem], int]:
    rows, total = await fetch_page(db, build_tweet_feed_query(owner_id), params)
    items = [
        TweetListItem(
            id=row.Tweet.id,
            content=row.Tweet.content,
            owner_id=row.Tweet.owner_id,
            created_at=row.Tweet.created_at,
            updated_at=row.Tweet.updated_at,
            owner=owner_from_row(row),
            likes_count=row.likes_count or 0,
        )
        for row in rows
    ]
    return items, total


# =============================================================================
# Playlists
# =============================================================================


def build_playlist_feed_query(owner_id: str, viewer_id: str | None = None) -> Select:
    """A user's playlists with owner snippet, visible-video count and preview thumbnail."""
    entry = aliased(PlaylistVideo)
    counted_video = aliased(Video)
    first_entry = aliased(PlaylistVideo)
    preview_video = aliased(Video)

    videos_count = (
        select(func.count(entry.video_id))
        .join(counted_video, counted_video.id == entry.video_id)
        .where(entry.playlist_id == Playlist.id, visible_to(viewer_id, counted_video))
        .scalar_subquery()
    )
    preview_thumbnail = (
        select(preview_video.thumbnail_url)
        .join(first_entry, first_entry.video_id == preview_video.id)
        .where(first_entry.playlist_id == Playlist.id, visible_to(viewer_id, preview_video))
        .order_by(first_entry.position.asc())
        .limit(1)
        .scalar_subquery()
    )
    query = (
        select(
            Playlist,
            *owner_columns(),
            videos_count.label("videos_count"),
            preview_thumbnail.label("preview_thumbnail_url"),
        )
        .join(User, User.id == Playlist.owner_id)
        .where(Playlist.owner_id == owner_id)
    )
    return order_with_tiebreak(query, Playlist.created_at, Playlist.id, descending=True)


async def list_user_playlists(
    db: AsyncSession, owner_id: str, params: PageParams, viewer_id: str | None = None
) -> tuple[list[PlaylistListItem], int]:
    rows, total = await fetch_page(db, build_playlist_feed_query(owner_id, viewer_id), params)
    items = [
        PlaylistListItem(
            **PlaylistRead.model_validate(row.Playlist).model_dump(),
            owner=owner_from_row(row),
            videos_count=row.videos_count or 0,
            preview_thumbnail_url=row.preview_thumbnail_url,
        )
        for row in rows
    ]
    return items, total


async def list_playlist_videos(
    db: AsyncSession, playlist_id: str, viewer_id: str | None = None
) -> list[VideoListItem]:
    """Videos of a playlist in playlist order; other users' drafts are left out."""
    query = (
        video_listing_query()
        .join(PlaylistVideo, PlaylistVideo.video_id == Video.id)
        .where(PlaylistVideo.playlist_id == playlist_id, visible_to(viewer_id))
        .order_by(PlaylistVideo.position.asc())
    )
    rows = (await db.execute(query)).all()
    return [video_item_from_row(row) for row in rows]


async def get_playlist_detail(
    db: AsyncSession, playlist_id: str, viewer_id: str | None = None
) -> PlaylistDetail | None:
    """Playlist with owner snippet, the videos the viewer may see, and totals over them."""
    query = (
        select(Playlist, *owner_columns())
        .join(User, User.id == Playlist.owner_id)
        .where(Playlist.id == playlist_id)
    )
    row = (await db.execute(query)).first()
    if row is None:
        return None

    videos = await list_playlist_videos(db, playlist_id, viewer_id)
    return PlaylistDetail(
        **PlaylistRead.model_validate(row.Playlist).model_dump(),
        owner=owner_from_row(row),
        videos=videos,
        total_videos=len(videos),
        total_views=sum(video.views for video in videos),
    )


# =============================================================================
# Subscriptions & channels
# =============================================================================


def _channel_snippet(row: Row, *, with_videos: bool) -> ChannelSnippet:
    return ChannelSnippet(
        id=row.owner_user_id,
        username=row.owner_username,
        full_name=row.owner_full_name,
        avatar_url=row.owner_avatar_url,
        subscribers_count=row.subscribers_count or 0,
        videos_count=(row.videos_count or 0) if with_videos else None,
    )


def build_subscribers_query(channel_id: str) -> Select:
    subscriber = aliased(User)
    query = (
        select(
            Subscription.created_at.label("subscribed_at"),
            *owner_columns(subscriber),
            subscribers_count(subscriber.id).label("subscribers_count"),
        )
        .join(subscriber, subscriber.id == Subscription.subscriber_id)
        .where(Subscription.channel_id == channel_id)
    )
    return order_with_tiebreak(query, Subscription.created_at, Subscription.id, descending=True)


def build_subscribed_channels_query(subscriber_id: str) -> Select:
    channel = aliased(User)
    query = (
        select(
            Subscription.created_at.label("subscribed_at"),
            *owner_columns(channel),
            subscribers_count(channel.id).label("subscribers_count"),
            published_videos_count(channel.id).label("videos_count"),
        )
        .join(channel, channel.id == Subscription.channel_id)
        .where(Subscription.subscriber_id == subscriber_id)
    )
    return order_with_tiebreak(query, Subscription.created_at, Subscription.id, descending=True)


async def list_channel_subscribers(
    db: AsyncSession, channel_id: str, params: PageParams
) -> tuple[list[tuple[Any, ChannelSnippet]], int]:
    rows, total = await fetch_page(db, build_subscribers_query(channel_id), params)
    return [(row.subscribed_at, _channel_snippet(row, with_videos=False)) for row in rows], total


async def list_subscribed_channels(
    db: AsyncSession, subscriber_id: str, params: PageParams
) -> tuple[list[tuple[Any, ChannelSnippet]], int]:
    rows, total = await fetch_page(db, build_subscribed_channels_query(subscriber_id), params)
    return [(row.subscribed_at, _channel_snippet(row, with_videos=True)) for row in rows], total


async def get_channel_profile(
    db: AsyncSession, username: str, viewer_id: str | None = None
) -> dict[str, Any] | None:
    """Channel page counters for a username."""
    subscribed_to = aliased(Subscription)
    channels_subscribed_to = (
        select(func.count(subscribed_to.id))
        .where(subscribed_to.subscriber_id == User.id)
        .scalar_subquery()
    )
    if viewer_id:
        is_subscribed = exists().where(
            Subscription.subscriber_id == viewer_id, Subscription.channel_id == User.id
        )
    else:
        is_subscribed = false()

    query = select(
        User,
        subscribers_count(User.id).label("subscribers_count"),
        channels_subscribed_to.label("channels_subscribed_to_count"),
        is_subscribed.label("is_subscribed"),
    ).where(User.username == username.strip().lower())

    row = (await db.execute(query)).first()
    if row is None:
        return None
    user = row.User
    return {
        "id": user.id,
        "username": user.username,
        "full_name": user.full_name,
        "avatar_url": user.avatar_url,
        "cover_url": user.cover_url,
        "subscribers_count": row.subscribers_count or 0,
        "channels_subscribed_to_count": row.channels_subscribed_to_count or 0,
        "is_subscribed": bool(row.is_subscribed),
    }


async def get_channel_stats(db: AsyncSession, owner_id: str) -> dict[str, int]:
    """Totals across all of a channel's videos, published or not."""
    video_totals = (
        await db.execute(
            select(
                func.count(Video.id).label("total_videos"),
                func.coalesce(func.sum(Video.views), literal(0)).label("total_views"),
            ).where(Video.owner_id == owner_id)
        )
    ).one()

    total_subscribers = (
        await db.execute(
            select(func.count(Subscription.id)).where(Subscription.channel_id == owner_id)
        )
    ).scalar_one()

    total_likes = (
        await db.execute(
            select(func.count(Like.id))
            .join(
                Video,
                and_(Like.target_kind == LikeTargetKind.VIDEO, Like.target_id == Video.id),
            )
            .where(Video.owner_id == owner_id)
        )
    ).scalar_one()

    return {
        "total_videos": video_totals.total_videos or 0,
        "total_views": int(video_totals.total_views or 0),
        "total_subscribers": total_subscribers or 0,
        "total_likes": total_likes or 0,
    }
