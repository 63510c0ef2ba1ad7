"""SQLAlchemy models."""

from vidtube.models.base import Base, is_valid_object_id, new_object_id
from vidtube.models.comment import Comment
from vidtube.models.like import Like, LikeTarget, LikeTargetKind
from vidtube.models.playlist import Playlist, PlaylistVideo
from vidtube.models.subscription import Subscription
from vidtube.models.tweet import Tweet
from vidtube.models.user import User, WatchHistoryEntry
from vidtube.models.video import Video

__all__ = [
    "Base",
    "Comment",
    "Like",
    "LikeTarget",
    "LikeTargetKind",
    "Playlist",
    "PlaylistVideo",
    "Subscription",
    "Tweet",
    "User",
    "Video",
    "WatchHistoryEntry",
    "is_valid_object_id",
    "new_object_id",
]
