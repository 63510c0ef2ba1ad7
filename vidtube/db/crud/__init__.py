"""CRUD operations module."""

from vidtube.db.crud.comments import add_comment, delete_comment, update_comment
from vidtube.db.crud.common import ToggleOutcome, get_or_404, require_object_id
from vidtube.db.crud.dashboard import get_cached_channel_stats
from vidtube.db.crud.likes import toggle_like
from vidtube.db.crud.playlists import (
    add_video_to_playlist,
    create_playlist,
    delete_playlist,
    get_playlist_or_404,
    remove_video_from_playlist,
    update_playlist,
)
from vidtube.db.crud.subscriptions import count_subscribers, toggle_subscription
from vidtube.db.crud.tweets import create_tweet, delete_tweet, update_tweet
from vidtube.db.crud.users import (
    authenticate_user,
    change_password,
    create_user,
    ensure_available,
    find_user,
    get_user,
    issue_tokens,
    record_watch,
    replace_avatar,
    replace_cover,
    revoke_refresh_token,
    rotate_refresh_token,
    update_account,
)
from vidtube.db.crud.videos import (
    create_video,
    delete_video,
    get_owned_video,
    get_video_or_404,
    get_visible_video_or_404,
    toggle_publish,
    update_video,
    view_video,
)

__all__ = [
    "ToggleOutcome",
    "add_comment",
    "add_video_to_playlist",
    "authenticate_user",
    "change_password",
    "count_subscribers",
    "create_playlist",
    "create_tweet",
    "create_user",
    "create_video",
    "delete_comment",
    "delete_playlist",
    "delete_tweet",
    "delete_video",
    "ensure_available",
    "find_user",
    "get_cached_channel_stats",
    "get_or_404",
    "get_owned_video",
    "get_playlist_or_404",
    "get_user",
    "get_video_or_404",
    "get_visible_video_or_404",
    "issue_tokens",
    "record_watch",
    "remove_video_from_playlist",
    "replace_avatar",
    "replace_cover",
    "require_object_id",
    "revoke_refresh_token",
    "rotate_refresh_token",
    "toggle_like",
    "toggle_publish",
    "toggle_subscription",
    "update_account",
    "update_comment",
    "update_playlist",
    "update_tweet",
    "update_video",
    "view_video",
]
