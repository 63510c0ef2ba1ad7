"""Unpublished videos stay hidden from everyone but their owner."""

import pytest
from httpx import AsyncClient

from tests.conftest import auth_headers
from vidtube.models import LikeTarget, LikeTargetKind


@pytest.fixture
def make_draft(make_video):
    async def _make_draft(owner, title: str = "Secret draft"):
        return await make_video(owner, title=title, is_published=False)

    return _make_draft


class TestDraftsInPlaylists:
    @pytest.mark.asyncio
    async def test_cannot_add_someone_elses_draft(
        self, authenticated_client: AsyncClient, test_user, other_user, make_draft, make_playlist
    ):
        draft = await make_draft(other_user)
        playlist = await make_playlist(test_user)

        response = await authenticated_client.patch(f"/api/v1/playlists/add/{draft.id}/{playlist.id}")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_owner_can_add_own_draft(
        self, authenticated_client: AsyncClient, test_user, make_draft, make_playlist
    ):
        draft = await make_draft(test_user)
        playlist = await make_playlist(test_user)

        response = await authenticated_client.patch(f"/api/v1/playlists/add/{draft.id}/{playlist.id}")

        assert response.status_code == 200
        assert [video["id"] for video in response.json()["data"]["videos"]] == [draft.id]

    @pytest.mark.asyncio
    async def test_unpublished_entry_hidden_from_playlist_detail(
        self, authenticated_client: AsyncClient, test_user, other_user, make_video, make_draft,
        make_playlist,
    ):
        public = await make_video(other_user, title="public", views=3)
        draft = await make_draft(other_user)
        playlist = await make_playlist(test_user, videos=[draft, public])

        response = await authenticated_client.get(f"/api/v1/playlists/{playlist.id}")

        detail = response.json()["data"]
        assert [video["id"] for video in detail["videos"]] == [public.id]
        assert detail["totalVideos"] == 1
        assert detail["totalViews"] == 3

    @pytest.mark.asyncio
    async def test_unpublished_entry_left_out_of_playlist_counts(
        self, authenticated_client: AsyncClient, test_user, other_user, make_draft, make_playlist
    ):
        draft = await make_draft(other_user)
        await make_playlist(test_user, videos=[draft])

        response = await authenticated_client.get(f"/api/v1/playlists/user/{test_user.id}")

        item = response.json()["data"]["items"][0]
        assert item["videosCount"] == 0
        assert item["previewThumbnailUrl"] is None


class TestDraftsInComments:
    @pytest.mark.asyncio
    async def test_comments_on_someone_elses_draft_are_hidden(
        self, authenticated_client: AsyncClient, other_user, make_draft
    ):
        draft = await make_draft(other_user)

        listing = await authenticated_client.get(f"/api/v1/comments/{draft.id}")
        posting = await authenticated_client.post(f"/api/v1/comments/{draft.id}", json={"content": "hi"})

        assert listing.status_code == 404
        assert posting.status_code == 404

    @pytest.mark.asyncio
    async def test_owner_comments_on_own_draft(self, authenticated_client: AsyncClient, test_user, make_draft):
        draft = await make_draft(test_user)

        response = await authenticated_client.post(f"/api/v1/comments/{draft.id}", json={"content": "note"})

        assert response.status_code == 201


class TestDraftsInLikes:
    @pytest.mark.asyncio
    async def test_cannot_like_someone_elses_draft(
        self, authenticated_client: AsyncClient, other_user, make_draft
    ):
        draft = await make_draft(other_user)

        response = await authenticated_client.post(f"/api/v1/likes/toggle/v/{draft.id}")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_cannot_like_comment_on_someone_elses_draft(
        self, authenticated_client: AsyncClient, other_user, make_draft, make_comment
    ):
        draft = await make_draft(other_user)
        comment = await make_comment(draft, other_user)

        response = await authenticated_client.post(f"/api/v1/likes/toggle/c/{comment.id}")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_liked_video_disappears_once_unpublished(
        self, authenticated_client: AsyncClient, test_user, other_user, make_draft, make_like
    ):
        draft = await make_draft(other_user)
        await make_like(test_user, LikeTarget(LikeTargetKind.VIDEO, draft.id))

        response = await authenticated_client.get("/api/v1/likes/videos")

        data = response.json()["data"]
        assert data["items"] == []
        assert data["totalCount"] == 0


class TestDraftsInHistory:
    @pytest.mark.asyncio
    async def test_watched_video_disappears_once_unpublished(
        self, client: AsyncClient, test_user, other_user, make_video, make_draft, watch
    ):
        public = await make_video(other_user, title="public")
        draft = await make_draft(other_user)
        await watch(test_user, public)
        await watch(test_user, draft)

        response = await client.get("/api/v1/users/history", headers=auth_headers(test_user))

        assert [video["id"] for video in response.json()["data"]] == [public.id]

    @pytest.mark.asyncio
    async def test_owner_keeps_own_draft_in_history(
        self, client: AsyncClient, test_user, make_draft, watch
    ):
        draft = await make_draft(test_user)
        await watch(test_user, draft)

        response = await client.get("/api/v1/users/history", headers=auth_headers(test_user))

        assert [video["id"] for video in response.json()["data"]] == [draft.id]
