"""Tests for comment endpoints."""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tests.conftest import auth_headers
from vidtube.models import Comment, Like, LikeTarget, LikeTargetKind

MISSING_ID = "65f1a2b3c4d5e6f7a8b9c0d1"


class TestListComments:
    """Tests for GET /comments/{videoId}."""

    @pytest.mark.asyncio
    async def test_newest_first_with_owner_and_likes(
        self, authenticated_client: AsyncClient, test_user, other_user, make_video, make_comment, make_like
    ):
        video = await make_video(test_user)
        older = await make_comment(video, other_user, "first!")
        newer = await make_comment(video, test_user, "thanks")
        await make_like(test_user, LikeTarget(LikeTargetKind.COMMENT, older.id))

        response = await authenticated_client.get(f"/api/v1/comments/{video.id}")

        assert response.status_code == 200
        items = response.json()["data"]["items"]
        assert [item["id"] for item in items] == [newer.id, older.id]
        assert items[1]["likesCount"] == 1
        assert items[1]["owner"]["username"] == "otheruser"
        assert "passwordHash" not in items[1]["owner"]

    @pytest.mark.asyncio
    async def test_limit_ceiling_is_100(self, authenticated_client: AsyncClient, test_user, make_video):
        video = await make_video(test_user)

        response = await authenticated_client.get(
            f"/api/v1/comments/{video.id}", params={"limit": 500}
        )

        assert response.json()["data"]["pageSize"] == 100

    @pytest.mark.asyncio
    async def test_missing_video(self, authenticated_client: AsyncClient):
        response = await authenticated_client.get(f"/api/v1/comments/{MISSING_ID}")

        assert response.status_code == 404


class TestWriteComments:
    """Tests for adding, editing and deleting comments."""

    @pytest.mark.asyncio
    async def test_add_comment_trims_content(
        self, authenticated_client: AsyncClient, test_user, make_video
    ):
        video = await make_video(test_user)

        response = await authenticated_client.post(
            f"/api/v1/comments/{video.id}", json={"content": "  great stuff  "}
        )

        assert response.status_code == 201
        comment = response.json()["data"]
        assert comment["content"] == "great stuff"
        assert comment["videoId"] == video.id
        assert comment["ownerId"] == test_user.id

    @pytest.mark.asyncio
    async def test_blank_comment_rejected(self, authenticated_client: AsyncClient, test_user, make_video):
        video = await make_video(test_user)

        response = await authenticated_client.post(
            f"/api/v1/comments/{video.id}", json={"content": "   "}
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_comment_on_missing_video(self, authenticated_client: AsyncClient):
        response = await authenticated_client.post(
            f"/api/v1/comments/{MISSING_ID}", json={"content": "hello"}
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_non_owner_cannot_edit(
        self, client: AsyncClient, test_user, other_user, make_video, make_comment, db_session: AsyncSession
    ):
        video = await make_video(test_user)
        comment = await make_comment(video, test_user, "original")

        response = await client.patch(
            f"/api/v1/comments/c/{comment.id}",
            json={"content": "edited"},
            headers=auth_headers(other_user),
        )

        assert response.status_code == 403
        content = (
            await db_session.execute(select(Comment.content).where(Comment.id == comment.id))
        ).scalar_one()
        assert content == "original"

    @pytest.mark.asyncio
    async def test_owner_edits(self, client: AsyncClient, test_user, make_video, make_comment):
        video = await make_video(test_user)
        comment = await make_comment(video, test_user, "original")

        response = await client.patch(
            f"/api/v1/comments/c/{comment.id}",
            json={"content": "edited"},
            headers=auth_headers(test_user),
        )

        assert response.status_code == 200
        assert response.json()["data"]["content"] == "edited"

    @pytest.mark.asyncio
    async def test_delete_removes_comment_likes(
        self, client: AsyncClient, test_user, other_user, make_video, make_comment, make_like,
        db_session: AsyncSession,
    ):
        video = await make_video(test_user)
        comment = await make_comment(video, other_user)
        comment_id = comment.id
        await make_like(test_user, LikeTarget(LikeTargetKind.COMMENT, comment_id))

        response = await client.delete(
            f"/api/v1/comments/c/{comment_id}", headers=auth_headers(other_user)
        )

        assert response.status_code == 200
        remaining_likes = (
            await db_session.execute(select(func.count(Like.id)).where(Like.target_id == comment_id))
        ).scalar_one()
        assert remaining_likes == 0

    @pytest.mark.asyncio
    async def test_malformed_comment_id(self, client: AsyncClient, test_user):
        response = await client.delete("/api/v1/comments/c/xyz", headers=auth_headers(test_user))

        assert response.status_code == 400
