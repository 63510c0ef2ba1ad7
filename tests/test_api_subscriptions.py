"""Tests for subscription endpoints."""

import pytest
from httpx import AsyncClient

from tests.conftest import auth_headers

MISSING_ID = "65f1a2b3c4d5e6f7a8b9c0d1"


class TestToggleSubscription:
    """Tests for POST /subscriptions/c/{channelId}."""

    @pytest.mark.asyncio
    async def test_subscribe_then_unsubscribe(self, authenticated_client: AsyncClient, other_user):
        first = await authenticated_client.post(f"/api/v1/subscriptions/c/{other_user.id}")
        second = await authenticated_client.post(f"/api/v1/subscriptions/c/{other_user.id}")

        assert first.status_code == 200
        assert first.json()["data"] == {"isSubscribed": True, "subscribersCount": 1}
        assert second.json()["data"] == {"isSubscribed": False, "subscribersCount": 0}

    @pytest.mark.asyncio
    async def test_self_subscription_rejected(self, authenticated_client: AsyncClient, test_user):
        response = await authenticated_client.post(f"/api/v1/subscriptions/c/{test_user.id}")

        assert response.status_code == 400
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_missing_channel(self, authenticated_client: AsyncClient):
        response = await authenticated_client.post(f"/api/v1/subscriptions/c/{MISSING_ID}")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_malformed_channel_id(self, authenticated_client: AsyncClient):
        response = await authenticated_client.post("/api/v1/subscriptions/c/abc")

        assert response.status_code == 400


class TestSubscriptionListings:
    """Tests for subscriber and subscribed-channel listings."""

    @pytest.mark.asyncio
    async def test_own_subscribers(
        self, client: AsyncClient, test_user, other_user, make_user, subscribe
    ):
        third = await make_user("third_user")
        await subscribe(other_user, test_user)
        await subscribe(third, test_user)
        await subscribe(third, other_user)

        response = await client.get(
            f"/api/v1/subscriptions/c/{test_user.id}/subscribers", headers=auth_headers(test_user)
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["totalCount"] == 2
        newest = data["items"][0]
        assert newest["subscriber"]["username"] == "third_user"
        assert newest["subscriber"]["subscribersCount"] == 0
        assert data["items"][1]["subscriber"]["subscribersCount"] == 1
        assert "subscribedAt" in newest

    @pytest.mark.asyncio
    async def test_other_channels_subscribers_forbidden(
        self, client: AsyncClient, test_user, other_user
    ):
        response = await client.get(
            f"/api/v1/subscriptions/c/{other_user.id}/subscribers", headers=auth_headers(test_user)
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_subscribed_channels_with_video_counts(
        self, client: AsyncClient, test_user, other_user, make_video, subscribe
    ):
        await make_video(other_user, title="public")
        await make_video(other_user, title="draft", is_published=False)
        await subscribe(test_user, other_user)

        response = await client.get(
            f"/api/v1/subscriptions/u/{test_user.id}/channels", headers=auth_headers(test_user)
        )

        assert response.status_code == 200
        channel = response.json()["data"]["items"][0]["channel"]
        assert channel["id"] == other_user.id
        assert channel["subscribersCount"] == 1
        assert channel["videosCount"] == 1

    @pytest.mark.asyncio
    async def test_someone_elses_subscriptions_forbidden(
        self, client: AsyncClient, test_user, other_user
    ):
        response = await client.get(
            f"/api/v1/subscriptions/u/{other_user.id}/channels", headers=auth_headers(test_user)
        )

        assert response.status_code == 403
