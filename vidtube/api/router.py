"""Main API router."""

from fastapi import APIRouter

from vidtube.api.comments import router as comments_router
from vidtube.api.dashboard import router as dashboard_router
from vidtube.api.healthcheck import router as healthcheck_router
from vidtube.api.likes import router as likes_router
from vidtube.api.playlists import router as playlists_router
from vidtube.api.subscriptions import router as subscriptions_router
from vidtube.api.tweets import router as tweets_router
from vidtube.api.users import router as users_router
from vidtube.api.videos import router as videos_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(healthcheck_router, prefix="/healthcheck", tags=["healthcheck"])
api_router.include_router(users_router, prefix="/users", tags=["users"])
api_router.include_router(videos_router, prefix="/videos", tags=["videos"])
api_router.include_router(comments_router, prefix="/comments", tags=["comments"])
api_router.include_router(likes_router, prefix="/likes", tags=["likes"])
api_router.include_router(tweets_router, prefix="/tweets", tags=["tweets"])
api_router.include_router(subscriptions_router, prefix="/subscriptions", tags=["subscriptions"])
api_router.include_router(playlists_router, prefix="/playlists", tags=["playlists"])
api_router.include_router(dashboard_router, prefix="/dashboard", tags=["dashboard"])
