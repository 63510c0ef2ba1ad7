"""Tweet endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.auth import get_current_user
from vidtube.constants import MAX_TWEETS_PAGE_SIZE
from vidtube.db import get_db
from vidtube.db.crud import create_tweet, delete_tweet, get_or_404, update_tweet
from vidtube.db.queries import list_user_tweets
from vidtube.models.schemas import ApiResponse, Page, TweetCreate, TweetListItem, TweetRead, ok
from vidtube.models.user import User
from vidtube.utils.pagination import parse_page_params

router = APIRouter()


@router.post("", response_model=ApiResponse[TweetRead], status_code=201)
async def post_tweet(
    data: TweetCreate,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    tweet = await create_tweet(db, user.id, data.content)
    return ok(TweetRead.model_validate(tweet), "Tweet created successfully", 201)


@router.get("/user/{user_id}", response_model=ApiResponse[Page[TweetListItem]])
async def get_user_tweets(
    user_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    page: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
) -> ApiResponse:
    await get_or_404(db, User, user_id, "user")
    params = parse_page_params(page, limit, max_limit=MAX_TWEETS_PAGE_SIZE)
    items, total = await list_user_tweets(db, user_id, params)
    return ok(Page.build(items, total, params), "Tweets fetched successfully")


@router.patch("/{tweet_id}", response_model=ApiResponse[TweetRead])
async def edit_tweet(
    tweet_id: str,
    data: TweetCreate,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    tweet = await update_tweet(db, tweet_id, user.id, data.content)
    return ok(TweetRead.model_validate(tweet), "Tweet updated successfully")


@router.delete("/{tweet_id}", response_model=ApiResponse[dict])
async def remove_tweet(
    tweet_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    await delete_tweet(db, tweet_id, user.id)
    return ok({}, "Tweet deleted successfully")
