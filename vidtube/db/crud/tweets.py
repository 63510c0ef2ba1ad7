"""CRUD operations for tweets."""

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db.crud.common import get_or_404
from vidtube.models import Like, LikeTargetKind, Tweet
from vidtube.services.guard import authorize


async def create_tweet(db: AsyncSession, owner_id: str, content: str) -> Tweet:
    tweet = Tweet(content=content, owner_id=owner_id)
    db.add(tweet)
    await db.flush()
    await db.refresh(tweet)
    return tweet


async def get_owned_tweet(db: AsyncSession, tweet_id: str, caller_id: str) -> Tweet:
    tweet = await get_or_404(db, Tweet, tweet_id, "tweet")
    authorize(caller_id, tweet.owner_id, resource="tweet")
    return tweet


async def update_tweet(db: AsyncSession, tweet_id: str, caller_id: str, content: str) -> Tweet:
    tweet = await get_owned_tweet(db, tweet_id, caller_id)
    tweet.content = content
    await db.flush()
    await db.refresh(tweet)
    return tweet


async def delete_tweet(db: AsyncSession, tweet_id: str, caller_id: str) -> None:
    """Delete a tweet together with its likes."""
    await get_owned_tweet(db, tweet_id, caller_id)
    await db.execute(
        delete(Like).where(Like.target_kind == LikeTargetKind.TWEET, Like.target_id == tweet_id)
    )
    await db.execute(delete(Tweet).where(Tweet.id == tweet_id))
