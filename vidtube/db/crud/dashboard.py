"""Channel dashboard aggregates."""

from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db.queries import get_channel_stats
from vidtube.models.schemas import ChannelStats
from vidtube.utils.cache import CHANNEL_STATS_TTL, cache, channel_stats_key
from vidtube.utils.logging import get_logger

logger = get_logger(__name__)


async def get_cached_channel_stats(db: AsyncSession, owner_id: str) -> ChannelStats:
    """Channel totals, served from Redis for a short TTL when it is available."""
    key = channel_stats_key(owner_id)
    cached_value = await cache.get(key)
    if cached_value is not None:
        logger.debug(f"Cache HIT: {key}")
        return ChannelStats(**cached_value)

    logger.debug(f"Cache MISS: {key}")
    stats = await get_channel_stats(db, owner_id)
    await cache.set(key, stats, CHANNEL_STATS_TTL)
    return ChannelStats(**stats)
