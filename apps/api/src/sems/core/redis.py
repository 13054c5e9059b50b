"""
Redis Configuration

Async Redis client used as the rate-limit backend. `redis_client` stays None
when Redis is down; rate limiting then falls back to memory.
"""

from redis.asyncio import Redis, from_url

from sems.core.config import settings

redis_client: Redis | None = None


async def init_redis() -> Redis:
    """Connect and ping. Called from the application lifespan."""
    global redis_client
    client = from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )
    await client.ping()
    redis_client = client
    return redis_client


async def close_redis() -> None:
    global redis_client
    if redis_client is not None:
        await redis_client.aclose()
        redis_client = None
