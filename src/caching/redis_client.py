import json
import logging
from redis import asyncio as aioredis
from src.core.config import settings

logger = logging.getLogger(__name__)

class RedisClient:
    """Order read cache and request rate limiter.

    Every operation fails open: a Redis outage degrades to uncached,
    unlimited requests instead of failing them.
    """

    def __init__(self, url: str = settings.REDIS_URL):
        self.url = url
        self.redis = None

    async def connect(self):
        if not self.redis:
            self.redis = aioredis.from_url(self.url, encoding="utf-8", decode_responses=True)
            logger.info("Connected to Redis.")

    async def close(self):
        if self.redis:
            await self.redis.aclose()
            self.redis = None

    async def get_cached_order(self, order_id: str):
        if not self.redis:
            await self.connect()
        try:
            data = await self.redis.get(f"order:{order_id}")
            return json.loads(data) if data else None
        except Exception as e:
            logger.error(f"Redis get error: {e}")
            return None

    async def set_cached_order(self, order_id: str, data: dict, ttl: int = settings.ORDER_CACHE_TTL):
        if not self.redis:
            await self.connect()
        try:
            await self.redis.set(f"order:{order_id}", json.dumps(data, default=str), ex=ttl)
        except Exception as e:
            logger.error(f"Redis set error: {e}")

    async def invalidate_order(self, order_id: str):
        if not self.redis:
            await self.connect()
        try:
            await self.redis.delete(f"order:{order_id}")
        except Exception as e:
            logger.error(f"Redis delete error: {e}")

    async def check_rate_limit(self, client_key: str, limit: int, window: int) -> bool:
        """
        Returns True if request is allowed, False if rate limited.
        """
        if not settings.API_RATE_LIMIT_ENABLED:
            return True

        if not self.redis:
            await self.connect()

        key = f"rate_limit:{client_key}"
        try:
            # Simple fixed window counter
            current = await self.redis.incr(key)
            if current == 1:
                await self.redis.expire(key, window)

            return current <= limit
        except Exception as e:
            logger.error(f"Redis rate limit error: {e}")
            return True

redis_client = RedisClient()

async def get_redis():
    if not redis_client.redis:
        await redis_client.connect()
    return redis_client
