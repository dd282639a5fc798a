"""Redis-backed cache of each user's last shared location."""

from typing import Optional

import redis.asyncio as redis
from pydantic import ValidationError

from mealdeal.logging import get_logger
from mealdeal.models.geo import Coordinate

logger = get_logger(__name__)

DEFAULT_TTL_SECONDS = 3600


class LocationCache:
    """Stores one coordinate per user with an explicit expiry."""

    def __init__(self, redis_url: str, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        """Initialize location cache."""
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self._client: redis.Redis | None = None

    async def connect(self) -> None:
        """Establish Redis connection."""
        self._client = await redis.from_url(self.redis_url, encoding="utf-8", decode_responses=True)

    async def disconnect(self) -> None:
        """Close Redis connection."""
        if self._client:
            await self._client.close()
            self._client = None

    @staticmethod
    def key_for(user_id: int) -> str:
        return f"mealdeal:location:{user_id}"

    async def ping(self) -> None:
        """Raises when Redis is unreachable."""
        await self._require_client().ping()

    async def set(self, user_id: int, coordinate: Coordinate) -> None:
        """Remember a user's coordinate for ttl_seconds."""
        await self._require_client().set(
            self.key_for(user_id), coordinate.model_dump_json(), ex=self.ttl_seconds
        )
        logger.info("location_cached", user_id=user_id, ttl_seconds=self.ttl_seconds)

    async def get(self, user_id: int) -> Optional[Coordinate]:
        """Cached coordinate, or None when missing, expired or unreadable."""
        raw = await self._require_client().get(self.key_for(user_id))
        if raw is None:
            return None

        try:
            return Coordinate.model_validate_json(raw)
        except ValidationError:
            logger.warning("location_cache_corrupt_entry", user_id=user_id)
            return None

    async def clear(self, user_id: int) -> None:
        """Forget a user's coordinate."""
        await self._require_client().delete(self.key_for(user_id))
        logger.info("location_cleared", user_id=user_id)

    def _require_client(self) -> redis.Redis:
        if not self._client:
            raise RuntimeError("Redis client not connected")
        return self._client
