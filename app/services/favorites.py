import json
from typing import List, Optional

from redis.asyncio import Redis
from structlog import get_logger

from app.config import settings

logger = get_logger()


def favorites_key(user_id) -> str:
    return f"favorites:{user_id}"


class FavoritesStore:
    """Per-user favorite property ids, stored as one ordered JSON list.

    The list is always read and written whole; there are no partial updates.
    """

    def __init__(self, redis: Redis):
        self._redis = redis

    async def get(self, user_id) -> List[str]:
        raw = await self._redis.get(favorites_key(user_id))
        if not raw:
            return []
        try:
            favorites = json.loads(raw)
        except ValueError:
            logger.warning("Favorites entry is not valid JSON; starting fresh", user_id=user_id)
            return []
        return [str(item) for item in favorites] if isinstance(favorites, list) else []

    async def put(self, user_id, favorites: List[str]) -> None:
        await self._redis.set(favorites_key(user_id), json.dumps(favorites))

    async def toggle(self, user_id, property_id: str) -> List[str]:
        favorites = await self.get(user_id)
        if property_id in favorites:
            favorites.remove(property_id)
            logger.info("Favorite removed", user_id=user_id, property_id=property_id)
        else:
            favorites.append(property_id)
            logger.info("Favorite added", user_id=user_id, property_id=property_id)
        await self.put(user_id, favorites)
        return favorites

    async def remove(self, user_id, property_id: str) -> List[str]:
        favorites = [f for f in await self.get(user_id) if f != property_id]
        await self.put(user_id, favorites)
        return favorites

    async def clear(self, user_id) -> None:
        await self.put(user_id, [])
        logger.info("Favorites cleared", user_id=user_id)


_store: Optional[FavoritesStore] = None


def get_favorites_store() -> FavoritesStore:
    global _store
    if _store is None:
        _store = FavoritesStore(Redis.from_url(settings.REDIS_URL, encoding="utf-8", decode_responses=True))
    return _store
