#!/usr/bin/env python3
"""
Script to clear the cached property collection.
Run this after editing listings directly in the database.
"""
import asyncio
from redis.asyncio import Redis
from app.config import settings
from app.services.repository import ALL_PROPERTIES_CACHE_KEY

async def clear_cache():
    redis = Redis.from_url(settings.REDIS_URL, encoding="utf-8", decode_responses=True)

    deleted = await redis.delete(ALL_PROPERTIES_CACHE_KEY)
    if deleted:
        print(f"✓ Cleared {deleted} cache keys")
    else:
        print("✓ No cache keys found")

    await redis.close()
    print("✓ Cache cleared successfully!")

if __name__ == "__main__":
    asyncio.run(clear_cache())
