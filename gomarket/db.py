"""
Redis Module - Upstash Redis client for cart storage.

Provides a singleton async Upstash Redis client and the key names used
by the cart.
"""

import os
from typing import Optional

from upstash_redis.asyncio import Redis as AsyncRedis

from gomarket.config import CART_STORAGE_KEY, CART_TTL_SECONDS


# Upstash uses REST_URL and REST_TOKEN
UPSTASH_REDIS_REST_URL = os.environ.get("UPSTASH_REDIS_REST_URL", "")
UPSTASH_REDIS_REST_TOKEN = os.environ.get("UPSTASH_REDIS_REST_TOKEN", "")


_redis_client: Optional[AsyncRedis] = None


def get_redis() -> AsyncRedis:
    """
    Get async Upstash Redis client (singleton).

    Uses the standard Upstash env var names:
    - UPSTASH_REDIS_REST_URL
    - UPSTASH_REDIS_REST_TOKEN
    """
    global _redis_client

    if _redis_client is None:
        if not UPSTASH_REDIS_REST_URL or not UPSTASH_REDIS_REST_TOKEN:
            raise ValueError("UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set")
        _redis_client = AsyncRedis(url=UPSTASH_REDIS_REST_URL, token=UPSTASH_REDIS_REST_TOKEN)

    return _redis_client


class RedisKeys:
    """Redis key names for cart data."""

    CART = CART_STORAGE_KEY


class TTL:
    """Time-to-live constants for Redis keys (seconds, None = no expiry)."""

    CART: Optional[int] = CART_TTL_SECONDS or None
