"""
Redis client configuration for session token storage.
"""

import os
import redis
import logging
from typing import Optional

logger = logging.getLogger(__name__)

# Suppress verbose Redis logs
logging.getLogger('redis').setLevel(logging.WARNING)

# An empty REDIS_URL disables Redis and keeps sessions in memory
REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')

redis_client: Optional[redis.Redis] = None

if REDIS_URL:
    try:
        redis_client = redis.from_url(
            REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5
        )
        redis_client.ping()
        logger.debug("✓ Redis connection established")
    except (redis.ConnectionError, redis.TimeoutError) as e:
        logger.debug(f"Redis connection failed: {e}. Using in-memory session storage.")
        redis_client = None


def get_redis_client() -> Optional[redis.Redis]:
    """Get Redis client instance."""
    return redis_client


def is_redis_available() -> bool:
    """Check if Redis is available."""
    return redis_client is not None
