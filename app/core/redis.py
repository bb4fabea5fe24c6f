import json
import redis
from redis.exceptions import RedisError

from app.core.config import settings
from app.core.logging_config import get_logger

logger = get_logger()

_redis_client = None


def get_redis_client():
    global _redis_client

    if _redis_client is not None:
        return _redis_client

    if not settings.REDIS_URL:
        return None

    try:
        client = redis.Redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        client.ping()
        logger.info("Redis connected")
        _redis_client = client
        return _redis_client
    except RedisError as e:
        logger.warning(f"Redis unavailable: {e}")
        return None


def get_cache(key: str):
    client = get_redis_client()
    if not client:
        return None
    try:
        data = client.get(key)
        return json.loads(data) if data else None
    except RedisError:
        return None


def set_cache(key: str, value, ttl: int | None = None):
    client = get_redis_client()
    if not client:
        return
    try:
        client.setex(key, ttl or settings.ROOM_CACHE_TTL, json.dumps(value))
    except RedisError as e:
        logger.warning(f"Cache write failed for {key}: {e}")


def delete_cache(key: str):
    client = get_redis_client()
    if not client:
        return
    try:
        client.delete(key)
    except RedisError as e:
        logger.warning(f"Cache delete failed for {key}: {e}")


def room_cache_key(room_id: int) -> str:
    return f"room:{room_id}"
