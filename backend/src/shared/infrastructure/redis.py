from redis.asyncio import ConnectionPool, Redis

from shared.config import settings

_pool: ConnectionPool | None = None


def get_redis_pool() -> Redis:
    global _pool
    if _pool is None:
        _pool = ConnectionPool.from_url(settings.REDIS_URL)
    return Redis(connection_pool=_pool)
