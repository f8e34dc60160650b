"""
Redis 캐시 세팅
"""

from app.db.redis_client import RedisCacheManager, init_redis

__all__ = [
    "RedisCacheManager",
    "init_redis",
]
