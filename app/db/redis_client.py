import redis
import json
from typing import Optional, Dict, Any
import logging

from app.core.config import settings

logger = logging.getLogger(__name__)


class RedisCacheManager:
    """외부 API 응답 캐시 (도보 상세 경로)"""

    def __init__(self):
        self.redis_client = redis.Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            db=0,
            decode_responses=True,
        )

    def get_cached(self, cache_key: str) -> Optional[Dict[str, Any]]:
        """
        캐시 조회 => 캐시 hit/miss 로그로 기록
        redis 장애 시 None => 호출 측에서 API 직접 호출
        """
        try:
            cached_data = self.redis_client.get(cache_key)
            if cached_data:
                logger.debug(f"캐시 HIT:{cache_key}")
                return json.loads(cached_data)
            logger.debug(f"캐시 MISS: {cache_key}")
            return None
        except redis.RedisError as e:
            logger.warning(f"Redis 캐시 조회 실패 (fallback: API 호출): {e}")
            return None
        except json.JSONDecodeError as e:
            logger.error(f"캐시 데이터 파싱 실패: {cache_key}, 오류: {e}")
            return None

    def cache(self, cache_key: str, data: Dict[str, Any], ttl: int) -> bool:
        try:
            serialized_data = json.dumps(data, ensure_ascii=False)
            self.redis_client.setex(cache_key, ttl, serialized_data)
            logger.debug(f"캐싱 성공: {cache_key}, TTL={ttl}")
            return True
        except redis.RedisError as e:
            logger.error(f"redis 캐싱 실패: {cache_key}, 오류: {e}")
            return False
        except (TypeError, ValueError) as e:
            logger.error(f"캐시 데이터 직렬화 실패: {e}")
            return False

    def invalidate(self, pattern: str = "walkpath:*") -> int:
        """
        캐시 무효화, default : 모든 도보 경로 캐시 삭제
        """
        try:
            keys = list(self.redis_client.scan_iter(match=pattern))
            if keys:
                deleted_count = self.redis_client.delete(*keys)
                logger.info(
                    f"캐시 무효화 완료: {deleted_count}개 삭제 -> 패턴: {pattern}"
                )
                return deleted_count
            logger.info(f"무효화할 캐시 없음 -> 패턴: {pattern}")
            return 0
        except redis.RedisError as e:
            logger.error(f"캐시 무효화 실패: {e}")
            return 0

    def ping(self) -> bool:
        try:
            return bool(self.redis_client.ping())
        except redis.RedisError as e:
            logger.error(f"Redis ping 실패: {e}")
            return False


_redis_manager: Optional[RedisCacheManager] = None


def init_redis() -> RedisCacheManager:
    """RedisCacheManager 반환 (싱글톤)"""
    global _redis_manager
    if _redis_manager is None:
        _redis_manager = RedisCacheManager()
    return _redis_manager
