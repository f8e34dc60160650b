# 도보 상세 경로 서비스 (TMap 보행자 경로 API)

import logging
from typing import Any, Dict, Optional

import httpx

from app.core.config import settings
from app.core.exceptions import ExternalServiceException
from app.db.redis_client import RedisCacheManager
from app.models.domain import Coordinate, PathPoint, WalkingDetailPath

logger = logging.getLogger(__name__)


def parse_walking_path(geojson: Dict[str, Any]) -> WalkingDetailPath:
    """
    GeoJSON FeatureCollection => WalkingDetailPath

    Point feature만 사용 (LineString은 지도 표시용)
    GeoJSON 좌표 순서는 [lng, lat]
    """
    points = []
    for feature in geojson.get("features") or []:
        geometry = feature.get("geometry") or {}
        if geometry.get("type") != "Point":
            continue

        coordinates = geometry.get("coordinates") or []
        if len(coordinates) < 2:
            continue

        properties = feature.get("properties") or {}
        turn_type = properties.get("turnType")
        points.append(
            PathPoint(
                coordinate=Coordinate(
                    latitude=float(coordinates[1]), longitude=float(coordinates[0])
                ),
                turn_type=int(turn_type) if turn_type else None,
                description=properties.get("description") or None,
            )
        )
    return WalkingDetailPath(points=tuple(points))


class WalkingPathService:
    """구간 시작/끝 좌표 => 도보 상세 경로"""

    def __init__(
        self,
        cache_manager: Optional[RedisCacheManager] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.cache_manager = cache_manager
        self.client = client
        self.api_url = settings.WALKING_PATH_API_URL
        self.timeout = settings.WALKING_PATH_TIMEOUT_SECONDS

    @staticmethod
    def make_cache_key(start: Coordinate, end: Coordinate) -> str:
        return (
            f"walkpath:{start.latitude:.6f}:{start.longitude:.6f}:"
            f"{end.latitude:.6f}:{end.longitude:.6f}"
        )

    async def fetch_walking_path(
        self, start: Coordinate, end: Coordinate
    ) -> WalkingDetailPath:
        """
        도보 상세 경로 조회 (캐시 우선)

        Raises:
            ExternalServiceException: API 호출 실패 (재시도 없음)
        """
        cache_key = self.make_cache_key(start, end)

        if self.cache_manager is not None:
            cached = self.cache_manager.get_cached(cache_key)
            if cached:
                return parse_walking_path(cached)

        geojson = await self._request(start, end)
        path = parse_walking_path(geojson)

        if self.cache_manager is not None and path.points:
            self.cache_manager.cache(
                cache_key, geojson, settings.WALKING_PATH_CACHE_TTL_SECONDS
            )

        logger.info(
            f"도보 경로 조회 완료: {start.latitude},{start.longitude} → "
            f"{end.latitude},{end.longitude}, {len(path.points)}개 point"
        )
        return path

    async def _request(self, start: Coordinate, end: Coordinate) -> Dict[str, Any]:
        payload = {
            "startX": start.longitude,
            "startY": start.latitude,
            "endX": end.longitude,
            "endY": end.latitude,
            "startName": "출발",
            "endName": "도착",
            "reqCoordType": "WGS84GEO",
            "resCoordType": "WGS84GEO",
        }
        headers = {"appKey": settings.WALKING_PATH_APP_KEY}

        try:
            if self.client is not None:
                response = await self.client.post(
                    self.api_url, json=payload, headers=headers
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(
                        self.api_url, json=payload, headers=headers
                    )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise ExternalServiceException(
                f"도보 경로 API 응답 오류 ({e.response.status_code})"
            ) from e
        except httpx.HTTPError as e:
            raise ExternalServiceException(f"도보 경로 API 호출 실패: {e}") from e
        except ValueError as e:
            raise ExternalServiceException("도보 경로 응답 파싱 실패") from e
