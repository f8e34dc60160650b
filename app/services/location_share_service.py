# 경로 공유 / 그룹 위치 공유 API client

import logging
import time
from typing import Any, Dict, List, Optional, Tuple

import httpx

from app.algorithms.distance_calculator import distance_meters
from app.core.config import settings
from app.core.exceptions import ExternalServiceException
from app.models.domain import Coordinate, MemberLocation, SharedPath

logger = logging.getLogger(__name__)


class LocationShareService:
    """
    경로 공유 링크 생성, 참여자 위치 업로드, 멤버 위치 조회

    업로드는 참여자별로 마지막으로 보낸 위치에서 10m 넘게 이동했을 때만 전송
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.client = client
        self.base_url = settings.SHARE_API_URL.rstrip("/")
        self.timeout = settings.SHARE_API_TIMEOUT_SECONDS
        self.min_move_meters = settings.SHARE_MIN_MOVE_METERS
        # {(path_id, user_id): 마지막 전송 위치}
        self._last_sent: Dict[Tuple[str, str], Coordinate] = {}

    async def create_path(self, creator_id: str, path: str) -> SharedPath:
        """경로 생성 (공유 링크 생성)"""
        data = await self._request(
            "POST", "/api/paths", json={"creator_id": creator_id, "path": path}
        )
        return SharedPath(
            path_id=data["path_id"],
            share_url=data["share_url"],
            monitor_url=data["monitor_url"],
        )

    def should_send(self, path_id: str, user_id: str, position: Coordinate) -> bool:
        last = self._last_sent.get((path_id, user_id))
        if last is None:
            return True
        return distance_meters(last, position) > self.min_move_meters

    async def upload_location(
        self,
        path_id: str,
        user_id: str,
        position: Coordinate,
        timestamp_ms: Optional[int] = None,
    ) -> bool:
        """
        위치 업데이트 (링크를 받은 사람이 사용)

        Returns:
            전송 여부 (이동 거리가 짧으면 False)
        """
        if not self.should_send(path_id, user_id, position):
            return False

        await self._request(
            "POST",
            f"/api/paths/{path_id}/locations",
            json={
                "user_id": user_id,
                "lat": position.latitude,
                "lon": position.longitude,
                "timestamp": timestamp_ms or int(time.time() * 1000),
            },
        )
        self._last_sent[(path_id, user_id)] = position
        logger.debug(f"위치 업데이트 전송: path={path_id}, user={user_id}")
        return True

    async def get_member_locations(self, path_id: str) -> List[MemberLocation]:
        """그룹 멤버 위치 조회 (링크를 만든 사람이 사용)"""
        data = await self._request("GET", f"/api/paths/{path_id}/locations")
        locations = []
        for item in data.get("locations") or []:
            try:
                locations.append(
                    MemberLocation(
                        path_id=item.get("path_id", path_id),
                        user_id=item["user_id"],
                        latitude=float(item["lat"]),
                        longitude=float(item["lon"]),
                        timestamp=int(item.get("timestamp", 0)),
                    )
                )
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"잘못된 멤버 위치 데이터 건너뜀: {item}, {e}")
        return locations

    async def get_path_data(self, path_id: str) -> Dict[str, Any]:
        """경로 정보 조회 (path_id로 경로 데이터 가져오기)"""
        return await self._request("GET", f"/api/paths/{path_id}")

    def forget(self, path_id: str, user_id: str):
        self._last_sent.pop((path_id, user_id), None)

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            if self.client is not None:
                response = await self.client.request(method, url, **kwargs)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"공유 API 응답 오류: {method} {path} {e.response.status_code}")
            raise ExternalServiceException(
                f"공유 API 응답 오류 ({e.response.status_code})"
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"공유 API 호출 실패: {method} {path} {e}")
            raise ExternalServiceException(f"공유 API 호출 실패: {e}") from e

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise ExternalServiceException("공유 API 응답 파싱 실패") from e
