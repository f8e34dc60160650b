"""
REST API 경로 계산 / 경로 공유 엔드포인트
"""

from fastapi import APIRouter, HTTPException, Depends
import logging
from functools import lru_cache
from pydantic import BaseModel, Field

from app.models.requests import RouteCalculateRequest
from app.models.responses import ItineraryResponse
from app.services.itinerary_service import ItineraryService
from app.services.location_share_service import LocationShareService
from app.core.exceptions import (
    TimeToGoException,
    RouteNotFoundException,
    ExternalServiceException,
)


router = APIRouter()
logger = logging.getLogger(__name__)


# lru_cache 사용하여 싱글톤 패턴과 유사한 효과, 의존성 주입
@lru_cache()
def get_itinerary_service() -> ItineraryService:
    return ItineraryService()


@lru_cache()
def get_share_service() -> LocationShareService:
    return LocationShareService()


class SharePathRequest(BaseModel):
    creator_id: str = Field(..., description="경로 생성자 ID (기기 ID)")
    path: str = Field(..., description="공유할 경로 계산 결과 (JSON 문자열)")


def _to_http_exception(e: TimeToGoException) -> HTTPException:
    if isinstance(e, RouteNotFoundException):
        status_code = 404
    elif isinstance(e, ExternalServiceException):
        status_code = 502
    else:
        status_code = 400
    return HTTPException(
        status_code=status_code, detail={"message": e.message, "code": e.code}
    )


@router.post("/calculate", response_model=ItineraryResponse)
async def calculate_route(
    request: RouteCalculateRequest,
    service: ItineraryService = Depends(get_itinerary_service),
):
    """
    경로 계산 (REST API)

    - **origin**: 출발지
    - **destination**: 목적지
    - **arrival_time**: 도착 희망 시각 (unix timestamp)

    Example:
        POST /v1/navigation/calculate
        {
            "origin": "서울역",
            "destination": "강남역",
            "arrival_time": 1735689600
        }
    """
    try:
        itinerary = await service.calculate_route(
            request.origin, request.destination, request.arrival_time
        )
        return ItineraryResponse.from_itinerary(itinerary)

    except TimeToGoException as e:
        logger.error(f"경로 계산 실패: {e.message}")
        raise _to_http_exception(e)


@router.post("/share")
async def create_share_path(
    request: SharePathRequest,
    service: LocationShareService = Depends(get_share_service),
):
    """경로 공유 링크 생성 => 생성자는 monitor_url로 참여자 위치 확인"""
    try:
        shared = await service.create_path(request.creator_id, request.path)
    except TimeToGoException as e:
        logger.error(f"공유 링크 생성 실패: {e.message}")
        raise _to_http_exception(e)

    return {
        "path_id": shared.path_id,
        "share_url": shared.share_url,
        "monitor_url": shared.monitor_url,
    }


@router.get("/share/{path_id}")
async def get_share_path(
    path_id: str,
    service: LocationShareService = Depends(get_share_service),
):
    """공유 링크로 들어온 참여자가 경로 정보 조회"""
    try:
        return await service.get_path_data(path_id)
    except TimeToGoException as e:
        logger.error(f"공유 경로 조회 실패: path={path_id}, {e.message}")
        raise _to_http_exception(e)
