# 경로 계산 서비스 (외부 경로/날씨 API 호출)

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from app.core.config import settings, WEATHER_CONDITIONS
from app.core.exceptions import RouteNotFoundException, ExternalServiceException
from app.models.domain import Coordinate, Itinerary, TransitLeg, WalkingLeg, Weather
from app.models.requests import RouteResponsePayload, RouteStepPayload

logger = logging.getLogger(__name__)


def map_weather_condition(weather_type: Optional[str]) -> str:
    """OpenWeather 날씨 타입 => 앱 내부 날씨 상태"""
    if not weather_type:
        return "unknown"
    return WEATHER_CONDITIONS.get(weather_type.lower(), "unknown")


def unwrap_route_response(raw: Any) -> RouteResponsePayload:
    """
    lambda 응답 형식 처리

    1. 응답 자체가 경로 객체인 경우 (steps 존재)
    2. body 프로퍼티를 가진 경우 => body가 문자열이면 파싱

    Raises:
        RouteNotFoundException: 알 수 없는 형식이거나 구간이 없을 때
    """
    data = raw
    if isinstance(raw, dict) and "steps" not in raw and "body" in raw:
        data = raw["body"]
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except json.JSONDecodeError as e:
                raise RouteNotFoundException("응답 데이터 파싱에 실패했습니다") from e

    if not isinstance(data, dict) or "steps" not in data:
        raise RouteNotFoundException("알 수 없는 응답 형식입니다")

    try:
        route = RouteResponsePayload.model_validate(data)
    except ValidationError as e:
        logger.error(f"경로 응답 검증 실패: {e}")
        raise RouteNotFoundException("응답 데이터 파싱에 실패했습니다") from e

    if not route.steps:
        raise RouteNotFoundException("유효한 경로 데이터가 없습니다")
    return route


def _to_leg(step: RouteStepPayload):
    start = step.start_location.to_coordinate() if step.start_location else None
    end = step.end_location.to_coordinate() if step.end_location else None

    if step.mode == "TRANSIT":
        return TransitLeg(
            start=start,
            end=end,
            vehicle_type=step.vehicle_type,
            line_name=step.line_name,
            departure_stop=step.departure_stop,
            departure_time=step.departure_time,
            arrival_stop=step.arrival_stop,
            arrival_time=step.arrival_time,
            num_stops=step.num_stops,
            duration_text=step.duration_text,
            encoded_polyline=step.polyline,
        )
    return WalkingLeg(
        start=start,
        end=end,
        instruction_text=step.instruction,
        duration_text=step.duration_text,
        distance_text=step.distance_text,
    )


def _to_iso(unix_seconds: int) -> str:
    return datetime.fromtimestamp(unix_seconds, tz=timezone.utc).isoformat()


def build_itinerary(
    route: RouteResponsePayload,
    arrival_time: int,
    origin: Optional[Coordinate] = None,
) -> Itinerary:
    """
    경로 응답 => Itinerary

    출발 시각 = 도착 시각 - 총 소요 시간
    날씨는 마지막 구간(도착지)의 날씨 사용
    """
    departure_time = arrival_time - route.duration_sec

    weather = None
    last_condition = route.steps[-1].weather_condition if route.steps else None
    if last_condition is not None:
        weather = Weather(
            condition=map_weather_condition(last_condition.type),
            temperature=last_condition.temperature_celsius,
            icon=last_condition.icon,
            precipitation_chance=last_condition.precipitation_chance,
        )

    return Itinerary(
        legs=tuple(_to_leg(step) for step in route.steps),
        departure_time=_to_iso(departure_time),
        arrival_time=_to_iso(arrival_time),
        total_duration_seconds=route.duration_sec,
        origin=origin,
        summary=route.summary,
        weather=weather,
    )


class ItineraryService:

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.client = client
        self.api_url = settings.ROUTE_API_URL
        self.timeout = settings.ROUTE_API_TIMEOUT_SECONDS

    async def calculate_route(
        self, origin: str, destination: str, arrival_time: int
    ) -> Itinerary:
        """
        경로 계산

        Args:
            origin: 출발지 이름
            destination: 목적지 이름
            arrival_time: 도착 희망 시각 (unix timestamp, 초)

        Returns:
            Itinerary

        Raises:
            RouteNotFoundException: 경로가 없거나 응답을 해석할 수 없을 때
            ExternalServiceException: API 호출 실패
        """
        params = {
            "origin": origin,
            "destination": destination,
            "arrival_time": str(arrival_time),
        }
        logger.info(f"경로 계산 요청: {origin} → {destination}, 도착={arrival_time}")

        try:
            if self.client is not None:
                response = await self.client.post(self.api_url, json=params)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.api_url, json=params)
        except httpx.HTTPError as e:
            logger.error(f"경로 API 호출 실패: {e}")
            raise ExternalServiceException(f"경로 API 호출 실패: {e}") from e

        if response.status_code >= 400:
            logger.error(f"API 응답 에러: {response.status_code} {response.text}")
            raise ExternalServiceException(
                f"경로 계산에 실패했습니다 ({response.status_code})"
            )

        try:
            raw = response.json()
        except ValueError as e:
            raise RouteNotFoundException("응답 데이터 파싱에 실패했습니다") from e

        route = unwrap_route_response(raw)
        itinerary = build_itinerary(route, arrival_time)
        logger.info(
            f"경로 계산 완료: {len(itinerary.legs)}개 구간, "
            f"{itinerary.total_duration_seconds}초"
        )
        return itinerary
