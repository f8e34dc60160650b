from dataclasses import asdict
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from app.models.domain import Itinerary, TrackerState, TransitLeg

# service 별 응답 구조 정의


class CoordinateResponse(BaseModel):
    latitude: float
    longitude: float


# 추적 상태 응답
class TrackerStateResponse(BaseModel):
    current_position: Optional[CoordinateResponse] = Field(None, description="현재 위치")
    navigation_started: bool = Field(..., description="출발 여부")
    current_mode: str = Field(..., description="walking / transit / done")
    pending_transfer_leg_index: Optional[int] = Field(
        None, description="환승 알림 대상 구간"
    )
    show_transfer_popup: bool = Field(default=False, description="환승 팝업 표시")
    current_walking_instruction: Optional[str] = Field(None, description="도보 안내")
    is_following_user: bool = Field(default=False, description="위치 추적 중 여부")
    boarded_leg_index: Optional[int] = Field(None, description="탑승 중인 구간")

    @classmethod
    def from_state(cls, state: TrackerState) -> "TrackerStateResponse":
        position = None
        if state.current_position is not None:
            position = CoordinateResponse(
                latitude=state.current_position.latitude,
                longitude=state.current_position.longitude,
            )
        return cls(
            current_position=position,
            navigation_started=state.navigation_started,
            current_mode=state.current_mode.value,
            pending_transfer_leg_index=state.pending_transfer_leg_index,
            show_transfer_popup=state.show_transfer_popup,
            current_walking_instruction=state.current_walking_instruction,
            is_following_user=state.is_following_user,
            boarded_leg_index=state.boarded_leg_index,
        )


# 경로 계산 응답
class ItineraryResponse(BaseModel):
    summary: Optional[str] = Field(None, description="경로 요약")
    departure_time: Optional[str] = Field(None, description="출발 시각 (ISO-8601)")
    arrival_time: Optional[str] = Field(None, description="도착 시각 (ISO-8601)")
    total_duration_seconds: int = Field(..., description="총 소요 시간 (초)")
    weather: Optional[Dict] = Field(None, description="도착지 날씨")
    legs: List[Dict] = Field(default_factory=list, description="구간 리스트")

    @classmethod
    def from_itinerary(cls, itinerary: Itinerary) -> "ItineraryResponse":
        legs = []
        for leg in itinerary.legs:
            data = asdict(leg)
            data["mode"] = "TRANSIT" if isinstance(leg, TransitLeg) else "WALKING"
            legs.append(data)
        return cls(
            summary=itinerary.summary,
            departure_time=itinerary.departure_time,
            arrival_time=itinerary.arrival_time,
            total_duration_seconds=itinerary.total_duration_seconds,
            weather=asdict(itinerary.weather) if itinerary.weather else None,
            legs=legs,
        )


# 에러 응답
class ErrorResponse(BaseModel):
    message: str = Field(..., description="에러 메시지")
    code: Optional[str] = Field(None, description="에러 코드")
