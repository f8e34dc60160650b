from typing import List, Literal, Optional
from pydantic import BaseModel, Field, field_validator

from app.models.domain import Coordinate

# service별 requests 구조 정의


# 좌표 {lat, lng} => 경로 API 응답 형식, 누락 가능
class LatLngPayload(BaseModel):
    lat: Optional[float] = Field(default=None, description="위도")
    lng: Optional[float] = Field(default=None, description="경도")

    def to_coordinate(self) -> Optional[Coordinate]:
        # 좌표가 하나라도 없으면 잘못된 구간 => 탐색에서 건너뜀
        if self.lat is None or self.lng is None:
            return None
        return Coordinate(latitude=self.lat, longitude=self.lng)


class WeatherConditionPayload(BaseModel):
    type: str = Field(..., description="Clouds, Clear, Rain 등")
    icon: Optional[str] = Field(default=None, description="아이콘 코드 (03d 등)")
    precipitation_chance: Optional[int] = Field(default=None, description="강수 확률")
    temperature_celsius: Optional[float] = Field(default=None, description="온도")
    forecast_time: Optional[int] = Field(default=None, description="예보 시간")


# 경로 API 응답의 구간(step)
class RouteStepPayload(BaseModel):
    mode: Literal["WALKING", "TRANSIT"] = Field(..., description="구간 유형")
    start_location: Optional[LatLngPayload] = None
    end_location: Optional[LatLngPayload] = None
    weather_condition: Optional[WeatherConditionPayload] = None
    # WALKING 구간
    instruction: Optional[str] = None
    duration_text: Optional[str] = None
    distance_text: Optional[str] = None
    # TRANSIT 구간
    vehicle_type: Optional[str] = None
    line_name: Optional[str] = None
    departure_stop: Optional[str] = None
    departure_time: Optional[str] = None
    arrival_stop: Optional[str] = None
    arrival_time: Optional[str] = None
    num_stops: Optional[int] = None
    polyline: Optional[str] = None

    @field_validator("mode", mode="before")
    @classmethod
    def upper_mode(cls, value):
        return value.upper() if isinstance(value, str) else value


class RouteResponsePayload(BaseModel):
    summary: Optional[str] = None
    duration_text: Optional[str] = None
    duration_sec: int = Field(default=0, ge=0, description="총 소요 시간 (초)")
    steps: List[RouteStepPayload] = Field(default_factory=list)


# 경로 계산 요청
class RouteCalculateRequest(BaseModel):
    origin: str = Field(..., description="출발지 이름")
    destination: str = Field(..., description="목적지 이름")
    arrival_time: int = Field(..., description="도착 희망 시각 (unix timestamp, 초)")


# 위치 추적 시작 => 경로 계산 응답을 그대로 전달
class TrackingStartRequest(BaseModel):
    route: RouteResponsePayload
    arrival_time: int = Field(..., description="도착 시각 (unix timestamp, 초)")
    origin: Optional[LatLngPayload] = Field(
        default=None, description="출발지 좌표 (없으면 첫 구간 시작점)"
    )


# 위치 정보 업데이트
class PositionSample(BaseModel):
    latitude: float = Field(..., ge=-90, le=90, description="위도")
    longitude: float = Field(..., ge=-180, le=180, description="경도")
    accuracy: Optional[float] = Field(default=None, description="GPS 정확도 (미터)")
    timestamp_ms: Optional[int] = Field(default=None, description="타임스탬프 (ms)")

    def to_coordinate(self) -> Coordinate:
        return Coordinate(latitude=self.latitude, longitude=self.longitude)


# 나침반 업데이트
class HeadingSample(BaseModel):
    true_heading: Optional[float] = Field(default=None, description="진북 기준")
    magnetic_heading: Optional[float] = Field(default=None, description="자북 기준")


# 탑승 확인
class TransferAcknowledgement(BaseModel):
    leg_index: int = Field(..., ge=0, description="탑승한 대중교통 구간 index")
