from enum import Enum
from typing import Optional, Tuple, Union
from dataclasses import dataclass, replace

# domain 정의


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class WalkingLeg:
    start: Optional[Coordinate]
    end: Optional[Coordinate]
    instruction_text: Optional[str] = None
    duration_text: Optional[str] = None
    distance_text: Optional[str] = None


@dataclass(frozen=True)
class TransitLeg:
    start: Optional[Coordinate]
    end: Optional[Coordinate]
    vehicle_type: Optional[str] = None  # BUS / SUBWAY / ...
    line_name: Optional[str] = None
    departure_stop: Optional[str] = None
    departure_time: Optional[str] = None
    arrival_stop: Optional[str] = None
    arrival_time: Optional[str] = None
    num_stops: Optional[int] = None
    duration_text: Optional[str] = None
    encoded_polyline: Optional[str] = None


Leg = Union[WalkingLeg, TransitLeg]


@dataclass(frozen=True)
class Weather:
    condition: str  # sunny / cloudy / rainy / snowy / unknown
    temperature: Optional[float] = None
    icon: Optional[str] = None
    precipitation_chance: Optional[int] = None


@dataclass(frozen=True)
class Itinerary:
    """경로 계산 결과 => 세션 동안 읽기 전용"""

    legs: Tuple[Leg, ...]
    departure_time: Optional[str] = None
    arrival_time: Optional[str] = None
    total_duration_seconds: int = 0
    origin: Optional[Coordinate] = None  # 출발 감지 기준 좌표
    summary: Optional[str] = None
    weather: Optional[Weather] = None

    @property
    def origin_coordinate(self) -> Optional[Coordinate]:
        """출발지 좌표, 명시되지 않았으면 첫 구간의 시작 좌표"""
        if self.origin is not None:
            return self.origin
        if self.legs:
            return self.legs[0].start
        return None


@dataclass(frozen=True)
class PathPoint:
    coordinate: Coordinate
    turn_type: Optional[int] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class WalkingDetailPath:
    points: Tuple[PathPoint, ...] = ()


class NavigationMode(str, Enum):
    WALKING = "walking"
    TRANSIT = "transit"
    DONE = "done"


@dataclass
class TrackerState:
    """추적 상태 => 네비게이션 세션 하나가 단독으로 소유"""

    current_position: Optional[Coordinate] = None
    navigation_started: bool = False
    current_mode: NavigationMode = NavigationMode.WALKING
    pending_transfer_leg_index: Optional[int] = None
    show_transfer_popup: bool = False
    current_walking_instruction: Optional[str] = None
    is_following_user: bool = False
    boarded_leg_index: Optional[int] = None  # 탑승 확인한 대중교통 구간

    def reset(self):
        """세션 종료 => 초기값으로 전체 초기화"""
        self.current_position = None
        self.navigation_started = False
        self.current_mode = NavigationMode.WALKING
        self.pending_transfer_leg_index = None
        self.show_transfer_popup = False
        self.current_walking_instruction = None
        self.is_following_user = False
        self.boarded_leg_index = None

    def copy(self) -> "TrackerState":
        return replace(self)


@dataclass
class MemberLocation:
    path_id: str
    user_id: str
    latitude: float
    longitude: float
    timestamp: int  # ms

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)


@dataclass
class SharedPath:
    path_id: str
    share_url: str
    monitor_url: str
