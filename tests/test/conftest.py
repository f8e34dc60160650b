"""
Pytest 설정 및 공통 Fixture
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# 프로젝트 루트를 sys.path에 추가
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from app.models.domain import (  # noqa: E402
    Coordinate,
    Itinerary,
    PathPoint,
    TransitLeg,
    WalkingDetailPath,
    WalkingLeg,
)


@pytest.fixture
def mock_redis_client():
    """Mock Redis 클라이언트"""
    mock = MagicMock()
    mock.get.return_value = None
    mock.setex.return_value = True
    mock.delete.return_value = 1
    mock.ping.return_value = True
    return mock


@pytest.fixture
def three_leg_itinerary():
    """
    도보(0,0→0,0.001) + 버스(0,0.001→0,0.002) + 도보(0,0.002→0,0.003)
    경도 0.001도 ≈ 111m (적도)
    """
    return Itinerary(
        legs=(
            WalkingLeg(
                start=Coordinate(0.0, 0.0),
                end=Coordinate(0.0, 0.001),
                instruction_text="정류장까지 걷기",
                duration_text="2분",
                distance_text="111m",
            ),
            TransitLeg(
                start=Coordinate(0.0, 0.001),
                end=Coordinate(0.0, 0.002),
                vehicle_type="BUS",
                line_name="147",
                departure_stop="서울역버스환승센터",
                arrival_stop="숭례문",
                num_stops=1,
                duration_text="3분",
            ),
            WalkingLeg(
                start=Coordinate(0.0, 0.002),
                end=Coordinate(0.0, 0.003),
                instruction_text="목적지까지 걷기",
                duration_text="2분",
                distance_text="111m",
            ),
        ),
        departure_time="2025-01-01T03:00:00+00:00",
        arrival_time="2025-01-01T03:10:00+00:00",
        total_duration_seconds=600,
    )


@pytest.fixture
def straight_walking_path():
    """출발 마커 + 직선 두 turn point + 도착 마커"""
    return WalkingDetailPath(
        points=(
            PathPoint(Coordinate(0.0, 0.0), turn_type=200, description="출발"),
            PathPoint(Coordinate(0.0, 0.0), turn_type=11, description="직진"),
            PathPoint(Coordinate(0.0, 0.001), turn_type=12, description="좌회전"),
            PathPoint(Coordinate(0.0, 0.001), turn_type=201, description="도착"),
        )
    )


@pytest.fixture
def sample_route_response():
    """경로 계산 API (lambda) 응답 샘플"""
    return {
        "summary": "서울역 → 강남역",
        "duration_text": "35분",
        "duration_sec": 2100,
        "steps": [
            {
                "mode": "WALKING",
                "start_location": {"lat": 37.5546788, "lng": 126.9706188},
                "end_location": {"lat": 37.5550, "lng": 126.9720},
                "instruction": "서울역 버스환승센터까지 걷기",
                "duration_text": "3분",
                "distance_text": "150m",
                "weather_condition": {
                    "type": "Clear",
                    "icon": "01d",
                    "precipitation_chance": 0,
                    "temperature_celsius": 12.5,
                    "forecast_time": 1735689600,
                },
            },
            {
                "mode": "TRANSIT",
                "start_location": {"lat": 37.5550, "lng": 126.9720},
                "end_location": {"lat": 37.4979462, "lng": 127.0276368},
                "vehicle_type": "BUS",
                "line_name": "140",
                "departure_stop": "서울역버스환승센터",
                "departure_time": "오전 11:28",
                "arrival_stop": "강남역",
                "arrival_time": "오전 11:58",
                "num_stops": 12,
                "duration_text": "30분",
                "weather_condition": {
                    "type": "Rain",
                    "icon": "10d",
                    "precipitation_chance": 70,
                    "temperature_celsius": 11.0,
                    "forecast_time": 1735691400,
                },
            },
        ],
    }


@pytest.fixture
def sample_walking_geojson():
    """TMap 보행자 경로 응답 샘플 (좌표 순서 [lng, lat])"""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [126.9706, 37.5546]},
                "properties": {"turnType": 200, "description": "출발"},
            },
            {
                "type": "Feature",
                "geometry": {
                    "type": "LineString",
                    "coordinates": [[126.9706, 37.5546], [126.9710, 37.5548]],
                },
                "properties": {"description": "보행자도로"},
            },
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [126.9710, 37.5548]},
                "properties": {"turnType": 13, "description": "우회전"},
            },
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [126.9715, 37.5549]},
                "properties": {"turnType": 211, "description": "횡단보도"},
            },
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [126.9720, 37.5550]},
                "properties": {"turnType": 201, "description": "도착"},
            },
        ],
    }
