"""
경로 계산 서비스 테스트
"""

import json

import httpx
import pytest

from app.core.exceptions import ExternalServiceException, RouteNotFoundException
from app.models.domain import Coordinate, TransitLeg, WalkingLeg
from app.services.itinerary_service import (
    ItineraryService,
    build_itinerary,
    map_weather_condition,
    unwrap_route_response,
)

ARRIVAL = 1735695000  # 2025-01-01T01:30:00Z


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestMapWeatherCondition:
    @pytest.mark.parametrize(
        "weather_type, expected",
        [
            ("Clear", "sunny"),
            ("Clouds", "cloudy"),
            ("Rain", "rainy"),
            ("Drizzle", "rainy"),
            ("Snow", "snowy"),
            ("Mist", "unknown"),
            (None, "unknown"),
        ],
    )
    def test_mapping(self, weather_type, expected):
        assert map_weather_condition(weather_type) == expected


class TestUnwrapRouteResponse:
    """lambda 응답 형식 처리"""

    def test_direct_route_object(self, sample_route_response):
        route = unwrap_route_response(sample_route_response)

        assert len(route.steps) == 2
        assert route.duration_sec == 2100

    def test_body_dict(self, sample_route_response):
        route = unwrap_route_response({"statusCode": 200, "body": sample_route_response})

        assert route.summary == "서울역 → 강남역"

    def test_body_json_string(self, sample_route_response):
        raw = {"statusCode": 200, "body": json.dumps(sample_route_response)}

        route = unwrap_route_response(raw)

        assert route.steps[1].vehicle_type == "BUS"

    def test_invalid_body_string(self):
        with pytest.raises(RouteNotFoundException):
            unwrap_route_response({"body": "not json"})

    def test_unknown_format(self):
        with pytest.raises(RouteNotFoundException):
            unwrap_route_response({"message": "hello"})

    def test_empty_steps(self):
        with pytest.raises(RouteNotFoundException):
            unwrap_route_response({"steps": []})

    def test_lowercase_mode_accepted(self, sample_route_response):
        sample_route_response["steps"][0]["mode"] = "walking"

        route = unwrap_route_response(sample_route_response)

        assert route.steps[0].mode == "WALKING"

    def test_invalid_mode_rejected(self, sample_route_response):
        sample_route_response["steps"][0]["mode"] = "FLYING"

        with pytest.raises(RouteNotFoundException):
            unwrap_route_response(sample_route_response)


class TestBuildItinerary:
    def test_legs_and_times(self, sample_route_response):
        route = unwrap_route_response(sample_route_response)

        itinerary = build_itinerary(route, ARRIVAL)

        assert isinstance(itinerary.legs[0], WalkingLeg)
        assert isinstance(itinerary.legs[1], TransitLeg)
        assert itinerary.legs[0].start == Coordinate(37.5546788, 126.9706188)
        assert itinerary.legs[1].line_name == "140"
        assert itinerary.legs[1].num_stops == 12
        assert itinerary.arrival_time == "2025-01-01T01:30:00+00:00"
        # 출발 = 도착 - 2100초
        assert itinerary.departure_time == "2025-01-01T00:55:00+00:00"
        assert itinerary.total_duration_seconds == 2100

    def test_weather_from_last_step(self, sample_route_response):
        route = unwrap_route_response(sample_route_response)

        itinerary = build_itinerary(route, ARRIVAL)

        assert itinerary.weather.condition == "rainy"
        assert itinerary.weather.precipitation_chance == 70

    def test_origin_defaults_to_first_leg(self, sample_route_response):
        route = unwrap_route_response(sample_route_response)

        itinerary = build_itinerary(route, ARRIVAL)

        assert itinerary.origin is None
        assert itinerary.origin_coordinate == Coordinate(37.5546788, 126.9706188)

    def test_missing_coordinates_kept_as_none(self, sample_route_response):
        sample_route_response["steps"][1]["start_location"] = {"lat": 37.5}

        itinerary = build_itinerary(unwrap_route_response(sample_route_response), ARRIVAL)

        assert itinerary.legs[1].start is None


class TestItineraryService:
    @pytest.mark.asyncio
    async def test_calculate_route(self, sample_route_response):
        captured = {}

        def handler(request):
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"body": json.dumps(sample_route_response)})

        service = ItineraryService(client=_client(handler))

        itinerary = await service.calculate_route("서울역", "강남역", ARRIVAL)

        assert captured["body"] == {
            "origin": "서울역",
            "destination": "강남역",
            "arrival_time": str(ARRIVAL),
        }
        assert len(itinerary.legs) == 2

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        service = ItineraryService(
            client=_client(lambda request: httpx.Response(500, text="boom"))
        )

        with pytest.raises(ExternalServiceException):
            await service.calculate_route("서울역", "강남역", ARRIVAL)

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        service = ItineraryService(client=_client(handler))

        with pytest.raises(ExternalServiceException):
            await service.calculate_route("서울역", "강남역", ARRIVAL)

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        service = ItineraryService(
            client=_client(lambda request: httpx.Response(200, text="<html>"))
        )

        with pytest.raises(RouteNotFoundException):
            await service.calculate_route("서울역", "강남역", ARRIVAL)
