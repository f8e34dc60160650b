"""
경로 공유 / 위치 공유 client 테스트
"""

import json

import httpx
import pytest

from app.core.exceptions import ExternalServiceException
from app.models.domain import Coordinate
from app.services.location_share_service import LocationShareService


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestLocationShareService:
    """LocationShareService 테스트 클래스"""

    @pytest.fixture
    def requests(self):
        return []

    @pytest.fixture
    def service(self, requests):
        def handler(request):
            requests.append(request)
            if request.method == "POST" and request.url.path == "/api/paths":
                return httpx.Response(
                    200,
                    json={
                        "path_id": "path-1",
                        "share_url": "https://share.example/path-1",
                        "monitor_url": "https://share.example/path-1/monitor",
                    },
                )
            if request.method == "GET" and request.url.path.endswith("/locations"):
                return httpx.Response(
                    200,
                    json={
                        "locations": [
                            {"user_id": "alice", "lat": 37.5, "lon": 127.0, "timestamp": 1},
                            {"user_id": "bob", "lat": "bad", "lon": 127.0},
                            {"lat": 37.6, "lon": 127.1},
                        ]
                    },
                )
            return httpx.Response(204)

        return LocationShareService(client=_client(handler))

    @pytest.mark.asyncio
    async def test_create_path(self, service, requests):
        shared = await service.create_path("user123", "서울역 → 강남역")

        assert shared.path_id == "path-1"
        assert shared.share_url.endswith("/path-1")
        assert json.loads(requests[0].content) == {
            "creator_id": "user123",
            "path": "서울역 → 강남역",
        }

    @pytest.mark.asyncio
    async def test_first_upload_sent(self, service, requests):
        sent = await service.upload_location(
            "path-1", "user123", Coordinate(37.5, 127.0), 1000
        )

        assert sent is True
        assert requests[0].url.path == "/api/paths/path-1/locations"
        assert json.loads(requests[0].content) == {
            "user_id": "user123",
            "lat": 37.5,
            "lon": 127.0,
            "timestamp": 1000,
        }

    @pytest.mark.asyncio
    async def test_small_move_throttled(self, service, requests):
        await service.upload_location("path-1", "user123", Coordinate(37.5, 127.0))

        # 위도 0.00005도 ≈ 5.6m
        sent = await service.upload_location(
            "path-1", "user123", Coordinate(37.50005, 127.0)
        )

        assert sent is False
        assert len(requests) == 1

    @pytest.mark.asyncio
    async def test_large_move_sent(self, service, requests):
        await service.upload_location("path-1", "user123", Coordinate(37.5, 127.0))

        # 위도 0.0002도 ≈ 22m
        sent = await service.upload_location(
            "path-1", "user123", Coordinate(37.5002, 127.0)
        )

        assert sent is True
        assert len(requests) == 2

    @pytest.mark.asyncio
    async def test_forget_resets_throttle(self, service, requests):
        await service.upload_location("path-1", "user123", Coordinate(37.5, 127.0))
        service.forget("path-1", "user123")

        sent = await service.upload_location("path-1", "user123", Coordinate(37.5, 127.0))

        assert sent is True

    @pytest.mark.asyncio
    async def test_throttle_per_member(self, service, requests):
        """같은 경로라도 참여자마다 첫 업로드는 전송"""
        assert await service.upload_location(
            "path-1", "alice", Coordinate(37.5, 127.0)
        ) is True

        # 위도 0.00001도 ≈ 1.1m, 다른 참여자
        sent = await service.upload_location(
            "path-1", "bob", Coordinate(37.50001, 127.0)
        )

        assert sent is True
        assert len(requests) == 2
        assert json.loads(requests[1].content)["user_id"] == "bob"

    @pytest.mark.asyncio
    async def test_forget_keeps_other_members(self, service, requests):
        await service.upload_location("path-1", "alice", Coordinate(37.5, 127.0))
        await service.upload_location("path-1", "bob", Coordinate(37.5, 127.0))

        service.forget("path-1", "alice")

        assert service.should_send("path-1", "alice", Coordinate(37.5, 127.0)) is True
        assert service.should_send("path-1", "bob", Coordinate(37.5, 127.0)) is False

    @pytest.mark.asyncio
    async def test_member_locations_skip_invalid(self, service):
        locations = await service.get_member_locations("path-1")

        assert len(locations) == 1
        assert locations[0].user_id == "alice"
        assert locations[0].path_id == "path-1"
        assert locations[0].coordinate == Coordinate(37.5, 127.0)

    @pytest.mark.asyncio
    async def test_empty_response_body(self, service):
        assert await service.get_path_data("path-1") == {}

    @pytest.mark.asyncio
    async def test_failed_upload_not_recorded(self):
        service = LocationShareService(
            client=_client(lambda request: httpx.Response(503))
        )

        with pytest.raises(ExternalServiceException):
            await service.upload_location("path-1", "user123", Coordinate(37.5, 127.0))

        assert service.should_send("path-1", "user123", Coordinate(37.5, 127.0)) is True
