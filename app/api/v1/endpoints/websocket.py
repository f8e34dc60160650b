"""
FAST API Websocket endpoint => 실시간 위치 추적
"""

import logging
import uuid
from typing import Dict, Optional
from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError

from app.core.exceptions import TimeToGoException
from app.db.redis_client import init_redis
from app.models.domain import Coordinate
from app.models.requests import (
    HeadingSample,
    PositionSample,
    TrackingStartRequest,
    TransferAcknowledgement,
)
from app.models.responses import TrackerStateResponse
from app.services.itinerary_service import build_itinerary
from app.services.location_share_service import LocationShareService
from app.services.navigation_session import NavigationSession, build_transfer_message
from app.services.walking_path_service import WalkingPathService

logger = logging.getLogger(__name__)

router = APIRouter()

# Lazy initialization 패턴: 서비스 인스턴스를 필요할 때 생성
_walking_path_service = None
_share_service = None


def get_walking_path_service():
    """WalkingPathService 인스턴스를 반환 (싱글톤)"""
    global _walking_path_service
    if _walking_path_service is None:
        _walking_path_service = WalkingPathService(cache_manager=init_redis())
    return _walking_path_service


def get_share_service():
    """LocationShareService 인스턴스를 반환 (싱글톤)"""
    global _share_service
    if _share_service is None:
        _share_service = LocationShareService()
    return _share_service


class ConnectionManager:
    """websocket 연결 + 사용자별 추적 세션 관리자"""

    MAX_CONNECTIONS = 1000

    def __init__(self):
        self.active_connections: Dict[str, WebSocket] = {}
        self.sessions: Dict[str, NavigationSession] = {}

    async def connect(self, websocket: WebSocket, user_id: str) -> bool:
        # 기존 연결 확인 및 정리
        if user_id in self.active_connections:
            logger.warning(f"중복 연결 감지: {user_id}, 기존 연결을 종료합니다.")
            old_ws = self.active_connections.pop(user_id)
            try:
                await old_ws.send_json(
                    {
                        "type": "disconnected",
                        "reason": "다른 기기에서 연결됨",
                        "code": "DUPLICATE_CONNECTION",
                    }
                )
                await old_ws.close()
            except Exception as e:
                logger.error(f"기존 연결 종료에 실패하였습니다: {e}")

            # 이전 기기의 추적 세션은 새 연결로 넘기지 않음
            await self.stop_session(user_id)

        # 연결 수 제한 체크
        if len(self.active_connections) >= self.MAX_CONNECTIONS:
            await websocket.close(
                code=status.WS_1008_POLICY_VIOLATION,
                reason="서버 연결 한계에 도달했습니다.",
            )
            logger.warning(
                f"연결 거부(한계 도달): user={user_id}, "
                f"current={len(self.active_connections)}"
            )
            return False

        await websocket.accept()
        self.active_connections[user_id] = websocket
        logger.info(
            f"클라이언트 연결: {user_id} "
            f"총 {len(self.active_connections)}/{self.MAX_CONNECTIONS} 개 연결"
        )
        return True

    def is_current(self, user_id: str, websocket: WebSocket) -> bool:
        return self.active_connections.get(user_id) is websocket

    async def disconnect(self, user_id: str, websocket: WebSocket):
        """
        연결이 끊기면 추적 세션도 해제
        중복 연결로 이미 교체된 소켓이면 새 연결의 상태는 건드리지 않음
        """
        current = self.active_connections.get(user_id)
        if current is not None and current is not websocket:
            logger.debug(f"교체된 연결 종료: {user_id}")
            return

        # 전송 실패로 이미 빠진 연결이어도 세션은 정리
        await self.stop_session(user_id)
        self.active_connections.pop(user_id, None)
        logger.info(
            f"클라이언트 연결 해제: {user_id}, 남은 연결: {len(self.active_connections)}개"
        )

    def get_session(self, user_id: str) -> Optional[NavigationSession]:
        return self.sessions.get(user_id)

    def set_session(self, user_id: str, session: NavigationSession):
        self.sessions[user_id] = session

    async def stop_session(self, user_id: str) -> bool:
        session = self.sessions.pop(user_id, None)
        if session is None:
            return False
        await session.stop()
        return True

    async def send_message(self, user_id: str, message: dict):
        """특정 사용자에게 메시지 전송"""
        websocket = self.active_connections.get(user_id)
        if websocket is None:
            return
        try:
            await websocket.send_json(message)
        except Exception as e:
            logger.error(f"메시지 전송 실패 (user={user_id}): {e}")
            self.active_connections.pop(user_id, None)

    async def send_error(self, user_id: str, error_message: str, code: str = None):
        """에러 메시지 전송"""
        await self.send_message(
            user_id,
            {
                "type": "error",
                "message": error_message,
                "code": code,
                "error_id": str(uuid.uuid4()),
            },
        )

    def get_connection_count(self) -> int:
        """활성 연결 수 반환"""
        return len(self.active_connections)


manager = ConnectionManager()


def _state_message(session: NavigationSession) -> dict:
    state = TrackerStateResponse.from_state(session.state).model_dump()
    return {
        "type": "tracker_state",
        **state,
        "status": session.status_message(),
    }


@router.websocket("/ws/{user_id}")
async def websocket_endpoint(websocket: WebSocket, user_id: str):
    """
    Websocket main endpoint

    /v1/ws/{user_id}

    위치/나침반 샘플은 수신 순서대로 하나씩 처리 (재정렬, 묶음 처리 없음)
    """
    if not await manager.connect(websocket, user_id):
        return

    try:
        await manager.send_message(
            user_id,
            {
                "type": "connected",
                "user_id": user_id,
                "message": "서버 연결 성공",
            },
        )

        while True:
            # 클라이언트로부터 메시지 수신
            data = await websocket.receive_json()
            message_type = data.get("type")

            logger.debug(f"메시지 수신: user={user_id}, type={message_type}")

            # 메시지 타입별 처리
            if message_type == "start_tracking":
                await handle_start_tracking(user_id, data)

            elif message_type == "location_update":
                await handle_location_update(user_id, data)

            elif message_type == "heading_update":
                await handle_heading_update(user_id, data)

            elif message_type == "location_error":
                await handle_location_error(user_id, data)

            elif message_type == "acknowledge_transfer":
                await handle_acknowledge_transfer(user_id, data)

            elif message_type == "finish_navigation":
                await handle_finish_navigation(user_id)

            elif message_type == "stop_tracking":
                await handle_stop_tracking(user_id)

            elif message_type == "member_locations":
                await handle_member_locations(user_id)

            elif message_type == "ping":
                await manager.send_message(user_id, {"type": "pong"})

            else:
                await manager.send_error(
                    user_id,
                    f"알 수 없는 메시지 타입: {message_type}",
                    "UNKNOWN_MESSAGE_TYPE",
                )

    except WebSocketDisconnect:
        logger.info(f"WebSocket 정상 종료: {user_id}")
        await manager.disconnect(user_id, websocket)
    except Exception as e:
        logger.error(f"WebSocket 오류 (user={user_id}): {e}", exc_info=True)
        if manager.is_current(user_id, websocket):
            await manager.send_error(
                user_id, "서버 오류가 발생했습니다", "INTERNAL_SERVER_ERROR"
            )
        await manager.disconnect(user_id, websocket)


async def handle_start_tracking(user_id: str, data: dict):
    """
    경로 계산 결과로 위치 추적 시작
    기존 세션이 있으면 종료 후 새 세션 (재계산 => 경로 전체 교체)
    """
    try:
        request_model = TrackingStartRequest(**data)
    except ValidationError as e:
        await manager.send_error(
            user_id, f"입력값이 올바르지 않습니다: {e.errors()}", "INVALID_PARAMETERS"
        )
        return

    try:
        origin: Optional[Coordinate] = None
        if request_model.origin is not None:
            origin = request_model.origin.to_coordinate()

        itinerary = build_itinerary(
            request_model.route, request_model.arrival_time, origin
        )

        await manager.stop_session(user_id)

        share_path_id = data.get("share_path_id")
        session = NavigationSession(
            itinerary,
            walking_path_service=get_walking_path_service(),
            share_service=get_share_service() if share_path_id else None,
            user_id=user_id,
            share_path_id=share_path_id,
        )
        manager.set_session(user_id, session)
        session.start()

        await manager.send_message(
            user_id,
            {
                "type": "tracking_started",
                "legs": len(itinerary.legs),
                "departure_time": itinerary.departure_time,
                "arrival_time": itinerary.arrival_time,
                "status": session.status_message(),
            },
        )
        logger.info(f"위치 추적 시작: user={user_id}, {len(itinerary.legs)}개 구간")

    except TimeToGoException as e:
        await manager.send_error(user_id, e.message, e.code)
        logger.error(f"추적 시작 실패 (user={user_id}): {e.message}")


async def handle_location_update(user_id: str, data: dict):
    """
    위치 업데이트 => 출발 감지, 환승 지점 감지, 도보 안내 갱신
    """
    session = manager.get_session(user_id)
    if session is None:
        await manager.send_error(
            user_id,
            "활성 세션이 없습니다. 먼저 위치 추적을 시작하세요.",
            "NO_ACTIVE_SESSION",
        )
        return

    try:
        sample = PositionSample(**data)
    except ValidationError:
        await manager.send_error(
            user_id, "위도/경도 정보가 올바르지 않습니다", "INVALID_LOCATION"
        )
        return

    logger.debug(
        f"위치 업데이트: user={user_id}, lat={sample.latitude:.6f}, "
        f"lon={sample.longitude:.6f}, accuracy={sample.accuracy}m"
    )

    try:
        previous_pending = session.state.pending_transfer_leg_index
        state = session.handle_position(sample)

        # 새 환승 알림
        if (
            state.pending_transfer_leg_index is not None
            and state.pending_transfer_leg_index != previous_pending
        ):
            leg = session.itinerary.legs[state.pending_transfer_leg_index]
            await manager.send_message(
                user_id,
                {
                    "type": "transfer_alert",
                    "leg_index": state.pending_transfer_leg_index,
                    "vehicle_type": leg.vehicle_type,
                    "line_name": leg.line_name,
                    "departure_stop": leg.departure_stop,
                    "message": build_transfer_message(leg),
                },
            )

        await manager.send_message(user_id, _state_message(session))

    except TimeToGoException as e:
        await manager.send_error(user_id, e.message, e.code)
        logger.error(f"위치 처리 실패 (user={user_id}): {e.message}")


async def handle_heading_update(user_id: str, data: dict):
    session = manager.get_session(user_id)
    if session is None:
        await manager.send_error(user_id, "활성 세션이 없습니다", "NO_ACTIVE_SESSION")
        return

    try:
        sample = HeadingSample(**data)
    except ValidationError:
        await manager.send_error(
            user_id, "나침반 정보가 올바르지 않습니다", "INVALID_HEADING"
        )
        return

    heading = session.handle_heading(sample)
    if heading is not None:
        await manager.send_message(
            user_id, {"type": "heading", "heading": round(heading, 2)}
        )


async def handle_location_error(user_id: str, data: dict):
    """
    위치 스트림 오류 => 재시도 없이 클라이언트에 전달, 상태는 유지
    추적 중단 여부는 클라이언트가 결정
    """
    session = manager.get_session(user_id)
    if session is None:
        await manager.send_error(user_id, "활성 세션이 없습니다", "NO_ACTIVE_SESSION")
        return

    try:
        session.handle_position_error(data.get("message") or "위치 정보를 가져올 수 없습니다")
    except TimeToGoException as e:
        await manager.send_error(user_id, e.message, e.code)


async def handle_acknowledge_transfer(user_id: str, data: dict):
    """탑승 확인 => 대중교통 모드 전환"""
    session = manager.get_session(user_id)
    if session is None:
        await manager.send_error(user_id, "활성 세션이 없습니다", "NO_ACTIVE_SESSION")
        return

    try:
        request_model = TransferAcknowledgement(**data)
    except ValidationError as e:
        await manager.send_error(
            user_id, f"입력값이 올바르지 않습니다: {e.errors()}", "INVALID_PARAMETERS"
        )
        return

    try:
        session.acknowledge_transfer(request_model.leg_index)
        await manager.send_message(user_id, _state_message(session))
    except TimeToGoException as e:
        await manager.send_error(user_id, e.message, e.code)
        logger.warning(f"탑승 확인 실패 (user={user_id}): {e.message}")


async def handle_finish_navigation(user_id: str):
    session = manager.get_session(user_id)
    if session is None:
        await manager.send_error(user_id, "활성 세션이 없습니다", "NO_ACTIVE_SESSION")
        return

    session.finish()
    await manager.send_message(user_id, _state_message(session))


async def handle_stop_tracking(user_id: str):
    """
    세션 해제 => 위치 구독 해제 + 상태 초기화
    """
    if await manager.stop_session(user_id):
        await manager.send_message(
            user_id,
            {"type": "tracking_stopped", "message": "위치 추적을 종료했습니다"},
        )
        logger.info(f"위치 추적 종료: user={user_id}")
    else:
        await manager.send_error(user_id, "활성 세션이 없습니다", "NO_ACTIVE_SESSION")


async def handle_member_locations(user_id: str):
    """공유 경로 참여자 위치 조회 (경로 생성자)"""
    session = manager.get_session(user_id)
    if session is None or not session.share_path_id:
        await manager.send_error(
            user_id, "공유 중인 경로가 없습니다", "NO_SHARED_PATH"
        )
        return

    try:
        locations = await get_share_service().get_member_locations(
            session.share_path_id
        )
    except TimeToGoException as e:
        await manager.send_error(user_id, e.message, e.code)
        return

    await manager.send_message(
        user_id,
        {
            "type": "member_locations",
            "path_id": session.share_path_id,
            "locations": [
                {
                    "user_id": loc.user_id,
                    "latitude": loc.latitude,
                    "longitude": loc.longitude,
                    "timestamp": loc.timestamp,
                }
                for loc in locations
                if loc.user_id != user_id
            ],
        },
    )
