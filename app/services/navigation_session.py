# 네비게이션 세션 => 결과 화면 하나의 추적 수명주기 관리

import asyncio
import logging
from typing import Dict, List, Optional

from app.algorithms.heading_smoother import HeadingSmoother, select_raw_heading
from app.core.config import VEHICLE_TYPE_LABELS, DEFAULT_VEHICLE_LABEL
from app.core.exceptions import (
    ExternalServiceException,
    PositionStreamError,
    SessionNotFoundException,
)
from app.models.domain import (
    Itinerary,
    NavigationMode,
    TrackerState,
    TransitLeg,
    WalkingLeg,
)
from app.models.requests import HeadingSample, PositionSample
from app.services.location_share_service import LocationShareService
from app.services.path_cache import WalkingPathCache
from app.services.route_tracker import RouteProgressTracker, TransferAlertListener
from app.services.walking_path_service import WalkingPathService

logger = logging.getLogger(__name__)


def vehicle_label(vehicle_type: Optional[str]) -> str:
    if not vehicle_type:
        return DEFAULT_VEHICLE_LABEL
    return VEHICLE_TYPE_LABELS.get(vehicle_type.upper(), DEFAULT_VEHICLE_LABEL)


def build_transfer_message(leg: TransitLeg) -> str:
    """환승 팝업 문구"""
    if (leg.vehicle_type or "").upper() == "BUS":
        title = "버스 환승 지점에 도착했습니다!"
    else:
        title = "지하철 환승 지점에 도착했습니다!"
    if leg.departure_stop:
        return f"{title} {leg.departure_stop}에서 탑승하세요"
    return title


def build_status_message(itinerary: Itinerary, state: TrackerState) -> Dict[str, str]:
    """상단 안내 메시지"""
    if (
        state.current_mode == NavigationMode.TRANSIT
        and state.boarded_leg_index is not None
    ):
        leg = itinerary.legs[state.boarded_leg_index]
        return {
            "title": f"{vehicle_label(leg.vehicle_type)} 탑승 중입니다",
            "message": f"대중교통을 이용해 {leg.duration_text or '-'} 소요됩니다.",
        }
    if state.current_mode == NavigationMode.DONE:
        return {"title": "도착", "message": "목적지에 도착했습니다!"}

    weather = itinerary.weather.condition if itinerary.weather else None
    if weather in ("rainy", "cloudy"):
        return {"title": "출발", "message": "우산을 챙겨서 출발하세요!"}
    return {"title": "출발", "message": "출발하세요!"}


class NavigationSession:
    """
    추적 세션

    - TrackerState, 도보 경로 캐시, heading smoother를 세션 단위로 소유
    - 도보 구간 상세 경로는 fire-and-forget task로 조회 => 도착하는 대로 캐시에 저장
    - stop() => 구독/작업 해제 + 상태 전체 초기화 (일시정지가 아님)
    """

    def __init__(
        self,
        itinerary: Itinerary,
        walking_path_service: Optional[WalkingPathService] = None,
        share_service: Optional[LocationShareService] = None,
        user_id: Optional[str] = None,
        share_path_id: Optional[str] = None,
    ):
        self.itinerary = itinerary
        self.walking_path_service = walking_path_service
        self.share_service = share_service
        self.user_id = user_id
        self.share_path_id = share_path_id

        self.state = TrackerState()
        self.path_cache = WalkingPathCache()
        self.tracker = RouteProgressTracker(itinerary, self.state, self.path_cache)
        self.heading_smoother = HeadingSmoother()

        self.active = False
        self._fetch_tasks: List[asyncio.Task] = []
        self._background_tasks: set = set()

    def on_transfer_alert(self, listener: TransferAlertListener):
        self.tracker.on_transfer_alert(listener)

    def start(self):
        """
        위치 추적 시작 + 도보 구간 상세 경로 조회 시작
        실행 중인 이벤트 루프 안에서 호출해야 함
        """
        if self.active:
            return
        self.active = True
        self.state.is_following_user = True

        if self.walking_path_service is None:
            return

        for i, leg in enumerate(self.itinerary.legs):
            if not isinstance(leg, WalkingLeg):
                continue
            if leg.start is None or leg.end is None:
                logger.debug(f"좌표가 없는 도보 구간 건너뜀: leg={i}")
                continue
            task = asyncio.create_task(self._load_walking_path(i, leg))
            self._fetch_tasks.append(task)

        logger.info(f"도보 경로 {len(self._fetch_tasks)}개 조회 시작")

    async def _load_walking_path(self, leg_index: int, leg: WalkingLeg):
        try:
            path = await self.walking_path_service.fetch_walking_path(
                leg.start, leg.end
            )
        except ExternalServiceException as e:
            # 해당 구간은 안내 없이 진행
            logger.warning(f"도보 경로 {leg_index} 조회 실패: {e.message}")
            return
        except Exception as e:
            logger.error(f"도보 경로 {leg_index} 오류: {e}", exc_info=True)
            return

        if not path.points:
            logger.info(f"도보 경로 {leg_index} 실패: 데이터 없음")
            return
        if self.active:
            self.path_cache.put(leg_index, path)

    async def wait_for_walking_paths(self):
        """진행 중인 도보 경로 조회가 모두 끝날 때까지 대기"""
        if self._fetch_tasks:
            await asyncio.gather(*self._fetch_tasks, return_exceptions=True)

    def _ensure_active(self):
        if not self.active:
            raise SessionNotFoundException("위치 추적이 시작되지 않았습니다")

    def handle_position(self, sample: PositionSample) -> TrackerState:
        self._ensure_active()
        position = sample.to_coordinate()
        state = self.tracker.on_position(position)

        if self.share_service is not None and self.share_path_id and self.user_id:
            self._spawn(
                self.share_service.upload_location(
                    self.share_path_id, self.user_id, position, sample.timestamp_ms
                )
            )
        return state

    def handle_position_error(self, message: str):
        """
        위치 스트림 오류 전달 => 상태는 유지, 재시도 없음

        Raises:
            PositionStreamError
        """
        self._ensure_active()
        self.tracker.on_position_error(PositionStreamError(message))

    def handle_heading(self, sample: HeadingSample) -> Optional[float]:
        raw = select_raw_heading(sample.true_heading, sample.magnetic_heading)
        if raw is None:
            return None
        return self.heading_smoother.update(raw)

    def acknowledge_transfer(self, leg_index: int) -> TrackerState:
        self._ensure_active()
        return self.tracker.acknowledge_transfer(leg_index)

    def finish(self) -> TrackerState:
        self._ensure_active()
        return self.tracker.mark_done()

    def status_message(self) -> Dict[str, str]:
        return build_status_message(self.itinerary, self.state)

    def _spawn(self, coro):
        task = asyncio.create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._on_background_done)

    def _on_background_done(self, task: asyncio.Task):
        self._background_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning(f"위치 공유 실패: {error}")

    async def stop(self):
        """추적 종료 => 작업 취소, 상태 초기화"""
        tasks = self._fetch_tasks + list(self._background_tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        self._fetch_tasks = []
        self._background_tasks.clear()
        self.active = False
        self.path_cache.clear()
        self.heading_smoother.reset()
        self.tracker.reset()

        if self.share_service is not None and self.share_path_id:
            self.share_service.forget(self.share_path_id, self.user_id)
        logger.info(f"위치 추적 종료: user={self.user_id}")
