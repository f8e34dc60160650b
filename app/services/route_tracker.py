import logging
from typing import Callable, List, Optional

from app.algorithms.distance_calculator import distance_meters
from app.algorithms.walking_guidance import WalkingGuidanceExtractor
from app.core.config import settings
from app.core.exceptions import InvalidTransferAcknowledgement
from app.models.domain import (
    Coordinate,
    Itinerary,
    NavigationMode,
    TrackerState,
    TransitLeg,
    WalkingLeg,
)
from app.services.path_cache import WalkingPathCache

logger = logging.getLogger(__name__)

TransferAlertListener = Callable[[int, TransitLeg], None]


class RouteProgressTracker:
    """
    실시간 경로 추적 상태 머신

    위치 샘플 하나마다 (순서대로, 중간에 끊기지 않고):
    1. 현재 위치 갱신
    2. 출발 감지 => 출발지에서 10m 이상 벗어나면 navigation_started (되돌아가지 않음)
    3. 환승 지점 근접 감지 => 도보 모드이고 대기 중인 알림이 없을 때만
    4. 도보 안내 문구 갱신 => 출발 후 도보 모드일 때만

    도보 -> 대중교통 전환은 사용자의 탑승 확인(acknowledge_transfer)으로만 발생
    """

    def __init__(
        self,
        itinerary: Itinerary,
        state: Optional[TrackerState] = None,
        path_cache: Optional[WalkingPathCache] = None,
        extractor: Optional[WalkingGuidanceExtractor] = None,
        start_distance_meters: Optional[float] = None,
        transfer_distance_meters: Optional[float] = None,
    ):
        self.itinerary = itinerary
        self.state = state if state is not None else TrackerState()
        self.path_cache = path_cache if path_cache is not None else WalkingPathCache()
        self.extractor = extractor or WalkingGuidanceExtractor()
        self.start_distance_meters = (
            settings.NAVIGATION_START_DISTANCE_METERS
            if start_distance_meters is None
            else start_distance_meters
        )
        self.transfer_distance_meters = (
            settings.TRANSFER_PROXIMITY_METERS
            if transfer_distance_meters is None
            else transfer_distance_meters
        )
        self._transfer_listeners: List[TransferAlertListener] = []

    def on_transfer_alert(self, listener: TransferAlertListener):
        """환승 팝업 표시 신호 구독"""
        self._transfer_listeners.append(listener)

    def on_position(self, position: Coordinate) -> TrackerState:
        """
        새 위치 샘플 처리

        Args:
            position: 현재 위치

        Returns:
            처리 후 상태의 복사본
        """
        self.state.current_position = position

        self._check_navigation_started(position)
        self._check_transfer_proximity(position)

        if (
            self.state.navigation_started
            and self.state.current_mode == NavigationMode.WALKING
        ):
            self._update_walking_instruction(position)

        return self.snapshot()

    def on_position_error(self, error: Exception):
        """
        위치 스트림 오류 => 재시도 없이 그대로 전달
        상태는 마지막 정상 값 유지 (위치를 None으로 지우지 않음)
        """
        logger.warning(f"위치 스트림 오류: {error}")
        raise error

    def acknowledge_transfer(self, leg_index: int) -> TrackerState:
        """
        사용자 탑승 확인 => 대중교통 모드 전환, 환승 알림 해제

        Raises:
            InvalidTransferAcknowledgement: 대중교통 구간이 아니거나 이미 종료된 경우
        """
        if not 0 <= leg_index < len(self.itinerary.legs) or not isinstance(
            self.itinerary.legs[leg_index], TransitLeg
        ):
            raise InvalidTransferAcknowledgement(
                f"대중교통 구간이 아닙니다: leg_index={leg_index}"
            )
        if self.state.current_mode == NavigationMode.DONE:
            raise InvalidTransferAcknowledgement("이미 종료된 경로 안내입니다")

        self.state.current_mode = NavigationMode.TRANSIT
        self.state.pending_transfer_leg_index = None
        self.state.show_transfer_popup = False
        self.state.boarded_leg_index = leg_index

        logger.info(f"탑승 확인: leg={leg_index}")
        return self.snapshot()

    def mark_done(self) -> TrackerState:
        """경로 안내 종료 (화면 로직에서 호출, tracker가 직접 호출하지 않음)"""
        self.state.current_mode = NavigationMode.DONE
        self.state.show_transfer_popup = False
        return self.snapshot()

    def reset(self):
        self.state.reset()

    def snapshot(self) -> TrackerState:
        return self.state.copy()

    def _check_navigation_started(self, position: Coordinate):
        if self.state.navigation_started:
            return

        origin = self.itinerary.origin_coordinate
        if origin is None:
            return

        distance_from_origin = distance_meters(position, origin)
        if distance_from_origin >= self.start_distance_meters:
            self.state.navigation_started = True
            logger.info(f"출발 감지: 출발지로부터 {distance_from_origin:.1f}m")

    def _check_transfer_proximity(self, position: Coordinate):
        if self.state.current_mode != NavigationMode.WALKING:
            return
        if self.state.pending_transfer_leg_index is not None:
            return

        # leg index 순서대로 => 처음 조건을 만족하는 구간 선택 (거리순 아님)
        for i, leg in enumerate(self.itinerary.legs):
            if not isinstance(leg, TransitLeg) or leg.start is None:
                continue

            dist = distance_meters(position, leg.start)
            if dist < self.transfer_distance_meters:
                self.state.pending_transfer_leg_index = i
                self.state.show_transfer_popup = True
                logger.info(
                    f"환승 지점 도착: leg={i}, vehicle={leg.vehicle_type}, "
                    f"stop={leg.departure_stop}, dist={dist:.1f}m"
                )
                self._notify_transfer(i, leg)
                break

    def _notify_transfer(self, leg_index: int, leg: TransitLeg):
        for listener in self._transfer_listeners:
            listener(leg_index, leg)

    def _update_walking_instruction(self, position: Coordinate):
        for i, leg in enumerate(self.itinerary.legs):
            if not isinstance(leg, WalkingLeg):
                continue

            path = self.path_cache.get(i)
            if path is None:
                continue

            instruction = self.extractor.extract(path, position)
            if instruction:
                self.state.current_walking_instruction = instruction
                return
        # 안내를 만들지 못한 샘플 => 이전 문구 유지
