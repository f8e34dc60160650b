import math
import logging
from typing import List, Optional

from app.algorithms.distance_calculator import distance_meters
from app.core.config import (
    settings,
    EXCLUDED_TURN_TYPES,
    TURN_TYPE_LABELS,
    DEFAULT_TURN_LABEL,
    GUIDANCE_FORMAT,
)
from app.models.domain import Coordinate, PathPoint, WalkingDetailPath

logger = logging.getLogger(__name__)


def extract_turn_points(path: WalkingDetailPath) -> List[PathPoint]:
    """turnType이 있는 point만 추출 (출발/도착 마커 제외)"""
    return [
        point
        for point in path.points
        if point.turn_type is not None
        and point.turn_type not in EXCLUDED_TURN_TYPES
    ]


def _projection_parameter(
    position: Coordinate, a: Coordinate, b: Coordinate
) -> Optional[float]:
    """
    선분 AB 위로의 투영 파라미터 t 계산
    경도/위도를 평면 좌표(x=lng, y=lat)로 취급, 길이 0인 선분은 None
    """
    dx = b.longitude - a.longitude
    dy = b.latitude - a.latitude
    len2 = dx * dx + dy * dy
    if len2 == 0:
        return None
    return (
        (position.longitude - a.longitude) * dx
        + (position.latitude - a.latitude) * dy
    ) / len2


def find_next_turn(
    path: WalkingDetailPath, current_position: Coordinate
) -> Optional[PathPoint]:
    """
    현재 위치 기준 다음 turn point 찾기

    Args:
        path: 도보 상세 경로
        current_position: 현재 위치

    Returns:
        다음 turn point, turn point가 없으면 None
    """
    turn_points = extract_turn_points(path)
    if not turn_points:
        return None

    # 앞쪽 선분 우선 => 처음으로 0 <= t <= 1인 선분의 끝점
    for i in range(len(turn_points) - 1):
        t = _projection_parameter(
            current_position,
            turn_points[i].coordinate,
            turn_points[i + 1].coordinate,
        )
        if t is not None and 0 <= t <= 1:
            return turn_points[i + 1]

    # 선분 위에 없으면 가장 가까운 turn point 안내
    min_dist = float("inf")
    nearest = turn_points[0]
    for point in turn_points:
        dist = distance_meters(current_position, point.coordinate)
        if dist < min_dist:
            min_dist = dist
            nearest = point
    return nearest


def direction_label(turn_type: Optional[int], language: Optional[str] = None) -> str:
    language = language or settings.GUIDANCE_LANGUAGE
    labels = TURN_TYPE_LABELS.get(language, TURN_TYPE_LABELS["en"])
    default = DEFAULT_TURN_LABEL.get(language, DEFAULT_TURN_LABEL["en"])
    return labels.get(turn_type, default)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def extract_instruction(
    path: WalkingDetailPath,
    current_position: Coordinate,
    language: Optional[str] = None,
) -> Optional[str]:
    """
    도보 상세 안내 문구 생성 => "<거리>m ahead, <방향>"

    turn point가 없으면 None (안내 불가, 예외 아님)
    """
    next_turn = find_next_turn(path, current_position)
    if next_turn is None:
        return None

    distance = distance_meters(current_position, next_turn.coordinate)
    if not math.isfinite(distance):
        logger.debug(f"안내 거리 계산 불가: position={current_position}")
        return None

    language = language or settings.GUIDANCE_LANGUAGE
    template = GUIDANCE_FORMAT.get(language, GUIDANCE_FORMAT["en"])
    return template.format(
        distance=_round_half_up(distance),
        direction=direction_label(next_turn.turn_type, language),
    )


class WalkingGuidanceExtractor:
    """도보 구간 turn-by-turn 안내 추출기"""

    def __init__(self, language: Optional[str] = None):
        self.language = language or settings.GUIDANCE_LANGUAGE

    def extract(
        self, path: WalkingDetailPath, current_position: Coordinate
    ) -> Optional[str]:
        return extract_instruction(path, current_position, self.language)
