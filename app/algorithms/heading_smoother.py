from typing import Optional

from app.core.config import settings


def _normalize_delta(delta: float) -> float:
    """각도 차를 (-180, 180] 범위로 정규화"""
    delta = delta % 360
    if delta > 180:
        delta -= 360
    return delta


def select_raw_heading(
    true_heading: Optional[float], magnetic_heading: Optional[float]
) -> Optional[float]:
    """진북 기준 heading이 유효하면(> 0) 사용, 아니면 자북 heading 사용"""
    if true_heading is not None and true_heading > 0:
        return true_heading
    return magnetic_heading


class HeadingSmoother:
    """
    나침반 heading 스무딩

    1) EMA로 떨림 제거
    2) 순환 각도 차를 (-180, 180]로 정규화 => 0°/360° 경계에서 짧은 호로 회전
    3) 한 번의 업데이트당 최대 회전량 제한 => 카메라가 튀는 현상 방지
    """

    def __init__(
        self,
        smoothing_factor: Optional[float] = None,
        max_delta: Optional[float] = None,
    ):
        self.smoothing_factor = (
            settings.HEADING_SMOOTHING_FACTOR
            if smoothing_factor is None
            else smoothing_factor
        )
        self.max_delta = (
            settings.HEADING_MAX_DELTA_DEGREES if max_delta is None else max_delta
        )
        self.smoothed_heading = 0.0

    def update(self, raw_heading: float) -> float:
        last = self.smoothed_heading

        # 1) 순환 각도 차 => raw 2°, 현재 359°이면 +3° (짧은 호)
        diff = _normalize_delta(raw_heading - last)

        # 2) EMA 스무딩
        ema = last + self.smoothing_factor * diff
        delta = _normalize_delta(ema - last)

        # 3) 최대 회전량 클램핑
        clamped = max(-self.max_delta, min(self.max_delta, delta))

        self.smoothed_heading = (last + clamped + 360) % 360
        return self.smoothed_heading

    def reset(self):
        self.smoothed_heading = 0.0
