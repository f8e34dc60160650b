import math
from typing import Tuple

from app.models.domain import Coordinate


class DistanceCalculator:
    EARTH_RADIUS = 6371000  # meters

    def calculate_distance(
        self, lat1: float, lon1: float, lat2: float, lon2: float
    ) -> float:
        """두 좌표 간 거리 계산(meter)"""
        return self.haversine((lat1, lon1), (lat2, lon2))

    def haversine(
        self, coord1: Tuple[float, float], coord2: Tuple[float, float]
    ) -> float:
        """하버사인 공식으로 지구의 곡률 고려하여 두 좌표 간 거리 계산"""
        lat1, lon1 = coord1
        lat2, lon2 = coord2

        # NaN/Infinity 입력 => 예외 대신 NaN 반환 (math.sin(inf)는 ValueError)
        if not all(math.isfinite(v) for v in (lat1, lon1, lat2, lon2)):
            return math.nan

        # radian convertion
        lat1, lon1, lat2, lon2 = map(math.radians, [lat1, lon1, lat2, lon2])

        # haversine formula
        dlat = lat2 - lat1
        dlon = lon2 - lon1
        a = (
            math.sin(dlat / 2) ** 2
            + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
        )
        c = 2 * math.asin(math.sqrt(min(1.0, a)))
        return self.EARTH_RADIUS * c


_calculator = DistanceCalculator()


def distance_meters(a: Coordinate, b: Coordinate) -> float:
    """Coordinate 두 개 사이의 거리(meter)"""
    return _calculator.calculate_distance(
        a.latitude, a.longitude, b.latitude, b.longitude
    )
