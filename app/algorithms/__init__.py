"""
거리 계산, 나침반 스무딩, 도보 안내 알고리즘
"""

from app.algorithms.distance_calculator import DistanceCalculator, distance_meters
from app.algorithms.heading_smoother import HeadingSmoother, select_raw_heading
from app.algorithms.walking_guidance import (
    WalkingGuidanceExtractor,
    extract_instruction,
    find_next_turn,
)

__all__ = [
    "DistanceCalculator",
    "distance_meters",
    "HeadingSmoother",
    "select_raw_heading",
    "WalkingGuidanceExtractor",
    "extract_instruction",
    "find_next_turn",
]
