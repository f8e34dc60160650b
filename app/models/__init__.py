"""
pydantic models for 요청, 응답 + 도메인 객체
"""

from app.models.requests import (
    RouteCalculateRequest,
    TrackingStartRequest,
    PositionSample,
    HeadingSample,
    TransferAcknowledgement,
)
from app.models.responses import (
    TrackerStateResponse,
    ItineraryResponse,
    ErrorResponse,
)
from app.models.domain import (
    Coordinate,
    Itinerary,
    WalkingLeg,
    TransitLeg,
    PathPoint,
    WalkingDetailPath,
    NavigationMode,
    TrackerState,
)

__all__ = [
    "RouteCalculateRequest",
    "TrackingStartRequest",
    "PositionSample",
    "HeadingSample",
    "TransferAcknowledgement",
    "TrackerStateResponse",
    "ItineraryResponse",
    "ErrorResponse",
    "Coordinate",
    "Itinerary",
    "WalkingLeg",
    "TransitLeg",
    "PathPoint",
    "WalkingDetailPath",
    "NavigationMode",
    "TrackerState",
]
