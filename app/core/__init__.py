"""
Core 설정 및 utilities, 커스텀 예외
"""

from app.core.config import settings

from app.core.exceptions import (
    TimeToGoException,
    RouteNotFoundException,
    SessionNotFoundException,
    InvalidTransferAcknowledgement,
    ExternalServiceException,
    PositionStreamError,
)

__all__ = [
    "settings",
    "TimeToGoException",
    "RouteNotFoundException",
    "SessionNotFoundException",
    "InvalidTransferAcknowledgement",
    "ExternalServiceException",
    "PositionStreamError",
]
