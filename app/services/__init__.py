"""
Business logic services
"""

from app.services.route_tracker import RouteProgressTracker
from app.services.navigation_session import NavigationSession
from app.services.itinerary_service import ItineraryService
from app.services.walking_path_service import WalkingPathService
from app.services.location_share_service import LocationShareService

__all__ = [
    "RouteProgressTracker",
    "NavigationSession",
    "ItineraryService",
    "WalkingPathService",
    "LocationShareService",
]
