"""Per-caller location sessions and resolution orchestration."""

from venue_locator.core.location.override import ManualOverride
from venue_locator.core.location.service import LocationService, fallback_location
from venue_locator.core.location.session import LocationSession, ResolutionState

__all__ = [
    "LocationService",
    "LocationSession",
    "ManualOverride",
    "ResolutionState",
    "fallback_location",
]
