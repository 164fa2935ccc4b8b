"""Coordinate validation utilities."""

import math

from venue_locator.models.geographic import Candidate


class CoordinateValidator:
    """Validates geographic coordinates before distance computation."""

    def is_valid_coordinates(self, latitude: float, longitude: float) -> bool:
        """Check if coordinates are finite, in range lat/long values."""
        if not (math.isfinite(latitude) and math.isfinite(longitude)):
            return False
        return -90 <= latitude <= 90 and -180 <= longitude <= 180

    def is_null_island(self, latitude: float, longitude: float) -> bool:
        """Detect the (0, 0) placeholder catalogues use for "no location"."""
        return latitude == 0 and longitude == 0

    def has_usable_coordinates(self, candidate: Candidate) -> bool:
        """Whether a candidate can be placed on the map.

        Missing coordinates, the (0, 0) placeholder, NaN/inf and values
        outside the physical lat/long domain are all unusable.
        """
        lat, lon = candidate.latitude, candidate.longitude
        if lat is None or lon is None:
            return False
        if not self.is_valid_coordinates(lat, lon):
            return False
        return not self.is_null_island(lat, lon)


_default_validator = CoordinateValidator()


def has_usable_coordinates(candidate: Candidate) -> bool:
    """Module-level shortcut using a shared validator."""
    return _default_validator.has_usable_coordinates(candidate)
