"""Geocoding and distance module.

This package provides:
- Great-circle distance and bearing helpers
- Confidence scoring of reverse geocoding results
- Reverse geocoding providers and multi-provider reconciliation
- Device position acquisition with retry
- Distance window filtering of venue candidates
"""

from venue_locator.core.geocoding.acquisition import PositionAcquirer, PositionSensor
from venue_locator.core.geocoding.distance import (
    bearing,
    compass_label,
    compass_name,
    distance,
    format_distance,
)
from venue_locator.core.geocoding.providers import (
    ArcGISProvider,
    GeocodingProvider,
    GoogleMapsProvider,
    NominatimProvider,
    build_providers,
)
from venue_locator.core.geocoding.range_filter import (
    filter_candidates,
    parse_distance_range,
)
from venue_locator.core.geocoding.reconciler import ProviderReconciler

__all__ = [
    "ArcGISProvider",
    "GeocodingProvider",
    "GoogleMapsProvider",
    "NominatimProvider",
    "PositionAcquirer",
    "PositionSensor",
    "ProviderReconciler",
    "bearing",
    "build_providers",
    "compass_label",
    "compass_name",
    "distance",
    "filter_candidates",
    "format_distance",
    "parse_distance_range",
]
