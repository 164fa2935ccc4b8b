"""Quality assessment of a resolved location and search radius suggestions."""

import re
from dataclasses import dataclass, field

from venue_locator.models.geographic import DistanceRange, ResolvedLocation

ACCURATE_THRESHOLD = 70

MAJOR_CITIES = frozenset(
    {
        "new york",
        "london",
        "tokyo",
        "mumbai",
        "delhi",
        "shanghai",
        "beijing",
        "los angeles",
        "chicago",
        "toronto",
        "sydney",
        "melbourne",
        "dubai",
        "singapore",
        "hong kong",
        "bangkok",
        "jakarta",
        "manila",
        "cairo",
        "istanbul",
        "moscow",
        "st petersburg",
        "berlin",
        "madrid",
        "rome",
        "paris",
        "barcelona",
        "amsterdam",
        "stockholm",
        "oslo",
        "copenhagen",
    }
)
LARGE_COUNTRIES = frozenset({"india", "china", "usa", "united states"})
CITY_STATES = frozenset({"singapore", "hong kong", "monaco"})

MAJOR_CITY_RANGE = DistanceRange(min_km=1, max_km=15)
LARGE_COUNTRY_RANGE = DistanceRange(min_km=1, max_km=12)
CITY_STATE_RANGE = DistanceRange(min_km=1, max_km=8)
DEFAULT_RANGE = DistanceRange(min_km=1, max_km=10)


@dataclass(frozen=True)
class AccuracyAssessment:
    is_accurate: bool
    confidence: int
    recommendations: list[str] = field(default_factory=list)


def assess_location_accuracy(location: ResolvedLocation) -> AccuracyAssessment:
    """Judge whether a resolved location is good enough to search around.

    Starts from 100 and subtracts a penalty for each weakness found, with a
    recommendation for the user per penalty.
    """
    recommendations: list[str] = []
    confidence = 100

    accuracy = location.position.accuracy_m
    if accuracy:
        if accuracy > 5000:
            confidence -= 40
            recommendations.append("GPS accuracy is poor - try moving to an open area")
        elif accuracy > 1000:
            confidence -= 20
            recommendations.append("GPS accuracy could be better")

    address = location.address
    if address is None or not address.city:
        confidence -= 30
        recommendations.append("City not detected - location may be imprecise")
    if address is None or not (address.state or address.country):
        confidence -= 10
        recommendations.append("Region information missing")

    return AccuracyAssessment(
        is_accurate=confidence >= ACCURATE_THRESHOLD,
        confidence=max(0, confidence),
        recommendations=recommendations,
    )


def suggested_radius(location: ResolvedLocation) -> DistanceRange:
    """Suggest a search window sized to the kind of place the user is in."""
    address = location.address
    if address is None or not address.city:
        return DEFAULT_RANGE

    city = address.city.lower()
    country = (address.country or "").lower()

    if country in CITY_STATES or city in CITY_STATES:
        return CITY_STATE_RANGE
    if _names_major_city(city):
        return MAJOR_CITY_RANGE
    if country in LARGE_COUNTRIES:
        return LARGE_COUNTRY_RANGE
    return DEFAULT_RANGE


def _names_major_city(city: str) -> bool:
    """Whole-word match, so "Greater London" counts and "Parish" does not."""
    return any(re.search(rf"\b{re.escape(major)}\b", city) for major in MAJOR_CITIES)
