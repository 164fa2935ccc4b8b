"""Confidence scoring for reverse geocoding results.

Scores are additive over three signals: how accurate the device fix was,
how much the geocoding source is trusted, and how complete the returned
address is. The sum is clamped to ``[0, 100]``.
"""

from dataclasses import dataclass, field

from venue_locator.models.geographic import GeocodedAddress, SourceTrust

MIN_SCORE = 0
MAX_SCORE = 100

# (upper bound in meters, contribution), checked in order
ACCURACY_TIERS: tuple[tuple[float, int], ...] = (
    (100.0, 40),
    (500.0, 30),
    (1000.0, 20),
    (5000.0, 10),
)

SOURCE_TRUST_WEIGHTS: dict[SourceTrust, int] = {
    SourceTrust.HIGH: 30,
    SourceTrust.OPEN: 20,
    SourceTrust.UNKNOWN: 0,
}

CITY_WEIGHT = 20
STATE_WEIGHT = 5
POSTAL_CODE_WEIGHT = 5


@dataclass(frozen=True)
class ConfidenceEvaluation:
    """A score together with the quality issues found while computing it."""

    score: int
    issues: tuple[str, ...] = field(default_factory=tuple)


def _accuracy_points(accuracy_m: float | None, issues: list[str]) -> int:
    if accuracy_m is None:
        return 0
    for limit, points in ACCURACY_TIERS:
        if accuracy_m <= limit:
            return points
    issues.append(f"Low GPS accuracy (±{round(accuracy_m)}m)")
    return 0


def evaluate(
    accuracy_m: float | None,
    source_trust: SourceTrust,
    address: GeocodedAddress,
) -> ConfidenceEvaluation:
    """Score an address and collect the issues behind a low score.

    Args:
        accuracy_m: Accuracy of the device fix the address was resolved for
        source_trust: Trust tier of the provider that produced the address
        address: The address returned by the provider

    Returns:
        ConfidenceEvaluation with a score in [0, 100]
    """
    issues: list[str] = []
    total = _accuracy_points(accuracy_m, issues)
    total += SOURCE_TRUST_WEIGHTS.get(source_trust, 0)

    if address.city:
        total += CITY_WEIGHT
    else:
        issues.append("No city detected")
    if address.state:
        total += STATE_WEIGHT
    if address.postal_code:
        total += POSTAL_CODE_WEIGHT

    clamped = max(MIN_SCORE, min(MAX_SCORE, total))
    return ConfidenceEvaluation(score=clamped, issues=tuple(issues))


def score(
    accuracy_m: float | None,
    source_trust: SourceTrust,
    address: GeocodedAddress,
) -> int:
    """Return only the clamped confidence score."""
    return evaluate(accuracy_m, source_trust, address).score
