"""Distance window filtering and ranking of venue candidates.

The filter is a pure function of its inputs. It reports what it excluded
instead of hiding it, and it returns an empty list faithfully when nothing
falls inside the window; deciding whether to fall back to the unfiltered
list is left to the caller.
"""

from collections.abc import Iterable

from pydantic import ValidationError

from venue_locator.core.geocoding.distance import bearing, distance
from venue_locator.core.geocoding.exceptions import InvalidRangeFormat
from venue_locator.core.geocoding.validator import has_usable_coordinates
from venue_locator.core.logging import get_logger
from venue_locator.models.geographic import (
    Candidate,
    DistanceRange,
    FilterResult,
    Position,
    RankedCandidate,
    ResolvedLocation,
)

logger = get_logger(module="range_filter")


def parse_distance_range(raw: str) -> DistanceRange:
    """Parse a ``"<min>-<max>"`` string of whole kilometers.

    Args:
        raw: Range string such as ``"5-10"``

    Returns:
        DistanceRange

    Raises:
        InvalidRangeFormat: If the string is malformed or min exceeds max
    """
    if not isinstance(raw, str):
        raise InvalidRangeFormat(repr(raw), "expected a string")

    parts = raw.strip().split("-")
    if len(parts) != 2:
        raise InvalidRangeFormat(raw)

    bounds: list[int] = []
    for part in parts:
        text = part.strip()
        if not (text.isascii() and text.isdigit()):
            raise InvalidRangeFormat(raw, f"'{text}' is not a whole number")
        bounds.append(int(text))

    try:
        return DistanceRange(min_km=bounds[0], max_km=bounds[1])
    except ValidationError as e:
        raise InvalidRangeFormat(raw, "minimum is greater than maximum") from e


def _coerce_range(distance_range: DistanceRange | str) -> DistanceRange:
    if isinstance(distance_range, DistanceRange):
        return distance_range
    return parse_distance_range(distance_range)


def _origin_position(origin: ResolvedLocation | Position | None) -> Position | None:
    if origin is None:
        return None
    if isinstance(origin, ResolvedLocation):
        return origin.position
    return origin


def filter_candidates(
    candidates: Iterable[Candidate],
    origin: ResolvedLocation | Position | None,
    distance_range: DistanceRange | str,
) -> FilterResult:
    """Keep candidates within the distance window, nearest first.

    Args:
        candidates: Venue candidates from the catalogue
        origin: Where the user is; ``None`` when that is unknown
        distance_range: Inclusive window, as a DistanceRange or "min-max"

    Returns:
        FilterResult with the kept candidates and exclusion counts. Without
        an origin every candidate is returned unchanged and in input order.

    Raises:
        InvalidRangeFormat: If ``distance_range`` is a malformed string
    """
    window = _coerce_range(distance_range)
    items = list(candidates)
    position = _origin_position(origin)

    if position is None:
        logger.info(
            "No origin available, returning candidates unfiltered",
            candidate_count=len(items),
        )
        return FilterResult(
            kept=[RankedCandidate(candidate=c) for c in items],
            origin_known=False,
        )

    kept: list[RankedCandidate] = []
    excluded_no_coords = 0
    excluded_out_of_range = 0

    for candidate in items:
        if not has_usable_coordinates(candidate):
            excluded_no_coords += 1
            continue

        km = distance(position, candidate)
        if not window.contains(km):
            excluded_out_of_range += 1
            continue

        kept.append(
            RankedCandidate(
                candidate=candidate,
                distance_km=km,
                bearing_deg=bearing(position, candidate),
            )
        )

    # sorted() is stable, so equal distances keep catalogue order
    kept = sorted(kept, key=lambda ranked: ranked.distance_km)

    logger.info(
        "Filtered candidates by distance",
        distance_range=str(window),
        kept=len(kept),
        excluded_no_coords=excluded_no_coords,
        excluded_out_of_range=excluded_out_of_range,
    )
    return FilterResult(
        kept=kept,
        excluded_no_coords=excluded_no_coords,
        excluded_out_of_range=excluded_out_of_range,
        origin_known=True,
    )
