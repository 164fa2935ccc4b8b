"""Geographic models for positions, addresses and venue candidates."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

FALLBACK_SOURCE = "fallback"


class SourceTrust(str, Enum):
    """How much a geocoding source is trusted when scoring its answers."""

    HIGH = "high"  # commercial mapping services
    OPEN = "open"  # open-data services
    UNKNOWN = "unknown"


class Position(BaseModel):
    """A device position fix."""

    latitude: float = Field(
        ...,
        ge=-90,
        le=90,
        allow_inf_nan=False,
        description="Latitude in decimal degrees",
        examples=[26.8467],
    )
    longitude: float = Field(
        ...,
        ge=-180,
        le=180,
        allow_inf_nan=False,
        description="Longitude in decimal degrees",
        examples=[80.9462],
    )
    accuracy_m: float | None = Field(
        default=None,
        ge=0,
        description="Reported horizontal accuracy radius in meters",
    )
    captured_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When the fix was captured",
    )

    model_config = ConfigDict(frozen=True)

    def as_point(self) -> tuple[float, float]:
        """Return ``(latitude, longitude)``."""
        return (self.latitude, self.longitude)


class GeocodedAddress(BaseModel):
    """Address components returned by one reverse geocoding call."""

    city: str | None = Field(default=None, description="City, town or locality")
    state: str | None = Field(default=None, description="State or region")
    country: str | None = Field(default=None, description="Country name or code")
    postal_code: str | None = Field(default=None, description="Postal code")
    source: str = Field(..., description="Provider identifier, e.g. 'nominatim'")
    trust: SourceTrust = Field(
        default=SourceTrust.UNKNOWN, description="Trust tier of the provider"
    )
    formatted_address: str | None = Field(
        default=None, description="Provider's full formatted address"
    )
    raw: dict[str, Any] = Field(
        default_factory=dict, description="Provider payload the address came from"
    )

    model_config = ConfigDict(frozen=True)

    @field_validator("city", "state", "country", "postal_code", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        """Treat empty strings from providers as missing."""
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @property
    def has_locality(self) -> bool:
        """Whether any address component is present."""
        return any((self.city, self.state, self.country, self.postal_code))

    @property
    def short_label(self) -> str | None:
        """Return a concise label, preferring city/state when available."""
        if self.city and self.state:
            parts = [self.city, self.state]
        elif self.city and self.country:
            parts = [self.city, self.country]
        elif self.state and self.country:
            parts = [self.state, self.country]
        elif self.city:
            parts = [self.city]
        elif self.country:
            parts = [self.country]
        else:
            return None
        return ", ".join(parts)


class ScoredAddress(GeocodedAddress):
    """A geocoded address with its confidence score.

    ``confidence`` is ``None`` for manually entered addresses, which are
    authoritative and never scored.
    """

    confidence: int | None = Field(default=None, ge=0, le=100)
    issues: tuple[str, ...] = Field(
        default=(), description="Quality issues noticed while scoring"
    )

    @classmethod
    def from_address(
        cls,
        address: GeocodedAddress,
        confidence: int | None,
        issues: tuple[str, ...] = (),
    ) -> "ScoredAddress":
        """Attach a score to a provider address."""
        return cls(**address.model_dump(), confidence=confidence, issues=issues)


class ResolvedLocation(BaseModel):
    """The authoritative answer to "where is the user".

    Always replaced as a whole value so that a position is never paired
    with a stale address.
    """

    position: Position
    address: ScoredAddress | None = None
    is_manually_set: bool = False

    model_config = ConfigDict(frozen=True)

    @property
    def is_degraded(self) -> bool:
        """Coordinates without a detected address.

        True when no provider answered and for the configured last-resort
        location; never for a manual location.
        """
        if self.is_manually_set:
            return False
        return self.address is None or self.address.source == FALLBACK_SOURCE

    @property
    def confidence(self) -> int | None:
        """Confidence of the address, ``None`` when absent or manual."""
        return self.address.confidence if self.address else None

    @property
    def latitude(self) -> float:
        return self.position.latitude

    @property
    def longitude(self) -> float:
        return self.position.longitude


def _coerce_coordinate(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class Candidate(BaseModel):
    """A venue from the external catalogue.

    Coordinates are kept as given (possibly missing or invalid); the range
    filter decides what to do with them.
    """

    id: str | int
    latitude: float | None = None
    longitude: float | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def coerce_coordinate(cls, value: Any) -> float | None:
        """Unparseable coordinates become ``None``."""
        return _coerce_coordinate(value)

    @property
    def name(self) -> str | None:
        value = self.metadata.get("name")
        return str(value) if value is not None else None

    @classmethod
    def from_mapping(cls, raw: dict[str, Any]) -> "Candidate":
        """Build a candidate from a catalogue record.

        Supports ``{"map": {"lat": .., "lng": ..}}``, top-level
        ``latitude``/``longitude`` and ``lat``/``lng`` shapes. Everything
        else on the record is kept as metadata.
        """
        lat: Any = None
        lng: Any = None
        map_info = raw.get("map")
        if isinstance(map_info, dict):
            lat, lng = map_info.get("lat"), map_info.get("lng")
        elif raw.get("latitude") is not None or raw.get("longitude") is not None:
            lat, lng = raw.get("latitude"), raw.get("longitude")
        else:
            lat, lng = raw.get("lat"), raw.get("lng", raw.get("lon"))

        if "id" not in raw:
            raise ValueError("Candidate record has no 'id'")

        metadata = {k: v for k, v in raw.items() if k != "id"}
        return cls(id=raw["id"], latitude=lat, longitude=lng, metadata=metadata)


class RankedCandidate(BaseModel):
    """A candidate with its distance and bearing from the origin.

    Distance and bearing are ``None`` only when no origin was known and the
    candidate list was passed through unfiltered.
    """

    candidate: Candidate
    distance_km: float | None = Field(default=None, ge=0)
    bearing_deg: float | None = Field(default=None, ge=0, lt=360)

    model_config = ConfigDict(frozen=True)

    @property
    def direction(self) -> str | None:
        """Compass label (N, NE, ...) of the bearing."""
        if self.bearing_deg is None:
            return None
        from venue_locator.core.geocoding.distance import compass_label

        return compass_label(self.bearing_deg)


class DistanceRange(BaseModel):
    """Inclusive distance window in whole kilometers."""

    min_km: int = Field(..., ge=0)
    max_km: int = Field(..., ge=0)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_bounds(self) -> "DistanceRange":
        """Minimum cannot exceed maximum."""
        if self.min_km > self.max_km:
            raise ValueError("Minimum distance cannot be greater than maximum distance")
        return self

    def contains(self, distance_km: float) -> bool:
        return self.min_km <= distance_km <= self.max_km

    def __str__(self) -> str:
        return f"{self.min_km}-{self.max_km}"


class ManualLocationInput(BaseModel):
    """A user-supplied location: an address, explicit coordinates, or both."""

    city: str | None = None
    state: str | None = None
    country: str | None = None
    postal_code: str | None = None
    latitude: float | None = Field(default=None, ge=-90, le=90, allow_inf_nan=False)
    longitude: float | None = Field(
        default=None, ge=-180, le=180, allow_inf_nan=False
    )

    model_config = ConfigDict(frozen=True)

    @field_validator("city", "state", "country", "postal_code", mode="before")
    @classmethod
    def strip_text(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @model_validator(mode="after")
    def validate_entry(self) -> "ManualLocationInput":
        """Require a city or a full coordinate pair."""
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("Latitude and longitude must be given together")
        if self.city is None and self.latitude is None:
            raise ValueError("A manual location needs a city or coordinates")
        return self

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def query(self) -> str:
        """Free-text address for forward geocoding."""
        parts = [self.city, self.state, self.postal_code, self.country]
        return ", ".join(p for p in parts if p)


class FilterResult(BaseModel):
    """Outcome of a distance filter call."""

    kept: list[RankedCandidate] = Field(default_factory=list)
    excluded_no_coords: int = Field(default=0, ge=0)
    excluded_out_of_range: int = Field(default=0, ge=0)
    origin_known: bool = True

    model_config = ConfigDict(frozen=True)

    @property
    def matched_count(self) -> int:
        return len(self.kept)

    @property
    def candidates(self) -> list[Candidate]:
        return [ranked.candidate for ranked in self.kept]


class ProximityListing(BaseModel):
    """What to show for a distance search, after the fallback policy."""

    result: FilterResult
    items: list[RankedCandidate]
    fell_back: bool = False
    message: str | None = None

    model_config = ConfigDict(frozen=True)

