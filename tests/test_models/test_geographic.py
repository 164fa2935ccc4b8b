"""Tests for geographic models."""

import math

import pytest
from pydantic import ValidationError

from venue_locator.models.geographic import (
    FALLBACK_SOURCE,
    Candidate,
    DistanceRange,
    GeocodedAddress,
    ManualLocationInput,
    Position,
    ResolvedLocation,
    ScoredAddress,
    SourceTrust,
)


class TestPosition:
    def test_valid_position(self):
        position = Position(latitude=26.8467, longitude=80.9462, accuracy_m=20)
        assert position.as_point() == (26.8467, 80.9462)
        assert position.captured_at.tzinfo is not None

    @pytest.mark.parametrize(
        "latitude, longitude",
        [(91, 0), (-91, 0), (0, 181), (0, -181), (math.nan, 0), (0, math.inf)],
    )
    def test_rejects_invalid_coordinates(self, latitude, longitude):
        with pytest.raises(ValidationError):
            Position(latitude=latitude, longitude=longitude)

    def test_rejects_negative_accuracy(self):
        with pytest.raises(ValidationError):
            Position(latitude=0, longitude=0, accuracy_m=-1)

    def test_is_immutable(self):
        position = Position(latitude=1, longitude=1)
        with pytest.raises(ValidationError):
            position.latitude = 2


class TestAddresses:
    def test_blank_components_become_none(self):
        address = GeocodedAddress(city="  ", state="", country="India", source="nominatim")
        assert address.city is None
        assert address.state is None
        assert address.has_locality is True

    def test_empty_address_has_no_locality(self):
        assert GeocodedAddress(source="arcgis").has_locality is False

    @pytest.mark.parametrize(
        "fields, label",
        [
            ({"city": "Lucknow", "state": "Uttar Pradesh"}, "Lucknow, Uttar Pradesh"),
            ({"city": "Lucknow", "country": "India"}, "Lucknow, India"),
            ({"state": "Uttar Pradesh", "country": "India"}, "Uttar Pradesh, India"),
            ({"country": "India"}, "India"),
            ({}, None),
        ],
    )
    def test_short_label(self, fields, label):
        assert GeocodedAddress(source="google", **fields).short_label == label

    def test_scored_address_from_address(self):
        address = GeocodedAddress(
            city="Lucknow", source="google", trust=SourceTrust.HIGH, raw={"k": "v"}
        )
        scored = ScoredAddress.from_address(address, 75, ("No postal code",))
        assert scored.confidence == 75
        assert scored.city == "Lucknow"
        assert scored.trust is SourceTrust.HIGH
        assert scored.raw == {"k": "v"}

    def test_confidence_bounds(self):
        with pytest.raises(ValidationError):
            ScoredAddress(source="google", confidence=101)


class TestResolvedLocation:
    def test_degraded_without_address(self):
        location = ResolvedLocation(position=Position(latitude=1, longitude=2))
        assert location.is_degraded is True
        assert location.confidence is None
        assert (location.latitude, location.longitude) == (1, 2)

    def test_manual_location_is_not_degraded(self):
        location = ResolvedLocation(
            position=Position(latitude=1, longitude=2), is_manually_set=True
        )
        assert location.is_degraded is False

    def test_default_location_is_degraded(self):
        address = ScoredAddress(source=FALLBACK_SOURCE, city="Lucknow", confidence=0)
        location = ResolvedLocation(position=Position(latitude=1, longitude=2), address=address)
        assert location.is_degraded is True


class TestCandidate:
    def test_from_map_shape(self):
        candidate = Candidate.from_mapping(
            {"id": 7, "name": "Tunday Kababi", "map": {"lat": "26.85", "lng": "80.92"}}
        )
        assert candidate.id == 7
        assert (candidate.latitude, candidate.longitude) == (26.85, 80.92)
        assert candidate.name == "Tunday Kababi"
        assert "id" not in candidate.metadata

    def test_from_top_level_shape(self):
        candidate = Candidate.from_mapping({"id": "a", "latitude": 1.5, "longitude": 2.5})
        assert (candidate.latitude, candidate.longitude) == (1.5, 2.5)

    def test_from_short_keys(self):
        candidate = Candidate.from_mapping({"id": "a", "lat": 1.5, "lon": 2.5})
        assert (candidate.latitude, candidate.longitude) == (1.5, 2.5)

    def test_unparseable_coordinates_become_none(self):
        candidate = Candidate.from_mapping({"id": "a", "map": {"lat": "", "lng": True}})
        assert candidate.latitude is None
        assert candidate.longitude is None

    def test_requires_id(self):
        with pytest.raises(ValueError):
            Candidate.from_mapping({"latitude": 1, "longitude": 2})


class TestDistanceRange:
    def test_contains_is_inclusive(self):
        window = DistanceRange(min_km=1, max_km=10)
        assert window.contains(1)
        assert window.contains(10)
        assert not window.contains(10.01)

    def test_rejects_inverted_bounds(self):
        with pytest.raises(ValidationError):
            DistanceRange(min_km=10, max_km=1)


class TestManualLocationInput:
    def test_city_only(self):
        entry = ManualLocationInput(city=" Lucknow ", state="Uttar Pradesh", country="India")
        assert entry.city == "Lucknow"
        assert entry.has_coordinates is False
        assert entry.query == "Lucknow, Uttar Pradesh, India"

    def test_coordinates_only(self):
        entry = ManualLocationInput(latitude=26.8, longitude=80.9)
        assert entry.has_coordinates is True

    def test_requires_city_or_coordinates(self):
        with pytest.raises(ValidationError):
            ManualLocationInput(state="Uttar Pradesh")

    def test_requires_coordinate_pair(self):
        with pytest.raises(ValidationError):
            ManualLocationInput(city="Lucknow", latitude=26.8)
