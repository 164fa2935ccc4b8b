"""Tests for distance window filtering."""

import math

import pytest

from venue_locator.core.geocoding.exceptions import InvalidRangeFormat
from venue_locator.core.geocoding.range_filter import filter_candidates, parse_distance_range
from venue_locator.models.geographic import (
    Candidate,
    DistanceRange,
    Position,
    ResolvedLocation,
)

ORIGIN = Position(latitude=26.8467, longitude=80.9462)


def candidate_at(id_: str, north_km: float) -> Candidate:
    """A candidate ``north_km`` due north of the origin."""
    return Candidate(
        id=id_,
        latitude=ORIGIN.latitude + north_km / 111.19,
        longitude=ORIGIN.longitude,
        metadata={"name": id_},
    )


class TestParseDistanceRange:
    """Parsing of "<min>-<max>" strings."""

    def test_valid(self):
        assert parse_distance_range("5-10") == DistanceRange(min_km=5, max_km=10)

    def test_whitespace_is_tolerated(self):
        assert parse_distance_range(" 1 - 15 ") == DistanceRange(min_km=1, max_km=15)

    def test_equal_bounds(self):
        assert parse_distance_range("3-3") == DistanceRange(min_km=3, max_km=3)

    @pytest.mark.parametrize(
        "raw",
        ["", "10", "1-2-3", "a-5", "1.5-3", "-1-5", "5-", "10-5", "١-٥"],
    )
    def test_invalid(self, raw):
        """Malformed strings and inverted bounds are rejected."""
        with pytest.raises(InvalidRangeFormat):
            parse_distance_range(raw)

    def test_invalid_range_is_value_error(self):
        """Callers catching ValueError also catch range errors."""
        with pytest.raises(ValueError):
            parse_distance_range("ten-twenty")

    def test_str_round_trip(self):
        assert str(parse_distance_range("2-8")) == "2-8"


class TestFilterCandidates:
    """Filtering and ranking by distance."""

    def test_keeps_inclusive_window_sorted_nearest_first(self):
        """Only candidates inside [min, max] survive, nearest first."""
        candidates = [
            candidate_at("far", 30),
            candidate_at("mid", 5),
            candidate_at("near", 2),
            candidate_at("too-near", 0.2),
        ]

        result = filter_candidates(candidates, ORIGIN, "1-10")

        assert [r.candidate.id for r in result.kept] == ["near", "mid"]
        assert result.excluded_out_of_range == 2
        assert result.excluded_no_coords == 0
        assert result.origin_known is True
        for ranked in result.kept:
            assert ranked.direction == "N"
            assert 1 <= ranked.distance_km <= 10

    def test_boundaries_are_inclusive(self):
        """A candidate exactly at the bounds is kept."""
        at_origin = Candidate(id="here", latitude=ORIGIN.latitude, longitude=ORIGIN.longitude)
        result = filter_candidates([at_origin], ORIGIN, DistanceRange(min_km=0, max_km=0))
        assert result.matched_count == 1
        assert result.kept[0].distance_km == 0

    def test_ties_keep_input_order(self):
        """Equal distances keep their catalogue order."""
        candidates = [candidate_at("b", 3), candidate_at("a", 3), candidate_at("c", 1.5)]
        result = filter_candidates(candidates, ORIGIN, "1-10")
        assert [r.candidate.id for r in result.kept] == ["c", "b", "a"]

    def test_unusable_coordinates_are_counted(self):
        """Missing, (0, 0), non-finite and out-of-range coordinates are dropped."""
        candidates = [
            Candidate(id="missing"),
            Candidate(id="lat-only", latitude=26.9),
            Candidate(id="null-island", latitude=0, longitude=0),
            Candidate(id="nan", latitude=math.nan, longitude=80.9),
            Candidate(id="inf", latitude=26.9, longitude=math.inf),
            Candidate(id="out-of-range", latitude=123.0, longitude=80.9),
            Candidate(id="garbage", latitude="north", longitude="east"),
            candidate_at("ok", 4),
        ]

        result = filter_candidates(candidates, ORIGIN, "1-10")

        assert result.excluded_no_coords == 7
        assert result.candidates == [candidates[-1]]

    def test_single_zero_axis_is_valid(self):
        """Only the (0, 0) pair is a placeholder; one zero axis is a real place."""
        equator = Position(latitude=0.0, longitude=10.0)
        on_equator = Candidate(id="eq", latitude=0.0, longitude=10.05)
        result = filter_candidates([on_equator], equator, "1-10")
        assert result.excluded_no_coords == 0
        assert result.matched_count == 1

    def test_nothing_in_range_returns_empty(self):
        """An empty result is returned faithfully, with no fallback."""
        result = filter_candidates([candidate_at("far", 50)], ORIGIN, "1-10")
        assert result.kept == []
        assert result.excluded_out_of_range == 1
        assert result.origin_known is True

    def test_without_origin_returns_everything_unchanged(self):
        """No origin: all candidates, in input order, without distances."""
        candidates = [candidate_at("far", 50), Candidate(id="missing"), candidate_at("near", 2)]

        result = filter_candidates(candidates, None, "1-10")

        assert result.origin_known is False
        assert result.candidates == candidates
        assert result.excluded_no_coords == 0
        assert result.excluded_out_of_range == 0
        assert all(r.distance_km is None and r.direction is None for r in result.kept)

    def test_accepts_resolved_location_origin(self):
        """A ResolvedLocation is used through its position."""
        origin = ResolvedLocation(position=ORIGIN)
        result = filter_candidates([candidate_at("mid", 5)], origin, "1-10")
        assert result.matched_count == 1

    def test_invalid_range_string_raises(self):
        with pytest.raises(InvalidRangeFormat):
            filter_candidates([candidate_at("mid", 5)], ORIGIN, "ten")

    def test_does_not_mutate_input(self):
        """The input list is left untouched."""
        candidates = [candidate_at("mid", 5), candidate_at("near", 2)]
        snapshot = list(candidates)
        filter_candidates(candidates, ORIGIN, "1-10")
        assert candidates == snapshot
