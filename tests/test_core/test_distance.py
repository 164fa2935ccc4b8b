"""Tests for great-circle distance and bearing helpers."""

import pytest

from venue_locator.core.geocoding.distance import (
    bearing,
    compass_label,
    compass_name,
    distance,
    format_distance,
    haversine_km,
)
from venue_locator.models.geographic import Position

LUCKNOW = Position(latitude=26.8467, longitude=80.9462)
KANPUR = Position(latitude=26.4499, longitude=80.3319)
NEW_YORK = Position(latitude=40.7128, longitude=-74.0060)
LONDON = Position(latitude=51.5074, longitude=-0.1278)


class TestDistance:
    """Haversine distance."""

    def test_same_point_is_zero(self):
        """A point is zero km from itself."""
        assert distance(LUCKNOW, LUCKNOW) == 0

    def test_is_symmetric(self):
        """Distance does not depend on direction."""
        assert distance(LUCKNOW, KANPUR) == distance(KANPUR, LUCKNOW)

    def test_known_city_pair(self):
        """New York to London is about 5570 km."""
        assert distance(NEW_YORK, LONDON) == pytest.approx(5570, abs=10)

    def test_rounded_to_two_decimals(self):
        """Results carry at most two decimals."""
        km = distance(LUCKNOW, KANPUR)
        assert km == round(km, 2)
        assert 70 < km < 80

    def test_one_degree_of_latitude(self):
        """One degree along a meridian is about 111.19 km on a 6371 km sphere."""
        assert haversine_km(0, 0, 1, 0) == pytest.approx(111.19, abs=0.01)

    def test_antipodal_points(self):
        """Antipodes are half the circumference apart."""
        assert haversine_km(0, 0, 0, 180) == pytest.approx(20015.09, abs=0.01)

    def test_accepts_any_object_with_coordinates(self):
        """Anything exposing latitude/longitude works."""

        class Point:
            latitude = 26.8467
            longitude = 80.9462

        assert distance(Point(), LUCKNOW) == 0


class TestBearing:
    """Initial bearing and compass labels."""

    @pytest.mark.parametrize(
        "target, expected",
        [
            (Position(latitude=1, longitude=0), 0.0),
            (Position(latitude=0, longitude=1), 90.0),
            (Position(latitude=-1, longitude=0), 180.0),
            (Position(latitude=0, longitude=-1), 270.0),
        ],
    )
    def test_cardinal_directions(self, target, expected):
        """Bearings from the origin towards each axis."""
        origin = Position(latitude=0, longitude=0)
        assert bearing(origin, target) == pytest.approx(expected)

    def test_normalized_range(self):
        """Bearings are always in [0, 360)."""
        result = bearing(LUCKNOW, KANPUR)
        assert 0 <= result < 360
        # Kanpur lies south-west of Lucknow
        assert compass_label(result) == "SW"

    @pytest.mark.parametrize(
        "degrees, label",
        [
            (0, "N"),
            (22.4, "N"),
            (22.5, "NE"),
            (90, "E"),
            (135, "SE"),
            (180, "S"),
            (225, "SW"),
            (270, "W"),
            (315, "NW"),
            (337.5, "N"),
            (359.9, "N"),
        ],
    )
    def test_compass_label(self, degrees, label):
        """Eight-point labels with half-way bearings rounding up."""
        assert compass_label(degrees) == label

    def test_compass_name(self):
        """Long names match the labels."""
        assert compass_name(45) == "North-East"
        assert compass_name(200) == "South"
        assert compass_name(300) == "North-West"


class TestFormatDistance:
    """Human-readable distances."""

    def test_meters_below_one_km(self):
        assert format_distance(0.35) == "350m"

    def test_one_decimal_below_ten_km(self):
        assert format_distance(3.46) == "3.5km"

    def test_whole_km_above_ten(self):
        assert format_distance(12.4) == "12km"
