import math

import pytest

from src.smart_attendance.smart_attendance.core.exceptions import ValidationError
from src.smart_attendance.smart_attendance.geo.fence import (
    Coordinate,
    GeoFence,
    Location,
    haversine_km,
    is_within_campus,
    parse_location,
)

CENTER = Coordinate(17.409954, 78.603195)


def test_center_is_inside_any_non_negative_radius():
    assert is_within_campus(CENTER, CENTER, 0)
    assert is_within_campus(CENTER, CENTER, 2.0)


def test_distance_is_symmetric():
    other = Coordinate(17.45, 78.55)
    assert haversine_km(CENTER, other) == pytest.approx(haversine_km(other, CENTER))


def test_one_degree_of_longitude_on_equator():
    assert haversine_km(Coordinate(0, 0), Coordinate(0, 1)) == pytest.approx(111.195, abs=0.01)


def test_fence_boundary_is_inclusive():
    fence = GeoFence(center=CENTER, radius_km=2.0)
    near = Coordinate(CENTER.latitude + 0.01, CENTER.longitude)  # ~1.1 km
    far = Coordinate(CENTER.latitude + 0.03, CENTER.longitude)  # ~3.3 km

    assert fence.contains(near)
    assert not fence.contains(far)
    assert GeoFence(center=CENTER, radius_km=fence.distance_km(far)).contains(far)


def test_missing_point_is_never_inside():
    assert not is_within_campus(None, CENTER, 100)


def test_negative_radius_rejected():
    with pytest.raises(ValidationError):
        GeoFence(center=CENTER, radius_km=-1)


def test_parse_location_accepts_numeric_strings():
    loc = parse_location({"latitude": "17.41", "longitude": "78.60"})
    assert loc is not None
    assert loc.latitude == pytest.approx(17.41)
    assert loc.display_address() == "17.41000, 78.60000"


@pytest.mark.parametrize(
    "payload",
    [
        None,
        {},
        {"latitude": 17.4},
        {"latitude": "abc", "longitude": 78.6},
        {"latitude": True, "longitude": 78.6},
        {"latitude": float("nan"), "longitude": 78.6},
    ],
)
def test_parse_location_rejects_unusable_payloads(payload):
    assert parse_location(payload) is None


def test_zero_coordinate_counts_as_missing():
    assert parse_location({"latitude": 0, "longitude": 78.6}) is None
    assert parse_location({"latitude": 17.4, "longitude": 0.0}) is None


def test_supplied_address_is_kept():
    loc = Location(coordinate=CENTER, address="Library")
    assert loc.display_address() == "Library"


def test_antipodal_points_are_half_the_circumference():
    a, b = Coordinate(0, 0), Coordinate(0, 180)
    assert haversine_km(a, b) == pytest.approx(math.pi * 6371)
    assert haversine_km(b, a) == pytest.approx(haversine_km(a, b))
    assert haversine_km(Coordinate(90, 0), Coordinate(-90, 0)) == pytest.approx(math.pi * 6371)


def test_long_address_is_capped():
    loc = parse_location({"latitude": 17.41, "longitude": 78.6, "address": "x" * 1000})
    assert len(loc.display_address()) == 255
