import math

from georesolve.normalize.geo import (
    Coordinates,
    format_coordinates,
    haversine_distance_meters,
    to_finite_float,
    validate_coordinates,
    within_radius,
)


def test_haversine_same_point_is_zero():
    assert haversine_distance_meters(22.7606, 88.3742, 22.7606, 88.3742) == 0


def test_haversine_quarter_equator():
    distance = haversine_distance_meters(0, 0, 0, 90)
    assert abs(distance - 10_007_543) / 10_007_543 < 0.01


def test_haversine_is_symmetric():
    there = haversine_distance_meters(22.7606, 88.3742, 22.5726, 88.3639)
    back = haversine_distance_meters(22.5726, 88.3639, 22.7606, 88.3742)
    assert math.isclose(there, back)
    assert 20_000 < there < 22_000


def test_format_coordinates_six_decimals():
    assert format_coordinates(Coordinates(22.7606, 88.3742)) == "22.760600, 88.374200"
    assert format_coordinates(Coordinates(-1.5, 0)) == "-1.500000, 0.000000"


def test_to_finite_float_rejects_non_numbers():
    assert to_finite_float("22.5") == 22.5
    assert to_finite_float(7) == 7.0
    assert to_finite_float("NaN") is None
    assert to_finite_float("inf") is None
    assert to_finite_float("north") is None
    assert to_finite_float(None) is None
    assert to_finite_float(True) is None


def test_validate_coordinates_ranges():
    assert validate_coordinates("22.5", "88.3") == Coordinates(22.5, 88.3)
    assert validate_coordinates(91, 0) is None
    assert validate_coordinates(0, -181) is None
    assert validate_coordinates(float("nan"), 0) is None


def test_within_radius_reports_distance():
    office = Coordinates(22.7606, 88.3742)
    inside, distance = within_radius(office, office, 100)
    assert inside and distance == 0

    kolkata = Coordinates(22.5726, 88.3639)
    inside, distance = within_radius(kolkata, office, 500)
    assert not inside
    assert distance > 20_000
