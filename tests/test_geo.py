# tests/test_geo.py
import pytest

from citynav.models.routing import Location
from citynav.services.geo import EARTH_RADIUS_M, destination_point, haversine_distance_m


def test_distance_to_self_is_zero():
    here = Location(lat=28.6139, lng=77.2090)
    assert haversine_distance_m(here, here) == 0.0


def test_one_degree_of_latitude():
    a = Location(lat=0.0, lng=0.0)
    b = Location(lat=1.0, lng=0.0)
    expected = EARTH_RADIUS_M * 3.141592653589793 / 180.0
    assert haversine_distance_m(a, b) == pytest.approx(expected, rel=1e-9)


def test_distance_is_symmetric(delhi_source, delhi_nearby):
    assert haversine_distance_m(delhi_source, delhi_nearby) == pytest.approx(
        haversine_distance_m(delhi_nearby, delhi_source)
    )


def test_destination_point_lands_at_requested_distance(delhi_source):
    target = destination_point(delhi_source, 45.0, 1500.0, name="Transfer Point")
    assert target.name == "Transfer Point"
    assert target.lat > delhi_source.lat
    assert target.lng > delhi_source.lng
    assert haversine_distance_m(delhi_source, target) == pytest.approx(1500.0, rel=1e-6)
