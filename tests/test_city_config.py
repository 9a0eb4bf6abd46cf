# tests/test_city_config.py
import pytest

from citynav.models.context import CityId, Tier
from citynav.services.city_config import (
    detect_city_from_coordinates,
    get_city_context,
    get_city_profile,
    get_city_rules,
    list_cities,
)


@pytest.mark.parametrize(
    "lat, lng, city_id",
    [
        (28.6139, 77.2090, CityId.DELHI),
        (19.0760, 72.8777, CityId.MUMBAI),
        (12.9716, 77.5946, CityId.BANGALORE),
        (17.3850, 78.4867, CityId.HYDERABAD),
        (22.5726, 88.3639, CityId.KOLKATA),
        (18.5204, 73.8567, CityId.PUNE),
        (23.0225, 72.5714, CityId.AHMEDABAD),
        (0.0, 0.0, CityId.UNKNOWN),
        (51.5074, -0.1278, CityId.UNKNOWN),
    ],
)
def test_detect_city(lat, lng, city_id):
    assert detect_city_from_coordinates(lat, lng) == city_id


def test_unknown_city_gets_neutral_context():
    context = get_city_context(CityId.UNKNOWN)
    assert context.has_metro is False
    assert context.traffic_level == Tier.MEDIUM
    assert context.bus_frequency == Tier.MEDIUM
    assert context.auto_availability == Tier.HIGH
    assert get_city_profile(CityId.UNKNOWN) is None


def test_known_city_context():
    delhi = get_city_context(CityId.DELHI)
    assert delhi.has_metro and delhi.metro_operational
    assert delhi.traffic_level == Tier.EXTREME

    pune = get_city_context(CityId.PUNE)
    assert pune.has_metro is False


def test_city_rules_are_display_strings():
    assert get_city_rules(CityId.DELHI) == [
        "Odd-Even Rule: Private cars restricted on alternate days"
    ]
    assert len(get_city_rules(CityId.MUMBAI)) == 2
    assert get_city_rules(CityId.HYDERABAD) == []
    assert get_city_rules(CityId.UNKNOWN) == []


def test_list_cities():
    cities = list_cities()
    assert len(cities) == 8
    assert {city.id for city in cities} == set(CityId) - {CityId.UNKNOWN}
