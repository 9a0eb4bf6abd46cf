# tests/test_segmentation.py
import pytest

from citynav.models.modes import TransportMode
from citynav.models.transit import StopType
from citynav.services.geo import haversine_distance_m
from citynav.services.segmentation import (
    DistanceBand,
    allocate_distances,
    calculate_first_mile,
    calculate_last_mile,
    can_combine_modes,
    determine_primary_mode,
    determine_strategy,
    estimate_transfer_point,
)


@pytest.mark.parametrize(
    "distance, band",
    [
        (0, DistanceBand.ULTRA_SHORT),
        (499.9, DistanceBand.ULTRA_SHORT),
        (500, DistanceBand.SHORT),
        (1999, DistanceBand.SHORT),
        (2000, DistanceBand.MEDIUM),
        (9999, DistanceBand.MEDIUM),
        (10000, DistanceBand.LONG),
        (19999, DistanceBand.LONG),
        (20000, DistanceBand.VERY_LONG),
        (150000, DistanceBand.VERY_LONG),
    ],
)
def test_distance_bands(distance, band):
    assert determine_strategy(distance) == band


def test_short_trip_has_virtual_first_mile(delhi_source):
    leg = calculate_first_mile(delhi_source, 1500)
    assert leg.distance_m == 0
    assert leg.transfer_point.location == delhi_source
    assert leg.transfer_point.type is None
    assert leg.transfer_point.estimated_wait_time_min == 0


def test_first_mile_without_preferences(delhi_source):
    medium = calculate_first_mile(delhi_source, 5000)
    assert (medium.mode, medium.distance_m) == (TransportMode.WALK, 500)

    long = calculate_first_mile(delhi_source, 15000)
    assert (long.mode, long.distance_m) == (TransportMode.AUTO, 2000)


def test_first_mile_follows_preferred_mode(delhi_source):
    bus = calculate_first_mile(delhi_source, 5000, [TransportMode.BUS])
    assert (bus.mode, bus.distance_m) == (TransportMode.BUS, 3000)

    auto = calculate_first_mile(delhi_source, 25000, [TransportMode.BUS, TransportMode.AUTO])
    assert (auto.mode, auto.distance_m) == (TransportMode.AUTO, 2000)


def test_last_mile(delhi_source):
    assert calculate_last_mile(delhi_source, 25000, budget=50).mode == TransportMode.WALK
    assert calculate_last_mile(delhi_source, 25000, budget=50).distance_m == 1000

    far = calculate_last_mile(delhi_source, 25000)
    assert (far.mode, far.distance_m) == (TransportMode.AUTO, 2000)

    near = calculate_last_mile(delhi_source, 5000)
    assert (near.mode, near.distance_m) == (TransportMode.WALK, 500)


def test_estimated_transfer_point(delhi_source):
    point = estimate_transfer_point(delhi_source, TransportMode.METRO, 1000)
    assert haversine_distance_m(delhi_source, point.location) == pytest.approx(1000, rel=1e-6)
    assert point.type == StopType.METRO_STATION
    assert point.estimated_wait_time_min == 4
    assert point.transfer_duration_min == 4

    walk = estimate_transfer_point(delhi_source, TransportMode.WALK, 500)
    assert walk.type == StopType.BUS_STOP
    assert walk.estimated_wait_time_min == 0
    assert walk.transfer_duration_min == 1


def test_allocate_distances():
    assert allocate_distances(10000, 1) == [10000]
    assert allocate_distances(10000, 2) == pytest.approx([1500, 8500])
    assert allocate_distances(10000, 3) == pytest.approx([1500, 7000, 1500])
    assert sum(allocate_distances(12345, 3)) == pytest.approx(12345)

    with pytest.raises(ValueError):
        allocate_distances(10000, 4)


@pytest.mark.parametrize(
    "first, second, allowed",
    [
        (TransportMode.WALK, TransportMode.METRO, True),
        (TransportMode.AUTO, TransportMode.METRO, True),
        (TransportMode.BUS, TransportMode.METRO, True),
        (TransportMode.CAB, TransportMode.WALK, False),
        (TransportMode.METRO, TransportMode.CAB, False),
        (TransportMode.BUS, TransportMode.AUTO, False),
        (TransportMode.AUTO, TransportMode.BUS, False),
    ],
)
def test_can_combine_modes(first, second, allowed):
    assert can_combine_modes(first, second) is allowed


def test_primary_mode():
    assert determine_primary_mode(50_000) == TransportMode.CAB
    assert determine_primary_mode(15_000, city_has_metro=True) == TransportMode.METRO
    assert determine_primary_mode(15_000, city_has_metro=False) == TransportMode.BUS
    assert (
        determine_primary_mode(15_000, city_has_metro=False, preferred_modes=[TransportMode.CAB])
        == TransportMode.CAB
    )
    assert determine_primary_mode(5_000) == TransportMode.AUTO
    assert determine_primary_mode(1_000) == TransportMode.WALK
