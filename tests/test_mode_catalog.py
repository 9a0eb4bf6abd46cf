# tests/test_mode_catalog.py
import pytest

from pydantic import ValidationError

from citynav.core.exceptions import InvalidModeConfigError, UnknownTransportModeError
from citynav.models.context import CityId
from citynav.models.modes import TransportMode
from citynav.services.mode_catalog import (
    DEFAULT_MODE_CONFIGS,
    ModeCatalog,
    apply_city_adjustments,
    get_default_config,
    is_mode_available_in_city,
    is_segment_feasible,
)


def test_every_mode_has_a_default_config():
    for mode in TransportMode:
        assert get_default_config(mode).mode == mode


@pytest.mark.parametrize(
    "mode, speed, base_fare, cost_per_km",
    [
        (TransportMode.WALK, 4.5, 0, None),
        (TransportMode.BUS, 15, 10, 2),
        (TransportMode.METRO, 35, 10, 3),
        (TransportMode.AUTO, 22, 20, 15),
        (TransportMode.CAB, 28, 50, 20),
        (TransportMode.BIKE, 12, 0, None),
    ],
)
def test_default_speeds_and_fares(mode, speed, base_fare, cost_per_km):
    config = get_default_config(mode)
    assert config.average_speed_kmh == speed
    assert config.base_fare == base_fare
    assert config.cost_per_km == cost_per_km


def test_city_adjustments_merge_onto_defaults():
    base = get_default_config(TransportMode.CAB)
    adjusted = apply_city_adjustments(CityId.MUMBAI, TransportMode.CAB, base)

    assert adjusted.base_fare == 60
    assert adjusted.cost_per_km == 22
    # untouched fields survive the merge
    assert adjusted.comfort_score == base.comfort_score
    assert adjusted.display_name == "Cab"


def test_city_without_override_returns_base_config():
    base = get_default_config(TransportMode.WALK)
    assert apply_city_adjustments(CityId.DELHI, TransportMode.WALK, base) is base
    assert apply_city_adjustments(CityId.UNKNOWN, TransportMode.WALK, base) is base


@pytest.mark.parametrize(
    "city_id, mode, available",
    [
        (CityId.DELHI, TransportMode.METRO, True),
        (CityId.PUNE, TransportMode.METRO, False),
        (CityId.MUMBAI, TransportMode.AUTO, False),
        (CityId.KOLKATA, TransportMode.AUTO, False),
        (CityId.BANGALORE, TransportMode.AUTO, True),
        (CityId.UNKNOWN, TransportMode.METRO, True),
    ],
)
def test_mode_availability_in_city(city_id, mode, available):
    assert is_mode_available_in_city(city_id, mode) is available


def test_segment_feasibility_uses_distance_bounds():
    walk = get_default_config(TransportMode.WALK)
    assert is_segment_feasible(TransportMode.WALK, 1500, walk)
    assert not is_segment_feasible(TransportMode.WALK, 2500, walk)
    # no max distance configured for cabs
    assert is_segment_feasible(TransportMode.CAB, 80_000, get_default_config(TransportMode.CAB))
    assert is_segment_feasible(TransportMode.AUTO, 50_000, None)


def test_segment_metrics_are_unrounded():
    duration, cost = ModeCatalog().segment_metrics(TransportMode.METRO, 10_000)
    assert duration == pytest.approx(10 / 35 * 60)
    assert cost == pytest.approx(40.0)


def test_update_mode_config_is_owned_by_the_catalog():
    catalog = ModeCatalog()
    updated = catalog.update_mode_config(TransportMode.BUS, base_fare=15)

    assert updated.base_fare == 15
    assert catalog.get(TransportMode.BUS).base_fare == 15
    assert catalog.get(TransportMode.BUS).average_speed_kmh == 15
    assert DEFAULT_MODE_CONFIGS[TransportMode.BUS].base_fare == 10
    assert ModeCatalog().get(TransportMode.BUS).base_fare == 10


def test_update_mode_config_rejects_unknown_fields():
    catalog = ModeCatalog()
    with pytest.raises(InvalidModeConfigError):
        catalog.update_mode_config(TransportMode.BUS, averge_speed_kmh=5)
    assert catalog.get(TransportMode.BUS).average_speed_kmh == 15


def test_update_mode_config_validates_values():
    catalog = ModeCatalog()
    with pytest.raises(ValidationError):
        catalog.update_mode_config(TransportMode.BUS, average_speed_kmh=0)
    assert catalog.get(TransportMode.BUS).average_speed_kmh == 15


def test_for_city_applies_overrides_without_touching_the_source():
    catalog = ModeCatalog()
    delhi = catalog.for_city(CityId.DELHI)

    assert delhi.get(TransportMode.BUS).average_speed_kmh == 12
    assert catalog.get(TransportMode.BUS).average_speed_kmh == 15


def test_unknown_mode_raises():
    catalog = ModeCatalog({})
    with pytest.raises(UnknownTransportModeError):
        catalog.get(TransportMode.WALK)
    with pytest.raises(KeyError):
        catalog.get(TransportMode.CAB)
