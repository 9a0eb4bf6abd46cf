# tests/test_engine.py
import asyncio
from datetime import datetime

import pytest

from citynav.core.config import Settings
from citynav.core.exceptions import NoRoutesAvailableError
from citynav.models.context import WeatherCondition
from citynav.models.modes import Level, TransportMode
from citynav.models.routing import (
    Location,
    RouteContext,
    RoutePreferences,
    RouteRequest,
)
from citynav.services.geo import destination_point
from citynav.services.mode_catalog import ModeCatalog
from citynav.services.multimodal_engine import MultimodalEngine, create_engine
from citynav.services.route_math import count_transfers, total_duration
from citynav.services.transit_stops import (
    OverpassTransitStopLocator,
    SyntheticTransitStopLocator,
)

ODD_EVEN = "Odd-Even Rule: Private cars restricted on alternate days"


class _BrokenLocator:
    async def find_nearby_transit_stops(self, location, radius_m):
        raise RuntimeError("overpass unreachable")


def _medium_request(source: Location, **kwargs) -> RouteRequest:
    return RouteRequest(
        source=source,
        destination=destination_point(source, 0.0, 5000, name="Destination"),
        **kwargs,
    )


def test_ultra_short_trip_in_delhi(engine, delhi_source, delhi_nearby):
    response = asyncio.run(
        engine.calculate_routes(RouteRequest(source=delhi_source, destination=delhi_nearby))
    )

    assert response.errors == []
    assert response.city_id == "delhi"
    assert response.primary_mode == TransportMode.WALK
    assert {tuple(r.modes_used) for r in response.routes} == {
        (TransportMode.WALK,),
        (TransportMode.AUTO,),
    }
    assert ODD_EVEN in response.warnings
    assert all(r.type is not None and r.score is not None for r in response.routes)
    assert response.calculation_time_ms >= 0


def test_medium_trip_offers_metro(engine, delhi_source):
    response = asyncio.run(engine.calculate_routes(_medium_request(delhi_source)))

    assert 0 < len(response.routes) <= 4
    assert any(TransportMode.METRO in r.modes_used for r in response.routes)
    scores = [r.score for r in response.routes]
    assert scores == sorted(scores, reverse=True)
    for route in response.routes:
        assert route.total_duration_min == total_duration(route.segments)
        assert route.transfer_count == count_transfers(route.segments)


def test_route_limit_comes_from_settings(delhi_source):
    engine = MultimodalEngine(settings=Settings(MAX_ROUTES_RETURNED=2))
    response = asyncio.run(engine.calculate_routes(_medium_request(delhi_source)))
    assert len(response.routes) == 2


def test_autos_are_dropped_in_mumbai(engine):
    request = RouteRequest(
        source=Location(lat=19.076, lng=72.8777),
        destination=Location(lat=19.078, lng=72.880),
    )
    response = asyncio.run(engine.calculate_routes(request))

    assert response.city_id == "mumbai"
    assert [r.modes_used for r in response.routes] == [[TransportMode.WALK]]
    assert len(response.warnings) == 2


def test_late_night_excludes_metro_and_bus(engine, delhi_source):
    request = _medium_request(
        delhi_source, context=RouteContext(time_of_day=datetime(2024, 1, 15, 23, 30))
    )
    response = asyncio.run(engine.calculate_routes(request))

    assert [r.modes_used for r in response.routes] == [[TransportMode.AUTO]]
    assert "metro: Metro closed (operates 6 AM - 11 PM)" in response.warnings
    assert "bus: Limited bus service at this time" in response.warnings
    assert response.errors == []


def test_storm_reaches_walking_routes(engine, delhi_source, delhi_nearby):
    request = RouteRequest(
        source=delhi_source,
        destination=delhi_nearby,
        context=RouteContext(weather_condition=WeatherCondition.STORM),
    )
    response = asyncio.run(engine.calculate_routes(request))
    walk = next(r for r in response.routes if r.modes_used == [TransportMode.WALK])

    assert walk.comfort_level == Level.LOW
    assert any("storm" in w for w in walk.warnings)


def test_max_cost_filters_the_response(engine, delhi_source):
    request = _medium_request(delhi_source, preferences=RoutePreferences(max_cost=30))
    response = asyncio.run(engine.calculate_routes(request))

    assert response.routes
    assert all(r.total_cost <= 30 for r in response.routes)


def test_failed_transit_lookup_only_costs_transit_routes(delhi_source):
    engine = MultimodalEngine(locator=_BrokenLocator())
    response = asyncio.run(engine.calculate_routes(_medium_request(delhi_source)))

    assert response.errors == []
    assert [r.modes_used for r in response.routes] == [[TransportMode.AUTO]]


def test_unexpected_failure_becomes_an_error(delhi_source, delhi_nearby):
    engine = MultimodalEngine(catalog=ModeCatalog({}))
    response = asyncio.run(
        engine.calculate_routes(RouteRequest(source=delhi_source, destination=delhi_nearby))
    )

    assert response.routes == []
    assert len(response.errors) == 1
    assert response.city_id == "delhi"


def test_best_routes(engine, delhi_source):
    best = asyncio.run(engine.get_best_routes(_medium_request(delhi_source)))

    assert best.fastest.total_duration_min <= best.cheapest.total_duration_min
    assert best.cheapest.total_cost <= best.fastest.total_cost


def test_best_routes_without_routes_raises(delhi_source, delhi_nearby):
    engine = MultimodalEngine(catalog=ModeCatalog({}))
    with pytest.raises(NoRoutesAvailableError):
        asyncio.run(
            engine.get_best_routes(RouteRequest(source=delhi_source, destination=delhi_nearby))
        )


def test_mode_config_is_per_engine(engine):
    engine.update_mode_config(TransportMode.AUTO, base_fare=30)

    assert engine.get_mode_config(TransportMode.AUTO).base_fare == 30
    assert MultimodalEngine().get_mode_config(TransportMode.AUTO).base_fare == 20


def test_accessibility_preference_becomes_user_context(engine, delhi_source, delhi_nearby):
    request = RouteRequest(
        source=delhi_source,
        destination=delhi_nearby,
        preferences=RoutePreferences(accessibility_mode=True),
    )
    assert engine._user_context(request).needs_accessibility
    assert engine._user_context(RouteRequest(source=delhi_source, destination=delhi_nearby)) is None


def test_hot_weather_without_temperature_uses_default(engine, delhi_source, delhi_nearby):
    request = RouteRequest(
        source=delhi_source,
        destination=delhi_nearby,
        context=RouteContext(weather_condition=WeatherCondition.HOT),
    )
    assert engine._weather_context(request).temperature_c == 35.0


def test_create_engine_picks_locator():
    assert isinstance(create_engine(Settings()).locator, SyntheticTransitStopLocator)
    live = create_engine(Settings(USE_LIVE_TRANSIT_LOOKUP=True, TRANSIT_LOOKUP_TIMEOUT_S=3))
    assert isinstance(live.locator, OverpassTransitStopLocator)
    assert live.locator.timeout_s == 3
