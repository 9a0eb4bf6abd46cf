# tests/conftest.py
import os
import sys

import pytest

# Add the project root directory to sys.path so that "import citynav" works
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from citynav.core.config import Settings  # noqa: E402
from citynav.models.modes import Level, TransportMode  # noqa: E402
from citynav.models.routing import Location, MultimodalRoute, RouteSegment  # noqa: E402
from citynav.services.mode_catalog import ModeCatalog  # noqa: E402
from citynav.services.multimodal_engine import MultimodalEngine  # noqa: E402
from citynav.services.route_math import (  # noqa: E402
    count_transfers,
    total_cost,
    total_duration,
    unique_modes,
)
from citynav.services.transit_stops import SyntheticTransitStopLocator  # noqa: E402


@pytest.fixture
def delhi_source() -> Location:
    return Location(lat=28.60, lng=77.20, name="India Gate")


@pytest.fixture
def delhi_nearby() -> Location:
    # ~370 m from delhi_source
    return Location(lat=28.602, lng=77.203, name="Nearby Market")


@pytest.fixture
def engine() -> MultimodalEngine:
    return MultimodalEngine(
        catalog=ModeCatalog(),
        locator=SyntheticTransitStopLocator(),
        settings=Settings(MAX_ROUTES_RETURNED=4, DEFAULT_TEMPERATURE_C=35.0),
    )


def build_segment(
    mode: TransportMode,
    distance_m: float = 1000.0,
    duration_min: int = 10,
    cost: int = 0,
    wait_time_min=None,
) -> RouteSegment:
    here = Location(lat=28.60, lng=77.20)
    return RouteSegment(
        id=f"seg-{mode.value}",
        mode=mode,
        from_location=here,
        to_location=here,
        distance_m=distance_m,
        duration_min=duration_min,
        cost=cost,
        instruction=f"Travel by {mode.value}",
        wait_time_min=wait_time_min,
    )


def build_route(segments, route_id: str = "route", **fields) -> MultimodalRoute:
    values = dict(
        id=route_id,
        name=route_id,
        segments=segments,
        total_distance_m=sum(seg.distance_m for seg in segments),
        total_duration_min=total_duration(segments),
        total_cost=total_cost(segments),
        transfer_count=count_transfers(segments),
        modes_used=unique_modes(segments),
        reliability_score=80,
        carbon_footprint=Level.MEDIUM,
        comfort_level=Level.MEDIUM,
    )
    values.update(fields)
    return MultimodalRoute(**values)


@pytest.fixture
def make_segment():
    return build_segment


@pytest.fixture
def make_route():
    return build_route
