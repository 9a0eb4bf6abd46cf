# citynav/services/segmentation.py
"""
Distance banding and first/last-mile heuristics.

The band of a trip decides which synthesis strategies run. First/last-mile
legs and transfer points are estimated here when no stop data pins them down.
"""
from enum import Enum
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict

from citynav.models.modes import TransportMode
from citynav.models.routing import Location
from citynav.models.transit import StopType
from citynav.services.geo import destination_point


class DistanceBand(str, Enum):
    ULTRA_SHORT = "ULTRA_SHORT"
    SHORT = "SHORT"
    MEDIUM = "MEDIUM"
    LONG = "LONG"
    VERY_LONG = "VERY_LONG"


# Upper bounds (exclusive), metres
ULTRA_SHORT_MAX_M = 500.0
SHORT_MAX_M = 2_000.0
MEDIUM_MAX_M = 10_000.0
LONG_MAX_M = 20_000.0

# Canonical first/last-mile leg lengths, metres
WALK_PREFERRED_M = 500.0
WALK_ACCEPTABLE_M = 1_000.0
AUTO_SHORT_M = 2_000.0
BUS_SHORT_M = 3_000.0

# Below this budget the last mile is walked
LOW_BUDGET = 100.0

TRANSFER_BEARING_DEG = 45.0

WAIT_TIME_MIN = {
    TransportMode.WALK: 0,
    TransportMode.METRO: 4,
    TransportMode.BUS: 5,
    TransportMode.AUTO: 2,
    TransportMode.CAB: 3,
    TransportMode.BIKE: 0,
}

TRANSFER_DURATION_MIN = {
    TransportMode.WALK: 1,
    TransportMode.METRO: 4,  # includes walking to the platform
    TransportMode.BUS: 3,
    TransportMode.AUTO: 2,
    TransportMode.CAB: 2,
    TransportMode.BIKE: 1,
}

# Adjacent pairs that make no sense; a cab leg is taken end-to-end
_INCOMPATIBLE_PAIRS = {
    frozenset({TransportMode.CAB, TransportMode.BUS}),
    frozenset({TransportMode.CAB, TransportMode.METRO}),
    frozenset({TransportMode.CAB, TransportMode.AUTO}),
    frozenset({TransportMode.CAB, TransportMode.WALK}),
    frozenset({TransportMode.BUS, TransportMode.AUTO}),
}


class TransferPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    location: Location
    type: Optional[StopType] = None  # None for a virtual point at the trip endpoint
    estimated_wait_time_min: int
    transfer_duration_min: int


class MileLeg(BaseModel):
    """
    A first- or last-mile leg: how to get between an endpoint and the main mode.
    """
    model_config = ConfigDict(frozen=True)

    mode: TransportMode
    distance_m: float
    transfer_point: TransferPoint


def determine_strategy(distance_m: float) -> DistanceBand:
    if distance_m < ULTRA_SHORT_MAX_M:
        return DistanceBand.ULTRA_SHORT
    if distance_m < SHORT_MAX_M:
        return DistanceBand.SHORT
    if distance_m < MEDIUM_MAX_M:
        return DistanceBand.MEDIUM
    if distance_m < LONG_MAX_M:
        return DistanceBand.LONG
    return DistanceBand.VERY_LONG


def estimate_transfer_point(
    origin: Location,
    mode: TransportMode,
    distance_m: float,
) -> TransferPoint:
    """
    Placeholder transfer location `distance_m` away from `origin` at a fixed
    north-east bearing. Not a real stop: real stops come from the transit
    stop locator.
    """
    location = destination_point(origin, TRANSFER_BEARING_DEG, distance_m, name="Transfer Point")
    return TransferPoint(
        location=location,
        type=StopType.BUS_STOP if mode == TransportMode.WALK else StopType.METRO_STATION,
        estimated_wait_time_min=WAIT_TIME_MIN.get(mode, 0),
        transfer_duration_min=TRANSFER_DURATION_MIN.get(mode, 3),
    )


def _leg(origin: Location, mode: TransportMode, distance_m: float) -> MileLeg:
    return MileLeg(
        mode=mode,
        distance_m=distance_m,
        transfer_point=estimate_transfer_point(origin, mode, distance_m),
    )


def calculate_first_mile(
    source: Location,
    total_distance_m: float,
    preferred_modes: Iterable[TransportMode] = (),
) -> MileLeg:
    preferred = set(preferred_modes)

    # Short trips have no first mile: a zero-length virtual transfer at the source
    if total_distance_m < SHORT_MAX_M:
        return MileLeg(
            mode=TransportMode.WALK,
            distance_m=0.0,
            transfer_point=TransferPoint(
                location=source,
                type=None,
                estimated_wait_time_min=0,
                transfer_duration_min=0,
            ),
        )

    if TransportMode.AUTO in preferred:
        return _leg(source, TransportMode.AUTO, AUTO_SHORT_M)

    if TransportMode.BUS in preferred:
        return _leg(source, TransportMode.BUS, BUS_SHORT_M)

    if total_distance_m < MEDIUM_MAX_M:
        # comfortable walk to the station
        return _leg(source, TransportMode.WALK, WALK_PREFERRED_M)

    return _leg(source, TransportMode.AUTO, AUTO_SHORT_M)


def calculate_last_mile(
    destination: Location,
    total_distance_m: float,
    budget: float = float("inf"),
) -> MileLeg:
    if budget < LOW_BUDGET:
        return _leg(destination, TransportMode.WALK, WALK_ACCEPTABLE_M)

    if total_distance_m > LONG_MAX_M:
        return _leg(destination, TransportMode.AUTO, AUTO_SHORT_M)

    return _leg(destination, TransportMode.WALK, WALK_PREFERRED_M)


def allocate_distances(total_distance_m: float, segment_count: int) -> List[float]:
    """
    Fixed split of a trip into first mile / main / last mile.

    1 -> [100%], 2 -> [15%, 85%], 3 -> [15%, 70%, 15%].
    """
    if segment_count == 1:
        return [total_distance_m]
    if segment_count == 2:
        return [total_distance_m * 0.15, total_distance_m * 0.85]
    if segment_count == 3:
        return [total_distance_m * 0.15, total_distance_m * 0.70, total_distance_m * 0.15]
    raise ValueError(f"segment_count must be 1, 2 or 3, got {segment_count}")


def determine_primary_mode(
    distance_m: float,
    city_has_metro: bool = True,
    preferred_modes: Iterable[TransportMode] = (),
) -> TransportMode:
    """
    The single mode that would carry most of a trip of this length.
    """
    if distance_m > LONG_MAX_M * 2:
        return TransportMode.CAB
    if distance_m > MEDIUM_MAX_M:
        if city_has_metro:
            return TransportMode.METRO
        return TransportMode.CAB if TransportMode.CAB in set(preferred_modes) else TransportMode.BUS
    if distance_m > SHORT_MAX_M:
        return TransportMode.AUTO
    return TransportMode.WALK


def can_combine_modes(mode1: TransportMode, mode2: TransportMode) -> bool:
    return frozenset({mode1, mode2}) not in _INCOMPATIBLE_PAIRS
