# citynav/services/route_math.py
"""
Aggregate helpers shared by synthesis and every adjustment stage.

Any stage that touches segment durations or wait times rebuilds the route
through `with_segments`, which recomputes the totals from the segments.
"""
import math
from typing import Iterable, List, Sequence

from citynav.models.modes import TransportMode
from citynav.models.routing import MultimodalRoute, RouteSegment


def round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; fares and minutes round .5 up
    return int(math.floor(value + 0.5))


def total_duration(segments: Iterable[RouteSegment]) -> int:
    return sum(seg.duration_min + (seg.wait_time_min or 0) for seg in segments)


def total_cost(segments: Iterable[RouteSegment]) -> int:
    return sum(seg.cost for seg in segments)


def count_transfers(segments: Sequence[RouteSegment]) -> int:
    """
    Number of mode changes between consecutive segments.

    walk -> metro -> walk counts two transfers; a single-mode route counts none.
    """
    return sum(
        1 for prev, cur in zip(segments[:-1], segments[1:]) if prev.mode != cur.mode
    )


def unique_modes(segments: Iterable[RouteSegment]) -> List[TransportMode]:
    """
    Modes in order of first appearance.
    """
    seen: List[TransportMode] = []
    for seg in segments:
        if seg.mode not in seen:
            seen.append(seg.mode)
    return seen


def walking_distance_m(route: MultimodalRoute) -> float:
    return sum(seg.distance_m for seg in route.segments if seg.mode == TransportMode.WALK)


def with_segments(route: MultimodalRoute, segments: List[RouteSegment]) -> MultimodalRoute:
    """
    Copy of `route` carrying `segments`, with duration and cost totals recomputed.
    """
    return route.model_copy(
        update={
            "segments": segments,
            "total_duration_min": total_duration(segments),
            "total_cost": total_cost(segments),
        }
    )


def with_warnings(route: MultimodalRoute, *warnings: str) -> MultimodalRoute:
    if not warnings:
        return route
    return route.model_copy(update={"warnings": [*route.warnings, *warnings]})
