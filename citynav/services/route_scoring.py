# citynav/services/route_scoring.py
"""
Scoring, filtering, labelling and "best of" selection of candidate routes.

Scores are relative: time and cost are min-max normalised over whatever
candidate set is passed in, so the same route can score differently in a
different set.
"""
from typing import Dict, List, Optional, Sequence

from citynav.core.exceptions import NoRoutesAvailableError
from citynav.core.logger import logger
from citynav.models.modes import Level, TransportMode
from citynav.models.routing import (
    MultimodalRoute,
    Prioritize,
    RankingResult,
    RoutePreferences,
    RouteType,
    ScoringMetrics,
    ScoringWeights,
)
from citynav.services.route_math import walking_distance_m

DEFAULT_WEIGHTS = ScoringWeights(time=0.4, cost=0.3, comfort=0.2, reliability=0.1)

WEIGHT_PRESETS: Dict[Prioritize, ScoringWeights] = {
    Prioritize.TIME: ScoringWeights(time=0.6, cost=0.2, comfort=0.1, reliability=0.1),
    Prioritize.COST: ScoringWeights(time=0.2, cost=0.6, comfort=0.1, reliability=0.1),
    Prioritize.COMFORT: ScoringWeights(time=0.2, cost=0.1, comfort=0.5, reliability=0.2),
}

MODE_COMFORT: Dict[TransportMode, float] = {
    TransportMode.WALK: 0.6,
    TransportMode.BUS: 0.5,
    TransportMode.METRO: 0.8,
    TransportMode.AUTO: 0.6,
    TransportMode.CAB: 0.9,
    TransportMode.BIKE: 0.7,
}

SUSTAINABILITY: Dict[Level, float] = {
    Level.LOW: 1.0,
    Level.MEDIUM: 0.5,
    Level.HIGH: 0.2,
}

COMFORT_LABEL_THRESHOLD = 0.8
PREFERRED_MODE_BOOST = 1.2
DEFAULT_RELIABILITY = 50.0


def calculate_weights(prioritize: Optional[Prioritize] = None) -> ScoringWeights:
    if prioritize is None:
        return DEFAULT_WEIGHTS
    return WEIGHT_PRESETS.get(prioritize, DEFAULT_WEIGHTS)


def _normalise_lower_is_better(value: float, low: float, high: float) -> float:
    if high == low:
        return 1.0
    return 1.0 - (value - low) / (high - low)


def calculate_metrics(route: MultimodalRoute, candidates: Sequence[MultimodalRoute]) -> ScoringMetrics:
    durations = [r.total_duration_min for r in candidates] or [route.total_duration_min]
    costs = [r.total_cost for r in candidates] or [route.total_cost]
    max_transfers = max((r.transfer_count for r in candidates), default=route.transfer_count)

    time_score = _normalise_lower_is_better(route.total_duration_min, min(durations), max(durations))
    cost_score = _normalise_lower_is_better(route.total_cost, min(costs), max(costs))

    transfer_score = 1.0 if max_transfers == 0 else 1.0 - route.transfer_count / max_transfers
    mode_comforts = [MODE_COMFORT.get(mode, 0.5) for mode in route.modes_used]
    avg_comfort = sum(mode_comforts) / len(mode_comforts) if mode_comforts else 0.5
    walking_penalty = sum(
        0.1 * seg.distance_m / 1000.0
        for seg in route.segments
        if seg.mode == TransportMode.WALK and seg.distance_m > 500
    )
    comfort_score = min(1.0, max(0.0, 0.4 * transfer_score + 0.6 * avg_comfort - walking_penalty))

    reliability = route.reliability_score if route.reliability_score is not None else DEFAULT_RELIABILITY
    sustainability = SUSTAINABILITY[route.carbon_footprint or Level.MEDIUM]

    return ScoringMetrics(
        time_score=time_score,
        cost_score=cost_score,
        comfort_score=comfort_score,
        reliability_score=reliability / 100.0,
        sustainability_score=sustainability,
    )


def calculate_final_score(metrics: ScoringMetrics, weights: ScoringWeights) -> float:
    return (
        metrics.time_score * weights.time
        + metrics.cost_score * weights.cost
        + metrics.comfort_score * weights.comfort
        + metrics.reliability_score * weights.reliability
    )


def score_and_rank_routes(
    routes: List[MultimodalRoute],
    preferences: Optional[RoutePreferences] = None,
) -> List[MultimodalRoute]:
    """
    Score every route against the whole set and sort best first.

    The composite score is multiplied by the route's `score_factor`, which
    carries user-context and preferred-mode adjustments. Ties keep input order.
    """
    if not routes:
        return []

    weights = calculate_weights(preferences.prioritize if preferences else None)
    scored = [
        route.model_copy(
            update={
                "score": calculate_final_score(calculate_metrics(route, routes), weights)
                * route.score_factor
            }
        )
        for route in routes
    ]
    return sorted(scored, key=lambda r: r.score, reverse=True)


def apply_constraints(
    routes: List[MultimodalRoute],
    preferences: Optional[RoutePreferences] = None,
) -> List[MultimodalRoute]:
    if preferences is None:
        return list(routes)

    filtered = list(routes)
    if preferences.max_cost is not None:
        filtered = [r for r in filtered if r.total_cost <= preferences.max_cost]
    if preferences.max_transfers is not None:
        filtered = [r for r in filtered if r.transfer_count <= preferences.max_transfers]
    if preferences.avoid_modes:
        avoid = set(preferences.avoid_modes)
        filtered = [r for r in filtered if not avoid.intersection(r.modes_used)]
    if preferences.max_walking_distance_m is not None:
        filtered = [
            r for r in filtered if walking_distance_m(r) <= preferences.max_walking_distance_m
        ]

    if preferences.prefer_modes:
        prefer = set(preferences.prefer_modes)
        filtered = [
            _boost(r, PREFERRED_MODE_BOOST) if prefer.intersection(r.modes_used) else r
            for r in filtered
        ]

    if len(filtered) < len(routes):
        logger.debug(f"Constraints removed {len(routes) - len(filtered)} of {len(routes)} routes")
    return filtered


def _boost(route: MultimodalRoute, factor: float) -> MultimodalRoute:
    return route.model_copy(
        update={
            "score": route.score * factor if route.score is not None else None,
            "score_factor": route.score_factor * factor,
        }
    )


def assign_route_types(routes: List[MultimodalRoute]) -> List[MultimodalRoute]:
    """
    Label each route with exactly one RouteType.

    fastest (first minimum duration) > cheapest (first minimum cost) >
    comfort (no transfers, main mode comfort >= 0.8) > balanced.
    """
    if not routes:
        return []

    fastest_idx = min(range(len(routes)), key=lambda i: routes[i].total_duration_min)
    cheapest_idx = min(range(len(routes)), key=lambda i: routes[i].total_cost)

    labelled = []
    for idx, route in enumerate(routes):
        if idx == fastest_idx:
            route_type = RouteType.FASTEST
        elif idx == cheapest_idx:
            route_type = RouteType.CHEAPEST
        elif (
            route.transfer_count == 0
            and route.modes_used
            and MODE_COMFORT.get(route.modes_used[0], 0.0) >= COMFORT_LABEL_THRESHOLD
        ):
            route_type = RouteType.COMFORT
        else:
            route_type = RouteType.BALANCED
        labelled.append(route.model_copy(update={"type": route_type}))
    return labelled


def select_top_routes(routes: List[MultimodalRoute]) -> RankingResult:
    """
    Pick the best route per category from one candidate set.

    `recommended` always uses the default weights, whatever the request
    prioritised. A route may fill several slots.
    """
    if not routes:
        raise NoRoutesAvailableError("No routes available for selection")

    metrics = [calculate_metrics(route, routes) for route in routes]

    def best(key) -> MultimodalRoute:
        # max() keeps the first of equal keys
        return routes[max(range(len(routes)), key=key)]

    return RankingResult(
        fastest=min(routes, key=lambda r: r.total_duration_min),
        cheapest=min(routes, key=lambda r: r.total_cost),
        recommended=best(lambda i: calculate_final_score(metrics[i], DEFAULT_WEIGHTS)),
        comfort=best(lambda i: metrics[i].comfort_score),
        eco=best(lambda i: metrics[i].sustainability_score),
    )
