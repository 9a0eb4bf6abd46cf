# citynav/services/context_aware.py
"""
Context-aware adjustments of candidate routes.

Every adjustment is a pure function route -> route. `apply_all_contexts`
composes them in a fixed order:

    traffic -> weather -> user -> wait times -> availability filter

Wait times depend on the final peak/night classification, and the
availability filter must see the warnings added by earlier stages.
"""
from datetime import datetime
from functools import partial
from typing import Callable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from citynav.core.logger import logger
from citynav.models.context import (
    DEFAULT_TIME_CONTEXT,
    CityContext,
    Tier,
    TimeContext,
    TrafficContext,
    TrafficLevel,
    UserContext,
    WeatherCondition,
    WeatherContext,
)
from citynav.models.modes import ROAD_MODES, Level, TransportMode
from citynav.models.routing import MultimodalRoute, RouteContext
from citynav.services.route_math import (
    round_half_up,
    walking_distance_m,
    with_segments,
    with_warnings,
)

RouteAdjustment = Callable[[MultimodalRoute], MultimodalRoute]

METRO_OPENS_HOUR = 6
METRO_CLOSES_HOUR = 23


class ModeAvailability(BaseModel):
    model_config = ConfigDict(frozen=True)

    available: bool
    reason: Optional[str] = None


class ContextAdjustment(BaseModel):
    """
    Routes that survived the availability filter, plus the ones it dropped
    (with their exclusion warnings attached).
    """
    routes: List[MultimodalRoute]
    excluded: List[MultimodalRoute]
    exclusion_warnings: List[str]
    time: TimeContext
    traffic: TrafficContext


# ---------------------------------------------------------------------- #
# Context analysis
# ---------------------------------------------------------------------- #

def analyze_time_context(when: datetime, is_weekend: Optional[bool] = None) -> TimeContext:
    """
    Classify a departure time. Peak hours are weekday 07-10 and 17-21
    (inclusive); night is 22-06 (inclusive, across midnight).
    """
    hour = when.hour
    day_of_week = when.weekday()
    weekend = day_of_week >= 5 if is_weekend is None else is_weekend

    is_peak = not weekend and (7 <= hour <= 10 or 17 <= hour <= 21)
    is_night = hour >= 22 or hour <= 6

    return TimeContext(
        hour=hour,
        day_of_week=day_of_week,
        is_weekend=weekend,
        is_peak_hour=is_peak,
        is_night_time=is_night,
    )


def resolve_time_context(context: RouteContext) -> TimeContext:
    if context.time_of_day is not None:
        return analyze_time_context(context.time_of_day, context.is_weekend)
    if context.is_weekend:
        return DEFAULT_TIME_CONTEXT.model_copy(update={"is_weekend": True})
    return DEFAULT_TIME_CONTEXT


def determine_traffic_context(time: TimeContext, city: CityContext) -> TrafficContext:
    if time.is_peak_hour:
        if city.traffic_level == Tier.EXTREME:
            return TrafficContext(level=TrafficLevel.EXTREME, multiplier=2.0)
        if city.traffic_level == Tier.VERY_HIGH:
            return TrafficContext(level=TrafficLevel.HIGH, multiplier=1.7)
        return TrafficContext(level=TrafficLevel.HIGH, multiplier=1.5)
    if time.is_night_time:
        return TrafficContext(level=TrafficLevel.LOW, multiplier=0.7)
    if time.is_weekend:
        return TrafficContext(level=TrafficLevel.MEDIUM, multiplier=1.2)
    return TrafficContext(level=TrafficLevel.MEDIUM, multiplier=1.0)


def analyze_weather_context(
    condition: WeatherCondition,
    temperature_c: Optional[float] = None,
) -> WeatherContext:
    rainfall = 0.0
    if condition == WeatherCondition.STORM:
        impact = Tier.HIGH
        rainfall = 50.0
    elif condition == WeatherCondition.RAIN:
        impact = Tier.MEDIUM
        rainfall = 10.0
    elif condition == WeatherCondition.HOT:
        impact = Tier.HIGH if temperature_c is not None and temperature_c > 40 else Tier.MEDIUM
    else:
        impact = Tier.LOW

    return WeatherContext(
        condition=condition,
        temperature_c=25.0 if temperature_c is None else temperature_c,
        rainfall_mm_h=rainfall,
        impact_level=impact,
    )


# ---------------------------------------------------------------------- #
# Route adjustments
# ---------------------------------------------------------------------- #

def adjust_for_traffic(route: MultimodalRoute, traffic: TrafficContext) -> MultimodalRoute:
    affected = set(traffic.affected_modes)
    segments = [
        seg.model_copy(update={"duration_min": round_half_up(seg.duration_min * traffic.multiplier)})
        if seg.mode in affected
        else seg
        for seg in route.segments
    ]
    adjusted = with_segments(route, segments)

    if traffic.level in (TrafficLevel.HIGH, TrafficLevel.EXTREME):
        increase = round_half_up((traffic.multiplier - 1) * 100)
        adjusted = with_warnings(
            adjusted,
            f"Heavy traffic expected. Journey time may increase by {increase}%.",
        )
    return adjusted


def adjust_for_weather(route: MultimodalRoute, weather: WeatherContext) -> MultimodalRoute:
    segments = list(route.segments)
    warning: Optional[str] = None
    comfort = route.comfort_level
    has_walking = TransportMode.WALK in route.modes_used

    if weather.condition in (WeatherCondition.RAIN, WeatherCondition.STORM):
        segments = [
            seg.model_copy(update={"duration_min": round_half_up(seg.duration_min * 1.3)})
            if seg.mode == TransportMode.WALK
            else seg.model_copy(update={"duration_min": round_half_up(seg.duration_min * 1.2)})
            if seg.mode in ROAD_MODES
            else seg
            for seg in segments
        ]
        if weather.condition == WeatherCondition.STORM:
            warning = "Heavy rain/storm. Consider delaying travel or choosing covered transport."
        else:
            warning = "Light rain expected. Carry an umbrella."
        if has_walking:
            comfort = Level.LOW

    elif weather.condition == WeatherCondition.HOT:
        segments = [
            seg.model_copy(update={"duration_min": round_half_up(seg.duration_min * 1.4)})
            if seg.mode == TransportMode.WALK and seg.distance_m > 500
            else seg
            for seg in segments
        ]
        if weather.temperature_c > 40:
            warning = "Extreme heat. Minimize walking and stay hydrated."
            if has_walking:
                comfort = Level.LOW

    adjusted = with_segments(route, segments).model_copy(update={"comfort_level": comfort})
    if warning:
        adjusted = with_warnings(adjusted, warning)
    return adjusted


def adjust_for_user_context(route: MultimodalRoute, user: UserContext) -> MultimodalRoute:
    """
    Scale the route's score for the traveller's circumstances. Durations are untouched.
    """
    factor = 1.0
    warnings: List[str] = []
    modes = set(route.modes_used)
    walked = walking_distance_m(route)

    if user.needs_accessibility:
        if route.transfer_count > 1:
            factor *= 0.5
            warnings.append(
                "Route involves multiple transfers. May be challenging with accessibility needs."
            )
        if TransportMode.METRO not in modes and TransportMode.CAB not in modes:
            factor *= 0.8

    if user.carrying_luggage:
        if walked > 500:
            factor *= 0.7
            warnings.append("Involves significant walking with luggage. Consider cab or auto.")
        if route.transfer_count > 0:
            factor *= 0.8

    if user.traveling_with_children:
        factor *= 1.2 if route.transfer_count == 0 else 0.7
        if TransportMode.CAB in modes or TransportMode.METRO in modes:
            factor *= 1.1

    if user.fitness_level == Level.LOW and walked > 500:
        factor *= 0.6
        warnings.append("Route involves walking. May be tiring for low fitness levels.")

    if user.budget_level == Level.LOW:
        if route.total_cost > 100:
            factor *= 0.7
            warnings.append("Route may be expensive for budget travelers.")
        elif route.total_cost < 50:
            factor *= 1.2

    adjusted = route.model_copy(
        update={
            "score": (route.score or 0.0) * factor,
            "score_factor": route.score_factor * factor,
        }
    )
    return with_warnings(adjusted, *warnings)


def adjust_wait_times(route: MultimodalRoute, time: TimeContext) -> MultimodalRoute:
    """
    Re-derive waits at the start of metro/bus legs from service frequency.
    """
    def wait_for(mode: TransportMode, current: Optional[int]) -> Optional[int]:
        if time.is_peak_hour:
            if mode == TransportMode.METRO:
                return 3
            if mode == TransportMode.BUS:
                return 7
        elif time.is_night_time:
            if mode == TransportMode.BUS:
                return 15
        elif time.is_weekend:
            if mode == TransportMode.BUS:
                return 8
        return current

    segments = [
        seg.model_copy(update={"wait_time_min": wait_for(seg.mode, seg.wait_time_min)})
        for seg in route.segments
    ]
    return with_segments(route, segments)


def is_mode_available(mode: TransportMode, time: TimeContext, city: CityContext) -> ModeAvailability:
    if mode == TransportMode.METRO:
        if not city.metro_operational:
            return ModeAvailability(available=False, reason="Metro not operational in this city")
        if time.hour < METRO_OPENS_HOUR or time.hour >= METRO_CLOSES_HOUR:
            return ModeAvailability(available=False, reason="Metro closed (operates 6 AM - 11 PM)")

    if mode == TransportMode.BUS:
        if time.is_night_time and city.bus_frequency != Tier.VERY_HIGH:
            return ModeAvailability(available=False, reason="Limited bus service at this time")

    if mode == TransportMode.AUTO:
        if city.auto_availability == Tier.LOW:
            return ModeAvailability(available=False, reason="Auto-rickshaws limited in this area")

    return ModeAvailability(available=True)


def unavailable_reasons(route: MultimodalRoute, time: TimeContext, city: CityContext) -> List[str]:
    reasons = []
    for mode in route.modes_used:
        status = is_mode_available(mode, time, city)
        if not status.available:
            reasons.append(f"{mode.value}: {status.reason}")
    return reasons


def partition_by_availability(
    routes: List[MultimodalRoute],
    time: TimeContext,
    city: CityContext,
) -> Tuple[List[MultimodalRoute], List[MultimodalRoute]]:
    """
    Split routes into (available, excluded). Each excluded route carries one
    "<mode>: <reason>" warning per unavailable mode.
    """
    available: List[MultimodalRoute] = []
    excluded: List[MultimodalRoute] = []

    for route in routes:
        reasons = unavailable_reasons(route, time, city)
        if reasons:
            excluded.append(with_warnings(route, *reasons))
        else:
            available.append(route)

    return available, excluded


def apply_all_contexts(
    routes: List[MultimodalRoute],
    city: CityContext,
    time: Optional[TimeContext] = None,
    weather: Optional[WeatherContext] = None,
    user: Optional[UserContext] = None,
) -> ContextAdjustment:
    time = time or DEFAULT_TIME_CONTEXT
    traffic = determine_traffic_context(time, city)

    stages: List[RouteAdjustment] = [partial(adjust_for_traffic, traffic=traffic)]
    if weather is not None:
        stages.append(partial(adjust_for_weather, weather=weather))
    if user is not None:
        stages.append(partial(adjust_for_user_context, user=user))
    stages.append(partial(adjust_wait_times, time=time))

    adjusted = []
    for route in routes:
        for stage in stages:
            route = stage(route)
        adjusted.append(route)

    available, excluded = partition_by_availability(adjusted, time, city)

    exclusion_warnings: List[str] = []
    for route in excluded:
        for reason in unavailable_reasons(route, time, city):
            if reason not in exclusion_warnings:
                exclusion_warnings.append(reason)

    logger.info(
        f"Context applied (traffic {traffic.level.value} x{traffic.multiplier}, "
        f"weather {weather.condition.value if weather else 'n/a'}): "
        f"{len(available)} available, {len(excluded)} excluded"
    )
    return ContextAdjustment(
        routes=available,
        excluded=excluded,
        exclusion_warnings=exclusion_warnings,
        time=time,
        traffic=traffic,
    )
