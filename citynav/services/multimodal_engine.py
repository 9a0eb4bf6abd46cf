# citynav/services/multimodal_engine.py

from datetime import datetime, timezone
from time import perf_counter
from typing import List, Optional

from citynav.core.config import Settings
from citynav.core.exceptions import NoRoutesAvailableError
from citynav.core.logger import logger
from citynav.models.context import CityId, UserContext, WeatherContext
from citynav.models.modes import ModeConfig, TransportMode
from citynav.models.routing import (
    RankingResult,
    RouteRequest,
    RouteResponse,
)
from citynav.services.city_config import (
    detect_city_from_coordinates,
    get_city_context,
    get_city_rules,
)
from citynav.services.context_aware import (
    analyze_weather_context,
    apply_all_contexts,
    resolve_time_context,
)
from citynav.services.geo import haversine_distance_m
from citynav.services.mode_catalog import ModeCatalog, is_mode_available_in_city
from citynav.services.route_scoring import (
    apply_constraints,
    assign_route_types,
    score_and_rank_routes,
    select_top_routes,
)
from citynav.services.route_synthesis import RouteSynthesizer
from citynav.services.segmentation import determine_primary_mode, determine_strategy
from citynav.services.transit_stops import (
    OverpassTransitStopLocator,
    SyntheticTransitStopLocator,
    TransitStopLocator,
    lookup_endpoints,
)


class MultimodalEngine:
    """
    Multimodal route planner:
    - detects the city and applies its mode overrides
    - resolves nearby transit stops for both ends (concurrently)
    - synthesizes candidates for the trip's distance band
    - adjusts them for traffic, weather, the traveller and service hours
    - filters, scores, labels and trims the final list
    """

    def __init__(
        self,
        catalog: Optional[ModeCatalog] = None,
        locator: Optional[TransitStopLocator] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.catalog = catalog or ModeCatalog()
        self.locator = locator or SyntheticTransitStopLocator()
        self.settings = settings or Settings()
        logger.info(f"MultimodalEngine initialised with {type(self.locator).__name__}.")

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    async def calculate_routes(self, request: RouteRequest) -> RouteResponse:
        """
        Main entry point for the /routes endpoint. Never raises: unexpected
        failures are reported in `errors` with an empty route list.
        """
        t0 = perf_counter()
        city_id: Optional[CityId] = None
        primary_mode: Optional[TransportMode] = None

        try:
            # 1) City
            city_id = detect_city_from_coordinates(request.source.lat, request.source.lng)
            city = get_city_context(city_id)
            catalog = self.catalog.for_city(city_id)

            distance = haversine_distance_m(request.source, request.destination)
            primary_mode = determine_primary_mode(
                distance, city.has_metro, request.preferences.prefer_modes
            )
            logger.info(
                f"Received route request ({request.source.lat:.6f}, {request.source.lng:.6f}) -> "
                f"({request.destination.lat:.6f}, {request.destination.lng:.6f}): "
                f"{distance:.0f} m, band {determine_strategy(distance).value}, city {city_id.value}"
            )

            # 2) Transit stops
            source_lookup, destination_lookup = await lookup_endpoints(
                self.locator,
                request.source,
                request.destination,
                self.settings.TRANSIT_LOOKUP_RADIUS_M,
            )

            # 3) Candidates
            candidates = RouteSynthesizer(catalog).synthesize(
                request, source_lookup.hubs, destination_lookup.hubs
            )
            logger.info(f"Synthesized {len(candidates)} candidate routes")

            # 4) City mode availability
            candidates = [
                route
                for route in candidates
                if all(is_mode_available_in_city(city_id, mode) for mode in route.modes_used)
            ]

            # 5) Context
            adjustment = apply_all_contexts(
                candidates,
                city,
                time=resolve_time_context(request.context),
                weather=self._weather_context(request),
                user=self._user_context(request),
            )

            # 6) Constraints, scoring, labels
            routes = apply_constraints(adjustment.routes, request.preferences)
            routes = score_and_rank_routes(routes, request.preferences)
            routes = assign_route_types(routes)[: self.settings.MAX_ROUTES_RETURNED]
            logger.info(
                f"{len(routes)} routes after constraints and ranking "
                f"({len(adjustment.excluded)} excluded by availability)"
            )

            # 7) Response warnings
            warnings: List[str] = list(get_city_rules(city_id))
            warnings.extend(w for w in adjustment.exclusion_warnings if w not in warnings)

            elapsed_ms = (perf_counter() - t0) * 1000.0
            logger.info(f"Total route calculation time: {elapsed_ms:.2f} ms")

            return RouteResponse(
                request=request,
                routes=routes,
                calculated_at=datetime.now(timezone.utc),
                calculation_time_ms=elapsed_ms,
                city_id=city_id.value,
                primary_mode=primary_mode,
                warnings=warnings,
            )

        except Exception as exc:
            logger.exception(f"Route calculation failed: {exc}")
            return RouteResponse(
                request=request,
                routes=[],
                calculated_at=datetime.now(timezone.utc),
                calculation_time_ms=(perf_counter() - t0) * 1000.0,
                city_id=city_id.value if city_id else None,
                primary_mode=primary_mode,
                errors=[str(exc) or type(exc).__name__],
            )

    async def get_best_routes(self, request: RouteRequest) -> RankingResult:
        response = await self.calculate_routes(request)
        if not response.routes:
            raise NoRoutesAvailableError(
                "; ".join(response.errors) or "No routes available for this journey"
            )
        return select_top_routes(response.routes)

    def get_mode_config(self, mode: TransportMode) -> ModeConfig:
        return self.catalog.get(mode)

    def update_mode_config(self, mode: TransportMode, **fields) -> ModeConfig:
        return self.catalog.update_mode_config(mode, **fields)

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _weather_context(self, request: RouteRequest) -> Optional[WeatherContext]:
        context = request.context
        if context.weather_condition is None:
            return None
        temperature = context.temperature_c
        if temperature is None:
            temperature = self.settings.DEFAULT_TEMPERATURE_C
        return analyze_weather_context(context.weather_condition, temperature)

    def _user_context(self, request: RouteRequest) -> Optional[UserContext]:
        user = request.user
        if not request.preferences.accessibility_mode:
            return user
        if user is None:
            return UserContext(needs_accessibility=True)
        return user.model_copy(update={"needs_accessibility": True})


def create_engine(settings: Settings) -> MultimodalEngine:
    """
    Engine wired from settings: live Overpass lookups or synthetic stops.
    """
    if settings.USE_LIVE_TRANSIT_LOOKUP:
        locator: TransitStopLocator = OverpassTransitStopLocator(
            url=settings.OVERPASS_URL,
            timeout_s=settings.TRANSIT_LOOKUP_TIMEOUT_S,
        )
    else:
        locator = SyntheticTransitStopLocator()
    return MultimodalEngine(catalog=ModeCatalog(), locator=locator, settings=settings)

