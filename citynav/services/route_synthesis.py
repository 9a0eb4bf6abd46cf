# citynav/services/route_synthesis.py
import uuid
from typing import Callable, List, Optional

from citynav.core.logger import logger
from citynav.models.modes import Level, TransportMode
from citynav.models.routing import Location, MultimodalRoute, RouteRequest, RouteSegment
from citynav.models.transit import NearbyTransitHubs, TransitStop
from citynav.services.geo import haversine_distance_m
from citynav.services.mode_catalog import ModeCatalog, is_segment_feasible
from citynav.services.route_math import (
    count_transfers,
    round_half_up,
    total_cost,
    total_duration,
    unique_modes,
)
from citynav.services.segmentation import (
    TRANSFER_DURATION_MIN,
    WAIT_TIME_MIN,
    WALK_ACCEPTABLE_M,
    DistanceBand,
    allocate_distances,
    calculate_first_mile,
    calculate_last_mile,
    can_combine_modes,
    determine_strategy,
    estimate_transfer_point,
)
from citynav.services.transit_stops import find_best_transit_stop

# Walking thresholds for stop feasibility, metres
BUS_STOP_WALK_M = 500.0
METRO_STATION_WALK_M = 800.0
METRO_STATION_RIDE_M = 2_000.0  # reached by auto on long trips

# Weight of cost against minutes in the pre-sort / seed score
PRESORT_COST_WEIGHT = 2.0

# Modes with a timetable, whose legs start with a wait
SCHEDULED_MODES = (TransportMode.BUS, TransportMode.METRO)


def presort_key(route: MultimodalRoute) -> float:
    return route.total_duration_min + route.total_cost * PRESORT_COST_WEIGHT


class RouteSynthesizer:
    """
    Builds raw candidate routes for a request.

    The distance band of source -> destination decides which strategies run.
    Transit strategies only produce a route when the resolved stop data has a
    stop of the right type within walking (or riding) distance of both ends;
    otherwise they are skipped without error.
    """

    def __init__(self, catalog: ModeCatalog) -> None:
        self.catalog = catalog

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def synthesize(
        self,
        request: RouteRequest,
        source_hubs: Optional[NearbyTransitHubs] = None,
        destination_hubs: Optional[NearbyTransitHubs] = None,
    ) -> List[MultimodalRoute]:
        source_hubs = source_hubs or NearbyTransitHubs()
        destination_hubs = destination_hubs or NearbyTransitHubs()

        distance = haversine_distance_m(request.source, request.destination)
        band = determine_strategy(distance)

        strategies: List[Callable[[], Optional[MultimodalRoute]]]
        if band == DistanceBand.ULTRA_SHORT:
            strategies = [
                lambda: self._walk_route(request, distance),
                lambda: self._auto_route(request, distance),
            ]
        elif band == DistanceBand.SHORT:
            strategies = [
                lambda: self._walk_route(request, distance),
                lambda: self._auto_route(request, distance),
                lambda: self._bus_route(request, distance, source_hubs, destination_hubs),
            ]
        elif band == DistanceBand.MEDIUM:
            strategies = [
                lambda: self._metro_route(request, distance, source_hubs, destination_hubs),
                lambda: self._bus_route(request, distance, source_hubs, destination_hubs),
                lambda: self._auto_route(request, distance),
                lambda: self._walk_metro_walk_route(request, distance, source_hubs, destination_hubs),
            ]
        elif band == DistanceBand.LONG:
            strategies = [
                lambda: self._metro_with_auto_route(request, distance, source_hubs, destination_hubs),
                lambda: self._cab_route(request, distance),
                lambda: self._bus_metro_bus_route(request, distance, source_hubs, destination_hubs),
                lambda: self._metro_bus_route(request, distance, source_hubs, destination_hubs),
            ]
        else:
            strategies = [
                lambda: self._cab_route(request, distance),
                lambda: self._metro_with_auto_route(request, distance, source_hubs, destination_hubs),
            ]

        routes = [route for route in (build() for build in strategies) if route is not None]
        routes.sort(key=presort_key)

        logger.info(
            f"Synthesized {len(routes)} candidates for {band.value} trip of {distance:.0f} m: "
            f"{[r.name for r in routes]}"
        )
        return routes

    # ------------------------------------------------------------------ #
    # Building blocks
    # ------------------------------------------------------------------ #

    def _segment(
        self,
        mode: TransportMode,
        from_location: Location,
        to_location: Location,
        distance: float,
        instruction: str,
        route_info: Optional[str] = None,
        route_number: Optional[str] = None,
    ) -> RouteSegment:
        duration, cost = self.catalog.segment_metrics(mode, distance)
        return RouteSegment(
            id=f"seg-{mode.value}-{uuid.uuid4().hex[:8]}",
            mode=mode,
            from_location=from_location,
            to_location=to_location,
            distance_m=distance,
            duration_min=round_half_up(duration),
            cost=round_half_up(cost),
            instruction=instruction,
            route_info=route_info,
            route_number=route_number,
            wait_time_min=WAIT_TIME_MIN[mode] if mode in SCHEDULED_MODES else None,
        )

    def _route(
        self,
        kind: str,
        name: str,
        segments: List[RouteSegment],
        distance: float,
        carbon: Level,
        comfort: Level,
        reliability: float,
        description: str,
    ) -> Optional[MultimodalRoute]:
        for prev, cur in zip(segments[:-1], segments[1:]):
            if not can_combine_modes(prev.mode, cur.mode):
                logger.debug(f"Skipping {name}: {prev.mode.value} cannot hand over to {cur.mode.value}")
                return None

        # Record the time needed to switch modes on each leg that starts with a transfer
        chained: List[RouteSegment] = [segments[0]]
        for prev, cur in zip(segments[:-1], segments[1:]):
            if prev.mode != cur.mode:
                cur = cur.model_copy(update={"transfer_time_min": TRANSFER_DURATION_MIN[prev.mode]})
            chained.append(cur)

        route = MultimodalRoute(
            id=f"route-{kind}-{uuid.uuid4().hex[:8]}",
            name=name,
            segments=chained,
            total_distance_m=distance,
            total_duration_min=total_duration(chained),
            total_cost=total_cost(chained),
            transfer_count=count_transfers(chained),
            modes_used=unique_modes(chained),
            reliability_score=reliability,
            carbon_footprint=carbon,
            comfort_level=comfort,
            description=description,
        )
        return route.model_copy(update={"score": presort_key(route)})

    def _direct_segment(self, request: RouteRequest, mode: TransportMode, distance: float, verb: str) -> Optional[RouteSegment]:
        if not is_segment_feasible(mode, distance, self.catalog.get(mode)):
            return None
        return self._segment(
            mode,
            request.source,
            request.destination,
            distance,
            f"{verb} from {_place(request.source, 'your location')} "
            f"to {_place(request.destination, 'destination')}",
        )

    # ------------------------------------------------------------------ #
    # Single-mode routes
    # ------------------------------------------------------------------ #

    def _walk_route(self, request: RouteRequest, distance: float) -> Optional[MultimodalRoute]:
        segment = self._direct_segment(request, TransportMode.WALK, distance, "Walk")
        if segment is None:
            return None
        return self._route(
            "walk", "Walk", [segment], distance,
            carbon=Level.LOW,
            comfort=Level.HIGH if distance < 1000 else Level.MEDIUM,
            reliability=100,
            description="Free and healthy option",
        )

    def _auto_route(self, request: RouteRequest, distance: float) -> Optional[MultimodalRoute]:
        segment = self._direct_segment(request, TransportMode.AUTO, distance, "Take auto-rickshaw")
        if segment is None:
            return None
        return self._route(
            "auto", "Auto-rickshaw", [segment], distance,
            carbon=Level.MEDIUM,
            comfort=Level.MEDIUM,
            reliability=70,
            description="Direct and convenient",
        )

    def _cab_route(self, request: RouteRequest, distance: float) -> Optional[MultimodalRoute]:
        segment = self._direct_segment(request, TransportMode.CAB, distance, "Take cab")
        if segment is None:
            return None
        return self._route(
            "cab", "Cab", [segment], distance,
            carbon=Level.HIGH,
            comfort=Level.HIGH,
            reliability=85,
            description="Fastest and most comfortable",
        )

    # ------------------------------------------------------------------ #
    # Transit routes anchored on real stops
    # ------------------------------------------------------------------ #

    def _stop_to_stop(
        self,
        request: RouteRequest,
        access_mode: TransportMode,
        main_mode: TransportMode,
        board: TransitStop,
        alight: TransitStop,
        line: str,
    ) -> List[RouteSegment]:
        """
        access leg -> main leg between two stops -> egress leg.
        """
        board_at = board.location.model_copy(update={"name": board.name})
        alight_at = alight.location.model_copy(update={"name": alight.name})

        access_distance = haversine_distance_m(request.source, board_at)
        main_distance = haversine_distance_m(board_at, alight_at)
        egress_distance = haversine_distance_m(alight_at, request.destination)

        access = self._segment(
            access_mode, request.source, board_at, access_distance,
            _access_instruction(access_mode, access_distance, board.name, self.catalog),
        )
        main = self._segment(
            main_mode, board_at, alight_at, main_distance,
            f"Board {line} at {board.name}, alight at {alight.name}",
            route_info=line,
            route_number=board.routes[0] if board.routes else None,
        )
        egress = self._segment(
            access_mode, alight_at, request.destination, egress_distance,
            _egress_instruction(access_mode, egress_distance, alight.name, request.destination, self.catalog),
        )
        return [access, main, egress]

    def _bus_route(
        self,
        request: RouteRequest,
        distance: float,
        source_hubs: NearbyTransitHubs,
        destination_hubs: NearbyTransitHubs,
    ) -> Optional[MultimodalRoute]:
        board = find_best_transit_stop(source_hubs.bus_stops, BUS_STOP_WALK_M)
        alight = find_best_transit_stop(destination_hubs.bus_stops, BUS_STOP_WALK_M)
        if board is None or alight is None:
            return None

        line = f"Bus {board.routes[0]}" if board.routes else "Bus"
        segments = self._stop_to_stop(request, TransportMode.WALK, TransportMode.BUS, board, alight, line)
        walked = segments[0].distance_m + segments[-1].distance_m
        return self._route(
            "bus", "Bus Route", segments, distance,
            carbon=Level.LOW,
            comfort=Level.MEDIUM,
            reliability=60,
            description=f"Take {line} with {walked:.0f}m walking",
        )

    def _metro_route(
        self,
        request: RouteRequest,
        distance: float,
        source_hubs: NearbyTransitHubs,
        destination_hubs: NearbyTransitHubs,
    ) -> Optional[MultimodalRoute]:
        board = find_best_transit_stop(source_hubs.metro_stations, METRO_STATION_WALK_M)
        alight = find_best_transit_stop(destination_hubs.metro_stations, METRO_STATION_WALK_M)
        if board is None or alight is None:
            return None

        line = board.routes[0] if board.routes else "Metro"
        segments = self._stop_to_stop(request, TransportMode.WALK, TransportMode.METRO, board, alight, line)
        walked = segments[0].distance_m + segments[-1].distance_m
        return self._route(
            "metro", f"{line} Metro", segments, distance,
            carbon=Level.LOW,
            comfort=Level.HIGH,
            reliability=90,
            description=f"Fast metro with {walked:.0f}m walking",
        )

    def _metro_with_auto_route(
        self,
        request: RouteRequest,
        distance: float,
        source_hubs: NearbyTransitHubs,
        destination_hubs: NearbyTransitHubs,
    ) -> Optional[MultimodalRoute]:
        board = find_best_transit_stop(source_hubs.metro_stations, METRO_STATION_RIDE_M)
        alight = find_best_transit_stop(destination_hubs.metro_stations, METRO_STATION_RIDE_M)
        if board is None or alight is None:
            return None

        line = board.routes[0] if board.routes else "Metro"
        segments = self._stop_to_stop(request, TransportMode.AUTO, TransportMode.METRO, board, alight, line)
        return self._route(
            "auto-metro-auto", f"{line} + Auto", segments, distance,
            carbon=Level.MEDIUM,
            comfort=Level.HIGH,
            reliability=80,
            description="Metro with auto for first and last mile",
        )

    # ------------------------------------------------------------------ #
    # Heuristic transit chains (no stop positions, estimated transfer points)
    # ------------------------------------------------------------------ #

    def _walk_metro_walk_route(
        self,
        request: RouteRequest,
        distance: float,
        source_hubs: NearbyTransitHubs,
        destination_hubs: NearbyTransitHubs,
    ) -> Optional[MultimodalRoute]:
        if not (
            find_best_transit_stop(source_hubs.metro_stations, WALK_ACCEPTABLE_M)
            and find_best_transit_stop(destination_hubs.metro_stations, WALK_ACCEPTABLE_M)
        ):
            return None

        prefs = request.preferences
        first = calculate_first_mile(request.source, distance, prefs.prefer_modes)
        if first.mode == TransportMode.BUS and not find_best_transit_stop(
            source_hubs.bus_stops, BUS_STOP_WALK_M
        ):
            return None

        budget = prefs.max_cost if prefs.max_cost is not None else float("inf")
        last = calculate_last_mile(request.destination, distance, budget)
        metro_distance = distance - first.distance_m - last.distance_m
        if metro_distance <= 0:
            logger.debug(
                f"Skipping Metro + Walk: access legs ({first.distance_m:.0f} m + "
                f"{last.distance_m:.0f} m) cover the whole {distance:.0f} m trip"
            )
            return None

        first_stop = first.transfer_point.location.model_copy(update={"name": "Metro Station"})
        last_stop = last.transfer_point.location.model_copy(update={"name": "Metro Station"})

        segments = [
            self._segment(
                first.mode, request.source, first_stop, first.distance_m,
                f"{_verb(first.mode)} to nearest metro station",
            ),
            self._segment(
                TransportMode.METRO, first_stop, last_stop, metro_distance,
                "Take metro", route_info="Metro Line",
            ),
            self._segment(
                last.mode, last_stop, request.destination, last.distance_m,
                f"{_verb(last.mode)} to {_place(request.destination, 'destination')}",
            ),
        ]
        return self._route(
            "walk-metro-walk", "Metro + Walk", segments, distance,
            carbon=Level.LOW,
            comfort=Level.MEDIUM,
            reliability=85,
            description="Balanced time and cost",
        )

    def _bus_metro_bus_route(
        self,
        request: RouteRequest,
        distance: float,
        source_hubs: NearbyTransitHubs,
        destination_hubs: NearbyTransitHubs,
    ) -> Optional[MultimodalRoute]:
        if not (
            find_best_transit_stop(source_hubs.bus_stops, BUS_STOP_WALK_M)
            and find_best_transit_stop(destination_hubs.bus_stops, BUS_STOP_WALK_M)
            and find_best_transit_stop(source_hubs.metro_stations, METRO_STATION_RIDE_M)
            and find_best_transit_stop(destination_hubs.metro_stations, METRO_STATION_RIDE_M)
        ):
            return None

        first_d, metro_d, last_d = allocate_distances(distance, 3)
        first_stop = estimate_transfer_point(request.source, TransportMode.BUS, first_d).location
        last_stop = estimate_transfer_point(request.destination, TransportMode.BUS, last_d).location

        segments = [
            self._segment(TransportMode.BUS, request.source, first_stop, first_d, "Bus to metro station"),
            self._segment(
                TransportMode.METRO, first_stop, last_stop, metro_d,
                "Take metro", route_info="Metro Line",
            ),
            self._segment(TransportMode.BUS, last_stop, request.destination, last_d, "Bus to destination"),
        ]
        return self._route(
            "bus-metro-bus", "Bus + Metro + Bus", segments, distance,
            carbon=Level.LOW,
            comfort=Level.MEDIUM,
            reliability=70,
            description="Most economical for long distance",
        )

    def _metro_bus_route(
        self,
        request: RouteRequest,
        distance: float,
        source_hubs: NearbyTransitHubs,
        destination_hubs: NearbyTransitHubs,
    ) -> Optional[MultimodalRoute]:
        if not (
            find_best_transit_stop(source_hubs.metro_stations, METRO_STATION_RIDE_M)
            and find_best_transit_stop(destination_hubs.bus_stops, BUS_STOP_WALK_M)
        ):
            return None

        # The bus covers the short (last-mile) share, the metro the main share
        bus_d, metro_d = allocate_distances(distance, 2)
        handover = estimate_transfer_point(request.destination, TransportMode.METRO, bus_d).location

        segments = [
            self._segment(
                TransportMode.METRO, request.source, handover, metro_d,
                "Take metro", route_info="Metro Line",
            ),
            self._segment(TransportMode.BUS, handover, request.destination, bus_d, "Bus to destination"),
        ]
        return self._route(
            "metro-bus", "Metro + Bus", segments, distance,
            carbon=Level.LOW,
            comfort=Level.MEDIUM,
            reliability=75,
            description="Good balance of time and cost",
        )


def _place(location: Location, fallback: str) -> str:
    return location.name or fallback


def _verb(mode: TransportMode) -> str:
    return {
        TransportMode.WALK: "Walk",
        TransportMode.AUTO: "Take auto",
        TransportMode.BUS: "Take bus",
    }.get(mode, f"Take {mode.value}")


def _access_instruction(mode: TransportMode, distance: float, stop_name: str, catalog: ModeCatalog) -> str:
    if mode == TransportMode.WALK:
        minutes = round_half_up(catalog.segment_metrics(mode, distance)[0])
        return f"Walk {distance:.0f}m ({minutes} min) to {stop_name}"
    return f"{_verb(mode)} to {stop_name}"


def _egress_instruction(
    mode: TransportMode,
    distance: float,
    stop_name: str,
    destination: Location,
    catalog: ModeCatalog,
) -> str:
    target = _place(destination, "destination")
    if mode == TransportMode.WALK:
        minutes = round_half_up(catalog.segment_metrics(mode, distance)[0])
        return f"Walk {distance:.0f}m ({minutes} min) from {stop_name} to {target}"
    return f"{_verb(mode)} from {stop_name} to {target}"
