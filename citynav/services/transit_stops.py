# citynav/services/transit_stops.py
"""
Nearby transit stop lookups: the collaborator boundary of the engine.

Locators may fail or time out; `resolve_transit_lookup` turns every such
failure into a TransitLookupResult so synthesis only ever sees resolved data.
"""
import asyncio
from typing import Any, Dict, List, Optional, Protocol, Tuple

import httpx

from citynav.core.logger import logger
from citynav.models.routing import Location
from citynav.models.transit import (
    NearbyTransitHubs,
    StopType,
    TransitLookupResult,
    TransitStop,
)
from citynav.services.geo import haversine_distance_m


class TransitStopLocator(Protocol):
    async def find_nearby_transit_stops(
        self, location: Location, radius_m: float
    ) -> NearbyTransitHubs:
        ...


class SyntheticTransitStopLocator:
    """
    Deterministic stand-in stops around the query point.

    Used offline, in development, and as the fallback of the live locator.
    """

    async def find_nearby_transit_stops(
        self, location: Location, radius_m: float = 1000.0
    ) -> NearbyTransitHubs:
        return build_synthetic_hubs(location)


def build_synthetic_hubs(location: Location) -> NearbyTransitHubs:
    lat, lng = location.lat, location.lng

    bus_stops = [
        TransitStop(
            id="bus_1",
            name="Main Road Bus Stop",
            type=StopType.BUS_STOP,
            location=Location(lat=lat + 0.003, lng=lng + 0.002),
            distance_m=350,
            routes=["405", "764", "182"],
            operator="DTC",
        ),
        TransitStop(
            id="bus_2",
            name="Market Bus Stop",
            type=StopType.BUS_STOP,
            location=Location(lat=lat - 0.004, lng=lng + 0.003),
            distance_m=520,
            routes=["505", "622"],
            operator="DTC",
        ),
    ]
    metro_stations = [
        TransitStop(
            id="metro_1",
            name="Central Metro Station",
            type=StopType.METRO_STATION,
            location=Location(lat=lat + 0.005, lng=lng - 0.004),
            distance_m=720,
            routes=["Blue Line", "Yellow Line"],
            operator="DMRC",
        ),
    ]
    railway_stations = [
        TransitStop(
            id="railway_1",
            name="City Railway Station",
            type=StopType.RAILWAY_STATION,
            location=Location(lat=lat - 0.008, lng=lng + 0.006),
            distance_m=1100,
            operator="Indian Railways",
        ),
    ]
    return NearbyTransitHubs(
        bus_stops=bus_stops,
        metro_stations=metro_stations,
        railway_stations=railway_stations,
    )


OVERPASS_QUERY_TEMPLATE = """
[out:json][timeout:25];
(
  node["highway"="bus_stop"](around:{r},{lat},{lng});
  node["railway"="station"](around:{r},{lat},{lng});
  node["railway"="halt"](around:{r},{lat},{lng});
  node["station"="subway"](around:{r},{lat},{lng});
  node["public_transport"="stop_position"](around:{r},{lat},{lng});
  node["public_transport"="platform"](around:{r},{lat},{lng});
);
out body;
"""


class OverpassTransitStopLocator:
    """
    Live lookup against the Overpass (OpenStreetMap) API.

    Errors, timeouts and empty answers fall back to synthetic stops, so the
    caller always gets something to plan with.
    """

    def __init__(
        self,
        url: str,
        timeout_s: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
        fallback: Optional[TransitStopLocator] = None,
    ) -> None:
        self.url = url
        self.timeout_s = timeout_s
        self.http_client = http_client
        self.fallback = fallback or SyntheticTransitStopLocator()

    async def find_nearby_transit_stops(
        self, location: Location, radius_m: float = 1000.0
    ) -> NearbyTransitHubs:
        query = OVERPASS_QUERY_TEMPLATE.format(
            r=int(radius_m), lat=location.lat, lng=location.lng
        )

        try:
            hubs = parse_overpass_response(await self._post(query), location)
        except httpx.TimeoutException:
            logger.warning(
                f"Overpass lookup timed out after {self.timeout_s:.1f} s, using synthetic stops"
            )
            return await self.fallback.find_nearby_transit_stops(location, radius_m)
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(f"Overpass lookup failed ({type(exc).__name__}: {exc}), using synthetic stops")
            return await self.fallback.find_nearby_transit_stops(location, radius_m)

        if not hubs.bus_stops and not hubs.metro_stations:
            logger.info("No bus stops or metro stations found, using synthetic stops")
            return await self.fallback.find_nearby_transit_stops(location, radius_m)

        logger.info(
            f"Overpass lookup near ({location.lat:.6f}, {location.lng:.6f}): "
            f"{len(hubs.bus_stops)} bus stops, {len(hubs.metro_stations)} metro stations, "
            f"{len(hubs.railway_stations)} railway stations"
        )
        return hubs

    async def _post(self, query: str) -> Dict[str, Any]:
        if self.http_client is not None:
            resp = await self.http_client.post(self.url, data={"data": query}, timeout=self.timeout_s)
            resp.raise_for_status()
            return resp.json()

        async with httpx.AsyncClient(timeout=self.timeout_s) as client:
            resp = await client.post(self.url, data={"data": query})
            resp.raise_for_status()
            return resp.json()


def determine_stop_type(tags: Dict[str, str]) -> StopType:
    if tags.get("railway") in ("station", "halt"):
        return StopType.RAILWAY_STATION
    if tags.get("station") == "subway" or tags.get("subway") == "yes":
        return StopType.METRO_STATION
    if tags.get("highway") == "bus_stop" or tags.get("bus") == "yes":
        return StopType.BUS_STOP
    if tags.get("railway") == "tram_stop":
        return StopType.TRAM_STOP
    if tags.get("public_transport") in ("platform", "stop_position"):
        if tags.get("train") == "yes":
            return StopType.RAILWAY_STATION
        if tags.get("subway") == "yes":
            return StopType.METRO_STATION
    return StopType.BUS_STOP


def parse_overpass_response(data: Dict[str, Any], origin: Location) -> NearbyTransitHubs:
    """
    Turn Overpass `elements` into stops grouped by type, nearest first.
    Tram stops are dropped.
    """
    groups: Dict[StopType, List[TransitStop]] = {
        StopType.BUS_STOP: [],
        StopType.METRO_STATION: [],
        StopType.RAILWAY_STATION: [],
    }

    elements = data.get("elements") if isinstance(data, dict) else None
    if not isinstance(elements, list):
        return NearbyTransitHubs()

    for element in elements:
        if not isinstance(element, dict):
            continue
        lat = element.get("lat")
        lon = element.get("lon")
        if lat is None or lon is None:
            continue

        tags = element.get("tags")
        if not isinstance(tags, dict):
            tags = {}
        stop_location = Location(lat=lat, lng=lon)
        route_ref = tags.get("route_ref")
        stop = TransitStop(
            id=f"stop_{element.get('id')}",
            name=tags.get("name") or tags.get("ref") or "Unnamed Stop",
            type=determine_stop_type(tags),
            location=stop_location,
            distance_m=haversine_distance_m(origin, stop_location),
            routes=route_ref.split(";") if isinstance(route_ref, str) else [],
            operator=tags.get("operator"),
            tags=tags,
        )
        if stop.type in groups:
            groups[stop.type].append(stop)

    for stops in groups.values():
        stops.sort(key=lambda s: s.distance_m)

    return NearbyTransitHubs(
        bus_stops=groups[StopType.BUS_STOP],
        metro_stations=groups[StopType.METRO_STATION],
        railway_stations=groups[StopType.RAILWAY_STATION],
    )


def find_best_transit_stop(
    stops: List[TransitStop],
    max_walking_distance_m: float = 500.0,
) -> Optional[TransitStop]:
    """
    Best stop within walking distance: most serving routes first, then nearest.
    """
    walkable = [stop for stop in stops if stop.distance_m <= max_walking_distance_m]
    if not walkable:
        return None
    return min(walkable, key=lambda s: (-len(s.routes), s.distance_m))


async def resolve_transit_lookup(
    locator: TransitStopLocator,
    location: Location,
    radius_m: float,
) -> TransitLookupResult:
    try:
        hubs = await locator.find_nearby_transit_stops(location, radius_m)
    except Exception as exc:
        error = (
            f"Transit lookup failed near ({location.lat:.5f}, {location.lng:.5f}): "
            f"{type(exc).__name__}: {exc}"
        )
        logger.warning(error)
        return TransitLookupResult(error=error)
    return TransitLookupResult(hubs=hubs)


async def lookup_endpoints(
    locator: TransitStopLocator,
    source: Location,
    destination: Location,
    radius_m: float,
) -> Tuple[TransitLookupResult, TransitLookupResult]:
    """
    Resolve source and destination lookups concurrently.
    """
    source_result, destination_result = await asyncio.gather(
        resolve_transit_lookup(locator, source, radius_m),
        resolve_transit_lookup(locator, destination, radius_m),
    )
    return source_result, destination_result
