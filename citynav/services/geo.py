# citynav/services/geo.py
import math

from citynav.models.routing import Location

EARTH_RADIUS_M = 6_371_000.0


def haversine_distance_m(a: Location, b: Location) -> float:
    """
    Compute great-circle distance between two points (lat/lng in degrees), in metres.
    """
    lat1 = math.radians(a.lat)
    lon1 = math.radians(a.lng)
    lat2 = math.radians(b.lat)
    lon2 = math.radians(b.lng)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    h = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    )
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def destination_point(
    origin: Location,
    bearing_deg: float,
    distance_m: float,
    name: str | None = None,
) -> Location:
    """
    Point reached by travelling `distance_m` from `origin` along an initial
    bearing on a spherical earth (direct geodesic problem).
    """
    delta = distance_m / EARTH_RADIUS_M
    lat1 = math.radians(origin.lat)
    lon1 = math.radians(origin.lng)
    brng = math.radians(bearing_deg)

    lat2 = math.asin(
        math.sin(lat1) * math.cos(delta)
        + math.cos(lat1) * math.sin(delta) * math.cos(brng)
    )
    lon2 = lon1 + math.atan2(
        math.sin(brng) * math.sin(delta) * math.cos(lat1),
        math.cos(delta) - math.sin(lat1) * math.sin(lat2),
    )

    return Location(lat=math.degrees(lat2), lng=math.degrees(lon2), name=name)
