# citynav/models/transit.py

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from citynav.models.routing import Location


class StopType(str, Enum):
    BUS_STOP = "bus_stop"
    METRO_STATION = "metro_station"
    RAILWAY_STATION = "railway_station"
    TRAM_STOP = "tram_stop"


class TransitStop(BaseModel):
    """
    A stop or station near a query point, as reported by a transit stop locator.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    type: StopType
    location: Location
    distance_m: float  # from the query point
    routes: List[str] = Field(default_factory=list)
    operator: Optional[str] = None
    tags: Dict[str, str] = Field(default_factory=dict)


class NearbyTransitHubs(BaseModel):
    model_config = ConfigDict(frozen=True)

    bus_stops: List[TransitStop] = Field(default_factory=list)
    metro_stations: List[TransitStop] = Field(default_factory=list)
    railway_stations: List[TransitStop] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.bus_stops or self.metro_stations or self.railway_stations)


class TransitLookupResult(BaseModel):
    """
    Outcome of one lookup at the collaborator boundary.

    `hubs` is always usable (possibly empty); `error` is set when the
    lookup failed and the hubs are a degraded substitute.
    """
    model_config = ConfigDict(frozen=True)

    hubs: NearbyTransitHubs = Field(default_factory=NearbyTransitHubs)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
