# citynav/models/routing.py

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from citynav.models.context import UserContext, WeatherCondition
from citynav.models.modes import Level, TransportMode


class Location(BaseModel):
    """
    Simple latitude/longitude point with optional labels.
    """
    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float
    name: Optional[str] = None
    address: Optional[str] = None


class RouteType(str, Enum):
    FASTEST = "fastest"
    CHEAPEST = "cheapest"
    BALANCED = "balanced"
    COMFORT = "comfort"


class Prioritize(str, Enum):
    TIME = "time"
    COST = "cost"
    COMFORT = "comfort"


class RouteSegment(BaseModel):
    """
    One leg of a journey travelled with a single transport mode.

    duration_min excludes the wait at the start of the leg, which is
    carried separately in wait_time_min.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    mode: TransportMode
    from_location: Location = Field(alias="from")
    to_location: Location = Field(alias="to")
    distance_m: float = Field(ge=0)
    duration_min: int = Field(ge=0)
    cost: int = Field(ge=0)
    instruction: str
    route_info: Optional[str] = None
    route_number: Optional[str] = None
    wait_time_min: Optional[int] = None
    transfer_time_min: Optional[int] = None


class MultimodalRoute(BaseModel):
    """
    A complete journey option: ordered segments plus aggregates.

    Invariants kept by every stage that builds or adjusts a route:
    - total_duration_min == sum(duration_min + (wait_time_min or 0))
    - transfer_count == number of mode changes between consecutive segments

    `score` stays None until scoring; `type` until labelling.
    `score_factor` accumulates user-context and preferred-mode multipliers
    and is folded into the final score.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    type: Optional[RouteType] = None
    segments: List[RouteSegment]
    total_distance_m: float
    total_duration_min: int
    total_cost: int
    transfer_count: int
    modes_used: List[TransportMode]
    reliability_score: Optional[float] = None  # 0-100
    carbon_footprint: Optional[Level] = None
    comfort_level: Optional[Level] = None
    description: str = ""
    warnings: List[str] = Field(default_factory=list)
    score: Optional[float] = None
    score_factor: float = 1.0


class RoutePreferences(BaseModel):
    """
    Optional user preferences. A field left at None disables that filter.
    """
    model_config = ConfigDict(frozen=True)

    prioritize: Optional[Prioritize] = None
    avoid_modes: List[TransportMode] = Field(default_factory=list)
    prefer_modes: List[TransportMode] = Field(default_factory=list)
    max_walking_distance_m: Optional[float] = None
    max_cost: Optional[float] = None
    max_transfers: Optional[int] = None
    accessibility_mode: bool = False


class RouteContext(BaseModel):
    """
    Already-resolved travel context (time, weather). The engine performs no lookups.
    """
    model_config = ConfigDict(frozen=True)

    time_of_day: Optional[datetime] = None
    is_weekend: Optional[bool] = None
    weather_condition: Optional[WeatherCondition] = None
    temperature_c: Optional[float] = None


class RouteRequest(BaseModel):
    """
    Request body for the /routes endpoints.
    """
    model_config = ConfigDict(frozen=True)

    source: Location
    destination: Location
    preferences: RoutePreferences = Field(default_factory=RoutePreferences)
    context: RouteContext = Field(default_factory=RouteContext)
    user: Optional[UserContext] = None


class RouteResponse(BaseModel):
    """
    Result of a route calculation. Always well-formed: failures are
    reported through `errors` with an empty `routes` list.
    """
    request: RouteRequest
    routes: List[MultimodalRoute]
    calculated_at: datetime
    calculation_time_ms: float
    city_id: Optional[str] = None
    primary_mode: Optional[TransportMode] = None
    warnings: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)


class ScoringWeights(BaseModel):
    model_config = ConfigDict(frozen=True)

    time: float
    cost: float
    comfort: float
    reliability: float


class ScoringMetrics(BaseModel):
    """
    Per-route metrics normalised to [0, 1], where 1 is best.
    """
    model_config = ConfigDict(frozen=True)

    time_score: float
    cost_score: float
    comfort_score: float
    reliability_score: float
    sustainability_score: float


class RankingResult(BaseModel):
    """
    "Best of" picks over one candidate set. Slots may hold the same route.
    """
    fastest: MultimodalRoute
    cheapest: MultimodalRoute
    recommended: MultimodalRoute
    comfort: MultimodalRoute
    eco: MultimodalRoute
