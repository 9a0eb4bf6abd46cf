# citynav/models/context.py

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from citynav.models.modes import ROAD_MODES, Level, TransportMode


class CityId(str, Enum):
    """
    Cities with a known profile. UNKNOWN stands for "no bounding box matched".
    """
    DELHI = "delhi"
    MUMBAI = "mumbai"
    BANGALORE = "bangalore"
    HYDERABAD = "hyderabad"
    CHENNAI = "chennai"
    KOLKATA = "kolkata"
    PUNE = "pune"
    AHMEDABAD = "ahmedabad"
    UNKNOWN = "unknown"


class Tier(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"
    EXTREME = "extreme"


class TrafficLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    EXTREME = "extreme"


class WeatherCondition(str, Enum):
    CLEAR = "clear"
    RAIN = "rain"
    HOT = "hot"
    STORM = "storm"


class CityContext(BaseModel):
    """
    Environmental profile of a city: which modes run and how busy the roads are.
    """
    model_config = ConfigDict(frozen=True)

    city_id: CityId
    has_metro: bool
    metro_operational: bool
    bus_frequency: Tier
    auto_availability: Tier
    traffic_level: Tier


class TimeContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    hour: int
    day_of_week: int  # 0 = Monday, 6 = Sunday
    is_weekend: bool
    is_peak_hour: bool
    is_night_time: bool


# Used when a request carries no departure time: a plain weekday noon
DEFAULT_TIME_CONTEXT = TimeContext(
    hour=12,
    day_of_week=2,
    is_weekend=False,
    is_peak_hour=False,
    is_night_time=False,
)


class TrafficContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: TrafficLevel
    multiplier: float
    affected_modes: List[TransportMode] = sorted(ROAD_MODES, key=lambda m: m.value)


class WeatherContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    condition: WeatherCondition
    temperature_c: float = 25.0
    rainfall_mm_h: float = 0.0
    impact_level: Tier = Tier.LOW


class UserContext(BaseModel):
    """
    Traveller circumstances that bias route scores without changing durations.
    """
    model_config = ConfigDict(frozen=True)

    age: Optional[int] = None
    needs_accessibility: bool = False
    carrying_luggage: bool = False
    traveling_with_children: bool = False
    fitness_level: Optional[Level] = None
    budget_level: Optional[Level] = None
