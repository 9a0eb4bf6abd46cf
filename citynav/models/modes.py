# citynav/models/modes.py

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TransportMode(str, Enum):
    """
    Closed set of transport modes the planner knows how to cost.
    """
    WALK = "walk"
    BUS = "bus"        # City bus / BRT
    METRO = "metro"    # Metro / local train
    AUTO = "auto"      # Auto-rickshaw
    CAB = "cab"        # Taxi / cab
    BIKE = "bike"      # Personal bike / bike-sharing


class Level(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Modes that share the road with general traffic
ROAD_MODES = frozenset({TransportMode.BUS, TransportMode.AUTO, TransportMode.CAB})


class OperatingHours(BaseModel):
    """
    Daily service window, as "HH:MM" strings.
    """
    model_config = ConfigDict(frozen=True)

    start: str
    end: str


class ModeConfig(BaseModel):
    """
    Static cost/speed/comfort parameters of one transport mode.

    Distances are in metres, speeds in km/h, fares in INR.
    comfort_score and reliability_score are on a 0-10 scale.
    """
    model_config = ConfigDict(frozen=True)

    mode: TransportMode
    average_speed_kmh: float = Field(gt=0)
    base_fare: float
    cost_per_km: Optional[float] = None
    max_distance_m: Optional[float] = None
    min_distance_m: Optional[float] = None
    operating_hours: Optional[OperatingHours] = None
    comfort_score: float
    reliability_score: float
    carbon_emission_g_per_km: float
    display_name: str = ""
    icon: str = ""
    color: str = ""
