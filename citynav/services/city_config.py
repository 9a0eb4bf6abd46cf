# citynav/services/city_config.py
"""
Static city profiles: environmental context, per-mode overrides and
special rules, plus bounding-box city detection.
"""
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from citynav.models.context import CityContext, CityId, Tier
from citynav.models.modes import TransportMode


class SpecialRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    condition: str
    effect: str


class CityProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: CityId
    name: str
    state: str
    context: CityContext
    # Partial ModeConfig fields, shallow-merged onto the defaults
    mode_adjustments: Dict[TransportMode, Dict[str, Any]] = Field(default_factory=dict)
    special_rules: List[SpecialRule] = Field(default_factory=list)


def _context(
    city_id: CityId,
    has_metro: bool,
    bus: Tier,
    auto: Tier,
    traffic: Tier,
) -> CityContext:
    return CityContext(
        city_id=city_id,
        has_metro=has_metro,
        metro_operational=has_metro,
        bus_frequency=bus,
        auto_availability=auto,
        traffic_level=traffic,
    )


CITY_PROFILES: Dict[CityId, CityProfile] = {
    CityId.DELHI: CityProfile(
        id=CityId.DELHI,
        name="New Delhi",
        state="Delhi",
        context=_context(CityId.DELHI, True, Tier.HIGH, Tier.VERY_HIGH, Tier.EXTREME),
        mode_adjustments={
            TransportMode.BUS: {"average_speed_kmh": 12},
            TransportMode.AUTO: {"average_speed_kmh": 20, "base_fare": 25},
            TransportMode.CAB: {"average_speed_kmh": 25, "base_fare": 50},
            TransportMode.METRO: {"average_speed_kmh": 35},
        },
        special_rules=[
            SpecialRule(
                name="Odd-Even Rule",
                condition="During pollution emergencies",
                effect="Private cars restricted on alternate days",
            ),
        ],
    ),
    CityId.MUMBAI: CityProfile(
        id=CityId.MUMBAI,
        name="Mumbai",
        state="Maharashtra",
        context=_context(CityId.MUMBAI, True, Tier.VERY_HIGH, Tier.LOW, Tier.EXTREME),
        mode_adjustments={
            TransportMode.BUS: {"average_speed_kmh": 15},
            TransportMode.AUTO: {"average_speed_kmh": 22, "base_fare": 23, "max_distance_m": 0},
            TransportMode.CAB: {"average_speed_kmh": 20, "base_fare": 60, "cost_per_km": 22},
            TransportMode.METRO: {"average_speed_kmh": 35},
        },
        special_rules=[
            SpecialRule(
                name="Local Train Preference",
                condition="Long distance within city",
                effect="Local trains (suburban railway) preferred over metro",
            ),
            SpecialRule(
                name="Limited Auto Zone",
                condition="South Mumbai",
                effect="Auto-rickshaws not available in many areas",
            ),
        ],
    ),
    CityId.BANGALORE: CityProfile(
        id=CityId.BANGALORE,
        name="Bangalore",
        state="Karnataka",
        context=_context(CityId.BANGALORE, True, Tier.HIGH, Tier.VERY_HIGH, Tier.VERY_HIGH),
        mode_adjustments={
            TransportMode.BUS: {"average_speed_kmh": 14},
            TransportMode.AUTO: {"average_speed_kmh": 18, "base_fare": 30},
            TransportMode.CAB: {"average_speed_kmh": 22, "base_fare": 50},
            TransportMode.METRO: {"average_speed_kmh": 35},
        },
        special_rules=[
            SpecialRule(
                name="Tech Corridor Traffic",
                condition="ORR and Tech Parks",
                effect="Extreme traffic during peak hours (8-11 AM, 5-9 PM)",
            ),
        ],
    ),
    CityId.HYDERABAD: CityProfile(
        id=CityId.HYDERABAD,
        name="Hyderabad",
        state="Telangana",
        context=_context(CityId.HYDERABAD, True, Tier.MEDIUM, Tier.HIGH, Tier.HIGH),
        mode_adjustments={
            TransportMode.BUS: {"average_speed_kmh": 16},
            TransportMode.AUTO: {"average_speed_kmh": 24, "base_fare": 25},
            TransportMode.CAB: {"average_speed_kmh": 28, "base_fare": 45},
            TransportMode.METRO: {"average_speed_kmh": 35},
        },
    ),
    CityId.CHENNAI: CityProfile(
        id=CityId.CHENNAI,
        name="Chennai",
        state="Tamil Nadu",
        context=_context(CityId.CHENNAI, True, Tier.VERY_HIGH, Tier.VERY_HIGH, Tier.HIGH),
        mode_adjustments={
            TransportMode.BUS: {"average_speed_kmh": 15},
            TransportMode.AUTO: {"average_speed_kmh": 22, "base_fare": 25},
            TransportMode.CAB: {"average_speed_kmh": 26, "base_fare": 50},
            TransportMode.METRO: {"average_speed_kmh": 35},
        },
        special_rules=[
            SpecialRule(
                name="Suburban Train Network",
                condition="Long distance travel",
                effect="Well-connected suburban train network available",
            ),
        ],
    ),
    CityId.KOLKATA: CityProfile(
        id=CityId.KOLKATA,
        name="Kolkata",
        state="West Bengal",
        context=_context(CityId.KOLKATA, True, Tier.HIGH, Tier.LOW, Tier.HIGH),
        mode_adjustments={
            TransportMode.BUS: {"average_speed_kmh": 14},
            TransportMode.AUTO: {"average_speed_kmh": 20, "base_fare": 25, "max_distance_m": 0},
            TransportMode.CAB: {"average_speed_kmh": 24, "base_fare": 40},
            TransportMode.METRO: {"average_speed_kmh": 35},
        },
        special_rules=[
            SpecialRule(
                name="Yellow Taxi Culture",
                condition="All areas",
                effect="Yellow cabs (taxis) preferred over auto-rickshaws",
            ),
        ],
    ),
    CityId.PUNE: CityProfile(
        id=CityId.PUNE,
        name="Pune",
        state="Maharashtra",
        # Metro under construction
        context=_context(CityId.PUNE, False, Tier.MEDIUM, Tier.VERY_HIGH, Tier.HIGH),
        mode_adjustments={
            TransportMode.BUS: {"average_speed_kmh": 16},
            TransportMode.AUTO: {"average_speed_kmh": 24, "base_fare": 23},
            TransportMode.CAB: {"average_speed_kmh": 28, "base_fare": 45},
        },
    ),
    CityId.AHMEDABAD: CityProfile(
        id=CityId.AHMEDABAD,
        name="Ahmedabad",
        state="Gujarat",
        context=_context(CityId.AHMEDABAD, True, Tier.HIGH, Tier.HIGH, Tier.MEDIUM),
        mode_adjustments={
            TransportMode.BUS: {"average_speed_kmh": 18},  # BRTS
            TransportMode.AUTO: {"average_speed_kmh": 25, "base_fare": 20},
            TransportMode.CAB: {"average_speed_kmh": 30, "base_fare": 40},
            TransportMode.METRO: {"average_speed_kmh": 35},
        },
        special_rules=[
            SpecialRule(
                name="BRTS Corridor",
                condition="Major routes",
                effect="Bus Rapid Transit System provides fast bus service",
            ),
        ],
    ),
}

# (city, (lat_min, lat_max), (lng_min, lng_max)); checked in order, first match wins
CITY_BOUNDS: List[Tuple[CityId, Tuple[float, float], Tuple[float, float]]] = [
    (CityId.DELHI, (28.4, 28.9), (76.8, 77.5)),
    (CityId.MUMBAI, (18.9, 19.3), (72.7, 73.1)),
    (CityId.BANGALORE, (12.8, 13.2), (77.4, 77.8)),
    (CityId.HYDERABAD, (17.3, 17.6), (78.3, 78.7)),
    (CityId.CHENNAI, (12.9, 13.3), (80.1, 80.4)),
    (CityId.KOLKATA, (22.4, 22.7), (88.2, 88.5)),
    (CityId.PUNE, (18.4, 18.7), (73.7, 74.0)),
    (CityId.AHMEDABAD, (22.9, 23.2), (72.4, 72.8)),
]

UNKNOWN_CITY_CONTEXT = CityContext(
    city_id=CityId.UNKNOWN,
    has_metro=False,
    metro_operational=False,
    bus_frequency=Tier.MEDIUM,
    auto_availability=Tier.HIGH,
    traffic_level=Tier.MEDIUM,
)


def detect_city_from_coordinates(lat: float, lng: float) -> CityId:
    for city_id, (lat_min, lat_max), (lng_min, lng_max) in CITY_BOUNDS:
        if lat_min <= lat <= lat_max and lng_min <= lng <= lng_max:
            return city_id
    return CityId.UNKNOWN


def get_city_profile(city_id: CityId) -> Optional[CityProfile]:
    if city_id is CityId.UNKNOWN:
        return None
    return CITY_PROFILES[city_id]


def list_cities() -> List[CityProfile]:
    return list(CITY_PROFILES.values())


def get_city_context(city_id: CityId) -> CityContext:
    profile = get_city_profile(city_id)
    if profile is None:
        return UNKNOWN_CITY_CONTEXT
    return profile.context


def get_city_rules(city_id: CityId) -> List[str]:
    """
    Special rules formatted for display as warnings ("<name>: <effect>").
    """
    profile = get_city_profile(city_id)
    if profile is None:
        return []
    return [f"{rule.name}: {rule.effect}" for rule in profile.special_rules]
