# citynav/services/mode_catalog.py
from typing import Dict, Optional, Tuple

from citynav.core.exceptions import InvalidModeConfigError, UnknownTransportModeError
from citynav.core.logger import logger
from citynav.models.context import CityId, Tier
from citynav.models.modes import ModeConfig, OperatingHours, TransportMode
from citynav.services.city_config import get_city_profile


DEFAULT_MODE_CONFIGS: Dict[TransportMode, ModeConfig] = {
    TransportMode.WALK: ModeConfig(
        mode=TransportMode.WALK,
        average_speed_kmh=4.5,
        base_fare=0,
        max_distance_m=2000,
        comfort_score=6,
        reliability_score=10,
        carbon_emission_g_per_km=0,
        display_name="Walk",
        icon="🚶",
        color="#22c55e",
    ),
    TransportMode.BUS: ModeConfig(
        mode=TransportMode.BUS,
        average_speed_kmh=15,  # with stops and traffic
        base_fare=10,
        cost_per_km=2,
        operating_hours=OperatingHours(start="05:00", end="23:30"),
        comfort_score=5,
        reliability_score=6,
        carbon_emission_g_per_km=80,
        display_name="Bus",
        icon="🚌",
        color="#f59e0b",
    ),
    TransportMode.METRO: ModeConfig(
        mode=TransportMode.METRO,
        average_speed_kmh=35,
        base_fare=10,
        cost_per_km=3,
        operating_hours=OperatingHours(start="06:00", end="23:00"),
        comfort_score=8,
        reliability_score=9,
        carbon_emission_g_per_km=30,
        display_name="Metro",
        icon="🚇",
        color="#3b82f6",
    ),
    TransportMode.AUTO: ModeConfig(
        mode=TransportMode.AUTO,
        average_speed_kmh=22,
        base_fare=20,
        cost_per_km=15,
        max_distance_m=10000,
        comfort_score=6,
        reliability_score=7,
        carbon_emission_g_per_km=120,
        display_name="Auto",
        icon="🛺",
        color="#eab308",
    ),
    TransportMode.CAB: ModeConfig(
        mode=TransportMode.CAB,
        average_speed_kmh=28,
        base_fare=50,
        cost_per_km=20,
        comfort_score=9,
        reliability_score=8,
        carbon_emission_g_per_km=150,
        display_name="Cab",
        icon="🚗",
        color="#8b5cf6",
    ),
    TransportMode.BIKE: ModeConfig(
        mode=TransportMode.BIKE,
        average_speed_kmh=12,
        base_fare=0,
        max_distance_m=5000,
        comfort_score=7,
        reliability_score=10,
        carbon_emission_g_per_km=0,
        display_name="Bike",
        icon="🚲",
        color="#10b981",
    ),
}


def get_default_config(mode: TransportMode) -> ModeConfig:
    return DEFAULT_MODE_CONFIGS[mode]


def apply_city_adjustments(
    city_id: CityId,
    mode: TransportMode,
    base_config: ModeConfig,
) -> ModeConfig:
    """
    Shallow-merge the city's override fields for `mode` onto `base_config`.

    Without an override the base config is returned unchanged.
    """
    profile = get_city_profile(city_id)
    if profile is None or mode not in profile.mode_adjustments:
        return base_config
    return base_config.model_copy(update=profile.mode_adjustments[mode])


def is_mode_available_in_city(city_id: CityId, mode: TransportMode) -> bool:
    profile = get_city_profile(city_id)
    if profile is None:
        # Unknown city: assume everything runs
        return True

    if mode == TransportMode.METRO and not profile.context.has_metro:
        return False

    if mode == TransportMode.AUTO and profile.context.auto_availability == Tier.LOW:
        return False

    # max_distance_m == 0 is the explicit "disabled here" signal
    adjusted = apply_city_adjustments(city_id, mode, get_default_config(mode))
    if adjusted.max_distance_m == 0:
        return False

    return True


def is_segment_feasible(
    mode: TransportMode,
    distance_m: float,
    config: Optional[ModeConfig] = None,
) -> bool:
    """
    Check a leg against the mode's min/max distance. A missing or zero bound is no bound.
    """
    if config is None:
        return True
    if config.min_distance_m and distance_m < config.min_distance_m:
        return False
    if config.max_distance_m and distance_m > config.max_distance_m:
        return False
    return True


class ModeCatalog:
    """
    Owned, mutable table of mode configurations used by one engine.

    Starts from the defaults; `update_mode_config` shallow-merges changes,
    `for_city` derives a new catalog with a city's overrides applied.
    """

    def __init__(self, configs: Optional[Dict[TransportMode, ModeConfig]] = None) -> None:
        self._configs: Dict[TransportMode, ModeConfig] = dict(
            DEFAULT_MODE_CONFIGS if configs is None else configs
        )

    def get(self, mode: TransportMode) -> ModeConfig:
        try:
            return self._configs[mode]
        except KeyError:
            raise UnknownTransportModeError(f"Unknown transport mode: {mode}") from None

    def configs(self) -> Dict[TransportMode, ModeConfig]:
        return dict(self._configs)

    def update_mode_config(self, mode: TransportMode, **fields) -> ModeConfig:
        unknown = sorted(set(fields) - set(ModeConfig.model_fields))
        if unknown:
            raise InvalidModeConfigError(f"Unknown ModeConfig fields for {mode.value}: {unknown}")
        updated = ModeConfig.model_validate({**self.get(mode).model_dump(), **fields})
        self._configs[mode] = updated
        logger.info(f"Mode config for {mode.value} updated: {sorted(fields)}")
        return updated

    def for_city(self, city_id: CityId) -> "ModeCatalog":
        return ModeCatalog(
            {
                mode: apply_city_adjustments(city_id, mode, config)
                for mode, config in self._configs.items()
            }
        )

    def segment_metrics(self, mode: TransportMode, distance_m: float) -> Tuple[float, float]:
        """
        Unrounded (duration in minutes, cost) of travelling `distance_m` with `mode`.
        """
        config = self.get(mode)
        distance_km = distance_m / 1000.0
        duration = (distance_km / config.average_speed_kmh) * 60.0
        cost = config.base_fare + (config.cost_per_km or 0) * distance_km
        return duration, cost
