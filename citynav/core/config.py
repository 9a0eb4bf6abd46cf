# citynav/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables (.env file).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    APP_NAME: str = "CityNav Route Planner API"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Transit stop lookups (Overpass / synthetic fallback)
    USE_LIVE_TRANSIT_LOOKUP: bool = False
    OVERPASS_URL: str = "https://overpass-api.de/api/interpreter"
    # Must cover the 2 km station search used for very long trips
    TRANSIT_LOOKUP_RADIUS_M: float = 2000.0
    TRANSIT_LOOKUP_TIMEOUT_S: float = 10.0

    # Assumed temperature when a weather condition comes without one
    DEFAULT_TEMPERATURE_C: float = 35.0

    MAX_ROUTES_RETURNED: int = 4


settings = Settings()
