# citynav/main.py

from fastapi import FastAPI

from citynav.api.v1 import routes_health, routes_planner
from citynav.core.config import Settings, settings as default_settings
from citynav.core.logger import logger
from citynav.core.logging_config import setup_logging
from citynav.services.multimodal_engine import create_engine


def create_app(settings: Settings = default_settings) -> FastAPI:
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Multimodal route planning for Indian cities: walk, bus, metro, auto and cab.",
    )

    app.state.engine = create_engine(settings)

    # Routers
    app.include_router(routes_health.router, prefix="", tags=["health"])
    app.include_router(routes_planner.router, prefix="", tags=["planner"])

    logger.info(f"{settings.APP_NAME} {settings.APP_VERSION} ready ({settings.ENVIRONMENT})")
    return app


app = create_app()
