# citynav/api/v1/routes_planner.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from citynav.api.v1.dependencies import get_multimodal_engine
from citynav.core.exceptions import NoRoutesAvailableError
from citynav.models.modes import ModeConfig
from citynav.models.routing import RankingResult, RouteRequest, RouteResponse
from citynav.services.city_config import CityProfile, list_cities
from citynav.services.multimodal_engine import MultimodalEngine

router = APIRouter(tags=["planner"])


@router.post(
    "/routes/",
    response_model=RouteResponse,
    summary="Plan multimodal routes between source and destination",
)
async def calculate_routes(
    request: RouteRequest,
    engine: MultimodalEngine = Depends(get_multimodal_engine),
) -> RouteResponse:
    """
    Ranked multimodal route options.

    - Candidates depend on the trip distance band and nearby transit stops.
    - Traffic, weather, traveller needs and service hours adjust them.
    - Failures come back in `errors` with an empty `routes` list.
    """
    return await engine.calculate_routes(request)


@router.post(
    "/routes/best",
    response_model=RankingResult,
    summary="Best route per category (fastest, cheapest, recommended, comfort, eco)",
)
async def best_routes(
    request: RouteRequest,
    engine: MultimodalEngine = Depends(get_multimodal_engine),
) -> RankingResult:
    try:
        return await engine.get_best_routes(request)
    except NoRoutesAvailableError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.get("/cities/", response_model=List[CityProfile], summary="Known city profiles")
async def cities() -> List[CityProfile]:
    return list_cities()


@router.get("/modes/", response_model=List[ModeConfig], summary="Transport mode catalog")
async def modes(engine: MultimodalEngine = Depends(get_multimodal_engine)) -> List[ModeConfig]:
    return list(engine.catalog.configs().values())
