# citynav/api/v1/dependencies.py
from fastapi import Request

from citynav.services.multimodal_engine import MultimodalEngine


def get_multimodal_engine(request: Request) -> MultimodalEngine:
    """
    The engine built by create_app(). Tests swap it via app.state or dependency_overrides.
    """
    return request.app.state.engine
