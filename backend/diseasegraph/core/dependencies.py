"""
Shared dependencies for FastAPI dependency injection.
"""

from fastapi import Request

from diseasegraph.core.config import get_settings, Settings
from diseasegraph.services.graph_runtime import GraphRuntimeEngine


def get_settings_dependency() -> Settings:
    """Dependency to get application settings."""
    return get_settings()


async def get_graph_engine(request: Request) -> GraphRuntimeEngine:
    """
    Dependency to get the graph engine owned by the application.

    The engine lives on ``app.state``; it is created and loaded from the
    configured source the first time it is needed. Running on the event loop
    keeps that first load from happening twice for concurrent requests.
    """
    engine = getattr(request.app.state, "graph_engine", None)
    if engine is None:
        settings = get_settings()
        engine = GraphRuntimeEngine.from_settings(settings)
        engine.load(settings.graph_source)
        request.app.state.graph_engine = engine
    return engine
