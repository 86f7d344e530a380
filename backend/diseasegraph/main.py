"""
Disease Graph FastAPI Backend Application

Serves the disease/symptom graph with risk classification and layout.
"""

import asyncio
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from datetime import datetime

from diseasegraph.core.config import settings
from diseasegraph.api import router
from diseasegraph.schemas.common import HealthCheck
from diseasegraph.services.graph_runtime import GraphRuntimeEngine
from diseasegraph.services.layout_engine import SimulationRunner

logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="Disease/symptom risk graph: risk classification and force-directed layout",
    version=settings.app_version,
    debug=settings.debug,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Include API routes
app.include_router(router, prefix="/api")


@app.get("/", tags=["root"])
async def root():
    """Root endpoint with API information."""
    return {
        "message": settings.app_name,
        "version": settings.app_version,
        "status": "running",
        "docs": "/docs",
        "api_v1": "/api/v1",
    }


@app.get("/health", response_model=HealthCheck, tags=["health"])
async def health_check():
    """Health check endpoint."""
    engine = getattr(app.state, "graph_engine", None)
    graph_state = engine.status().state if engine is not None else "idle"
    return HealthCheck(
        status="healthy",
        version=settings.app_version,
        graph_state=graph_state,
        timestamp=datetime.now(),
    )


# Startup event
@app.on_event("startup")
async def startup_event():
    """Load the graph document into the application's engine."""
    if getattr(app.state, "graph_engine", None) is None:
        engine = GraphRuntimeEngine.from_settings(settings)
        engine.load(settings.graph_source)
        app.state.graph_engine = engine
    status = app.state.graph_engine.status()
    logger.info(
        f"{settings.app_name} v{settings.app_version} started, "
        f"graph {status.state} ({status.node_count} nodes, {status.edge_count} edges)"
    )

    # The runner ticks whichever simulation the engine currently owns,
    # so reloads need no restart here.
    app.state.layout_runner = None
    app.state.layout_task = None
    if settings.layout_autorun:
        runner = SimulationRunner(
            app.state.graph_engine.tick, interval=settings.layout_tick_interval
        )
        app.state.layout_runner = runner
        app.state.layout_task = asyncio.create_task(runner.run())
        logger.info(f"Layout simulation running every {settings.layout_tick_interval:.3f}s")


# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    """Stop the layout runner and the simulation."""
    runner = getattr(app.state, "layout_runner", None)
    task = getattr(app.state, "layout_task", None)
    if runner is not None:
        runner.stop()
    if task is not None:
        await task
    app.state.layout_runner = None
    app.state.layout_task = None

    engine = getattr(app.state, "graph_engine", None)
    if engine is not None:
        engine.close()
    app.state.graph_engine = None
    logger.info(f"Shutting down {settings.app_name}")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "diseasegraph.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
