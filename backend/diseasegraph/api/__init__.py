"""
API v1 routes aggregation.
"""

from fastapi import APIRouter
from diseasegraph.api.routes.graph import router as graph_router

router = APIRouter(prefix="/v1")

# Include sub-routers
router.include_router(graph_router, prefix="/graph", tags=["graph"])
