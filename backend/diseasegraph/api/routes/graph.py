"""Disease graph API endpoints."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from diseasegraph.core.config import Settings
from diseasegraph.core.dependencies import get_graph_engine, get_settings_dependency
from diseasegraph.schemas.graph import (
    ActiveConditionsRequest,
    AdvanceLayoutRequest,
    GraphResponse,
    GraphStatus,
    NodeDetails,
    NodeRiskResponse,
    PinNodeRequest,
)
from diseasegraph.services.graph_runtime import GraphRuntimeEngine
from diseasegraph.services.risk_classifier import classify_risk

logger = logging.getLogger(__name__)

router = APIRouter(tags=["graph"])


def _graph_response(engine: GraphRuntimeEngine) -> GraphResponse:
    return GraphResponse(
        nodes=engine.nodes(),
        edges=engine.edges(),
        active_conditions=engine.active_conditions,
        status=engine.status(),
        statistics=engine.statistics(),
    )


@router.get("", response_model=GraphResponse)
async def get_graph(engine: GraphRuntimeEngine = Depends(get_graph_engine)):
    """
    Return the positioned, risk-classified graph.

    Response shape
    --------------
    {
      "nodes": [{"id", "name", "category", "precautions"?, "x", "y",
                 "risk", "active", "size"}, ...],
      "edges": [{"source", "target", "type": "symptom_of", "weight"}, ...],
      "active_conditions": ["flu", ...],
      "status": {"state": "ready" | "error" | "idle", "node_count",
                 "edge_count", "error"},
      "statistics": {...}
    }

    A document that failed to load yields empty nodes/edges and
    ``status.state == "error"`` rather than an HTTP error.
    """
    return _graph_response(engine)


@router.put("/active-conditions", response_model=GraphResponse)
async def set_active_conditions(
    request: ActiveConditionsRequest,
    engine: GraphRuntimeEngine = Depends(get_graph_engine),
):
    """Replace the active conditions and return the reclassified graph."""
    engine.set_active_conditions(request.active_conditions)
    return _graph_response(engine)


@router.post("/classify", response_model=List[NodeRiskResponse])
async def classify(
    request: ActiveConditionsRequest,
    engine: GraphRuntimeEngine = Depends(get_graph_engine),
):
    """Classify against the given conditions without changing the view's state."""
    if engine.document is None:
        return []
    assignments = classify_risk(
        engine.document.nodes, engine.document.edges, request.active_conditions
    )
    return [
        NodeRiskResponse(id=node_id, risk=assignment.risk, active=assignment.active)
        for node_id, assignment in assignments.items()
    ]


@router.post("/layout/advance", response_model=GraphResponse)
async def advance_layout(
    request: AdvanceLayoutRequest,
    engine: GraphRuntimeEngine = Depends(get_graph_engine),
    settings: Settings = Depends(get_settings_dependency),
):
    """Run ``ticks`` simulation steps and return the new positions."""
    if request.ticks > settings.max_ticks_per_request:
        raise HTTPException(
            status_code=422,
            detail=f"ticks must be <= {settings.max_ticks_per_request}",
        )
    for _ in range(request.ticks):
        engine.tick(request.dt)
    return _graph_response(engine)


@router.get("/nodes/{node_id}", response_model=NodeDetails)
async def get_node(
    node_id: str,
    engine: GraphRuntimeEngine = Depends(get_graph_engine),
):
    """Node details: risk, precautions and connected nodes by weight."""
    details = engine.node_details(node_id)
    if details is None:
        raise HTTPException(status_code=404, detail=f"Node not found: {node_id}")
    return details


@router.put("/nodes/{node_id}/pin", response_model=NodeDetails)
async def pin_node(
    node_id: str,
    request: PinNodeRequest,
    engine: GraphRuntimeEngine = Depends(get_graph_engine),
):
    """Fix a node at the dragged position."""
    if not engine.pin(node_id, request.x, request.y):
        raise HTTPException(status_code=404, detail=f"Node not found: {node_id}")
    return engine.node_details(node_id)


@router.delete("/nodes/{node_id}/pin", response_model=NodeDetails)
async def release_node(
    node_id: str,
    engine: GraphRuntimeEngine = Depends(get_graph_engine),
):
    """Release a pinned node back into the simulation."""
    if not engine.release(node_id):
        raise HTTPException(status_code=404, detail=f"Node not found: {node_id}")
    return engine.node_details(node_id)


@router.post("/reload", response_model=GraphStatus)
async def reload_graph(
    engine: GraphRuntimeEngine = Depends(get_graph_engine),
    settings: Settings = Depends(get_settings_dependency),
):
    """Reload the document from its source and restart the layout."""
    source = engine.status().source or settings.graph_source
    status = engine.load(source)
    if status.state == "error":
        logger.warning(f"Reload of {source} failed: {status.error}")
    return status
