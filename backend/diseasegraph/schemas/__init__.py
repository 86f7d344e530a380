"""
Schemas package initialization.
"""

from diseasegraph.schemas.common import HealthCheck
from diseasegraph.schemas.graph import (
    ActiveConditionsRequest,
    AdvanceLayoutRequest,
    ConnectedNode,
    GraphDocument,
    GraphEdge,
    GraphNode,
    GraphResponse,
    GraphStatistics,
    GraphStatus,
    LoadState,
    NodeCategory,
    NodeDetails,
    NodeRiskResponse,
    PinNodeRequest,
    PositionedNode,
    RiskLevel,
)

__all__ = [
    "HealthCheck",
    "ActiveConditionsRequest",
    "AdvanceLayoutRequest",
    "ConnectedNode",
    "GraphDocument",
    "GraphEdge",
    "GraphNode",
    "GraphResponse",
    "GraphStatistics",
    "GraphStatus",
    "LoadState",
    "NodeCategory",
    "NodeDetails",
    "NodeRiskResponse",
    "PinNodeRequest",
    "PositionedNode",
    "RiskLevel",
]
