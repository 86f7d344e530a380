"""
Pydantic schemas for the disease/symptom graph document and its runtime views.
"""

from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================
# ENUMS
# ============================================================


class NodeCategory(str, Enum):
    """Node categories of the bipartite graph."""

    DISEASE = "disease"
    SYMPTOM = "symptom"


class RiskLevel(str, Enum):
    """Risk classification assigned to every node."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NEUTRAL = "neutral"


class LoadState(str, Enum):
    """Lifecycle of a graph document load."""

    IDLE = "idle"
    READY = "ready"
    ERROR = "error"


# ============================================================
# GRAPH DOCUMENT (builder output, engine input)
# ============================================================


class GraphNode(BaseModel):
    """Disease or symptom node as written by the graph builder."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    id: str = Field(..., description="Slug derived from the display name")
    name: str = Field(..., description="Display label")
    category: NodeCategory
    precautions: Optional[List[str]] = Field(
        None, description="Disease precautions, omitted when none were supplied"
    )


class GraphEdge(BaseModel):
    """Weighted disease → symptom edge."""

    model_config = ConfigDict(frozen=True)

    source: str = Field(..., description="Disease id")
    target: str = Field(..., description="Symptom id")
    type: Literal["symptom_of"] = "symptom_of"
    weight: float = Field(..., ge=0.0, le=1.0)


class GraphDocument(BaseModel):
    """Canonical graph document: all diseases, then all symptoms, then edges."""

    model_config = ConfigDict(frozen=True)

    nodes: List[GraphNode] = []
    edges: List[GraphEdge] = []

    def to_json_dict(self) -> dict:
        """Serialise with stable key order and without absent precautions."""
        return self.model_dump(mode="json", exclude_none=True)


# ============================================================
# RUNTIME VIEWS
# ============================================================


class PositionedNode(BaseModel):
    """Node extended with layout coordinates and risk classification."""

    model_config = ConfigDict(use_enum_values=True)

    id: str
    name: str
    category: NodeCategory
    precautions: Optional[List[str]] = None
    x: float
    y: float
    risk: RiskLevel = RiskLevel.NEUTRAL
    active: bool = False
    size: float


class GraphStatus(BaseModel):
    """Coarse load status exposed next to the graph."""

    model_config = ConfigDict(use_enum_values=True)

    state: LoadState = LoadState.IDLE
    source: Optional[str] = None
    node_count: int = 0
    edge_count: int = 0
    error: Optional[str] = None


class GraphStatistics(BaseModel):
    """Summary numbers for the graph header."""

    total_nodes: int = 0
    total_edges: int = 0
    node_categories: Dict[str, int] = {}
    avg_weight: float = 0.0
    diseases_with_precautions: int = 0
    risk_levels: Dict[str, int] = {}


class ConnectedNode(BaseModel):
    """Neighbour of a node, with the weight of the connecting edge."""

    id: str
    name: str
    category: NodeCategory
    weight: float


class NodeDetails(BaseModel):
    """Detail panel content for a single node."""

    node: PositionedNode
    connected: List[ConnectedNode] = []


# ============================================================
# API REQUESTS / RESPONSES
# ============================================================


class ActiveConditionsRequest(BaseModel):
    """Ordered list of condition ids the patient currently reports."""

    active_conditions: List[str] = Field(default_factory=list)


class NodeRiskResponse(BaseModel):
    """Risk assignment of one node."""

    id: str
    risk: RiskLevel
    active: bool


class AdvanceLayoutRequest(BaseModel):
    """Number of simulation steps to run synchronously."""

    ticks: int = Field(1, ge=1)
    dt: float = Field(1.0, gt=0.0, le=10.0)


class PinNodeRequest(BaseModel):
    """Fixed position for a dragged node."""

    x: float
    y: float


class GraphResponse(BaseModel):
    """Positioned nodes, unmodified edges, status and statistics."""

    nodes: List[PositionedNode] = []
    edges: List[GraphEdge] = []
    active_conditions: List[str] = []
    status: GraphStatus
    statistics: GraphStatistics
