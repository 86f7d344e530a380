"""
Graph Runtime Engine: loads a graph document and serves positioned,
risk-classified nodes for one view.

The loaded ``GraphDocument`` is never modified. Loading clones it into a new
layout simulation; changing the active conditions only relabels risk and
leaves the simulation running where it is. Load failures are kept as status
instead of being raised to the caller.
"""

from __future__ import annotations

import json
import logging
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

import requests
from pydantic import ValidationError

from ..core.config import Settings
from ..schemas.graph import (
    ConnectedNode,
    GraphDocument,
    GraphEdge,
    GraphNode,
    GraphStatistics,
    GraphStatus,
    LoadState,
    NodeCategory,
    NodeDetails,
    PositionedNode,
)
from ..utils.file_utils import read_text_file
from .layout_engine import LayoutConfig, LayoutEngine, Positions
from .risk_classifier import NodeRisk, classify_risk

logger = logging.getLogger(__name__)


class GraphLoadError(Exception):
    """The graph document could not be fetched or parsed."""


def _is_url(source: str) -> bool:
    return source.startswith("http://") or source.startswith("https://")


def fetch_graph_document(
    source: Union[str, Path], timeout: float = 10.0
) -> GraphDocument:
    """
    Fetch a graph document from a local path or an http(s) URL.

    Args:
        source: File path or URL
        timeout: Request timeout in seconds for URLs

    Returns:
        Parsed document

    Raises:
        GraphLoadError: If the document cannot be fetched, is not JSON or
            does not have the expected shape
    """
    source = str(source)
    try:
        if _is_url(source):
            response = requests.get(source, timeout=timeout)
            response.raise_for_status()
            payload = response.json()
        else:
            payload = json.loads(read_text_file(source))
        return GraphDocument.model_validate(payload)
    except requests.RequestException as exc:
        raise GraphLoadError(f"Failed to fetch graph document from {source}: {exc}")
    except (OSError, UnicodeDecodeError) as exc:
        raise GraphLoadError(f"Failed to read graph document {source}: {exc}")
    except ValidationError as exc:
        raise GraphLoadError(
            f"Invalid graph document {source}: {exc.error_count()} validation errors"
        )
    except ValueError as exc:
        raise GraphLoadError(f"Graph document {source} is not valid JSON: {exc}")


class GraphRuntimeEngine:
    """Owns the document, the active condition set and the layout of one view."""

    def __init__(
        self,
        layout_config: Optional[LayoutConfig] = None,
        fetch_timeout: float = 10.0,
    ):
        self.layout = LayoutEngine(layout_config)
        self.fetch_timeout = fetch_timeout
        self.document: Optional[GraphDocument] = None
        self._status = GraphStatus()
        self._active: Tuple[str, ...] = ()
        self._risk: Dict[str, NodeRisk] = {}
        self._nodes_by_id: Dict[str, GraphNode] = {}

    @classmethod
    def from_settings(cls, settings: Settings) -> "GraphRuntimeEngine":
        return cls(
            layout_config=LayoutConfig.from_settings(settings),
            fetch_timeout=settings.fetch_timeout_seconds,
        )

    # ── Loading ────────────────────────────────────────────────────────────

    def load(self, source: Union[str, Path]) -> GraphStatus:
        """
        Fetch and install a document; failures end up in ``status()``.

        Calling it again is the retry path.
        """
        source = str(source)
        try:
            document = fetch_graph_document(source, timeout=self.fetch_timeout)
        except GraphLoadError as exc:
            logger.error(f"Graph load failed: {exc}")
            self._clear()
            self._status = GraphStatus(
                state=LoadState.ERROR, source=source, error=str(exc)
            )
            return self._status
        return self.load_document(document, source=source)

    def load_document(
        self, document: GraphDocument, source: Optional[str] = None
    ) -> GraphStatus:
        """Install an in-memory document and restart the layout."""
        self.document = document
        self._nodes_by_id = {node.id: node for node in document.nodes}
        self.layout.load(document.nodes, document.edges)
        self._reclassify()
        self._status = GraphStatus(
            state=LoadState.READY,
            source=source,
            node_count=len(document.nodes),
            edge_count=len(document.edges),
        )
        logger.info(
            f"Graph loaded from {source or 'memory'}: "
            f"{len(document.nodes)} nodes, {len(document.edges)} edges"
        )
        return self._status

    def close(self) -> None:
        """Stop the simulation and drop all state."""
        self._clear()
        self._status = GraphStatus()

    def _clear(self) -> None:
        self.layout.stop()
        self.document = None
        self._nodes_by_id = {}
        self._risk = {}

    # ── Active conditions ──────────────────────────────────────────────────

    @property
    def active_conditions(self) -> List[str]:
        return list(self._active)

    def set_active_conditions(self, active_conditions: Iterable[str]) -> None:
        """Replace the active set and reclassify; the layout keeps running."""
        self._active = tuple(active_conditions)
        self._reclassify()

    def _reclassify(self) -> None:
        if self.document is None:
            self._risk = {}
            return
        self._risk = classify_risk(
            self.document.nodes, self.document.edges, self._active
        )

    # ── Layout ─────────────────────────────────────────────────────────────

    def tick(self, dt: float = 1.0) -> Positions:
        return self.layout.tick(dt)

    def pin(self, node_id: str, x: float, y: float) -> bool:
        return self.layout.pin(node_id, x, y)

    def release(self, node_id: str) -> bool:
        return self.layout.release(node_id)

    # ── Outputs ────────────────────────────────────────────────────────────

    def status(self) -> GraphStatus:
        return self._status

    def edges(self) -> List[GraphEdge]:
        return list(self.document.edges) if self.document is not None else []

    def nodes(self) -> List[PositionedNode]:
        if self.document is None:
            return []
        positions = self.layout.positions()
        return [self._position(node, positions) for node in self.document.nodes]

    def node_details(self, node_id: str) -> Optional[NodeDetails]:
        """Node with its current risk and its neighbours, strongest first."""
        node = self._nodes_by_id.get(node_id)
        if node is None:
            return None

        connected: List[ConnectedNode] = []
        for edge in self.document.edges:
            if edge.source == node_id:
                other_id = edge.target
            elif edge.target == node_id:
                other_id = edge.source
            else:
                continue
            other = self._nodes_by_id.get(other_id)
            if other is None:
                continue
            connected.append(
                ConnectedNode(
                    id=other.id,
                    name=other.name,
                    category=other.category,
                    weight=edge.weight,
                )
            )
        connected.sort(key=lambda c: (-c.weight, c.id))

        return NodeDetails(
            node=self._position(node, self.layout.positions()),
            connected=connected,
        )

    def statistics(self) -> GraphStatistics:
        if self.document is None:
            return GraphStatistics()

        categories: Dict[str, int] = defaultdict(int)
        with_precautions = 0
        for node in self.document.nodes:
            categories[node.category] += 1
            if node.precautions:
                with_precautions += 1

        risk_levels: Dict[str, int] = defaultdict(int)
        for assignment in self._risk.values():
            risk_levels[assignment.risk.value] += 1

        weights = [edge.weight for edge in self.document.edges] or [0]
        return GraphStatistics(
            total_nodes=len(self.document.nodes),
            total_edges=len(self.document.edges),
            node_categories=dict(categories),
            avg_weight=round(sum(weights) / len(weights), 3),
            diseases_with_precautions=with_precautions,
            risk_levels=dict(risk_levels),
        )

    def _position(self, node: GraphNode, positions: Positions) -> PositionedNode:
        x, y = positions.get(node.id, (0.0, 0.0))
        assignment = self._risk.get(node.id)
        return PositionedNode(
            id=node.id,
            name=node.name,
            category=node.category,
            precautions=node.precautions,
            x=x,
            y=y,
            risk=assignment.risk if assignment else "neutral",
            active=assignment.active if assignment else False,
            size=self.layout.config.node_size(node.category),
        )
