"""
Layout Engine: deterministic initial placement plus force-directed relaxation.

Initial placement puts diseases on a diagonal down the left of the canvas and
tiles symptoms in a 6-column grid on the right. Relaxation then runs three
forces per step:

  * link: springs between a disease and its symptoms, rest length
    ``link_distance - 30 * weight`` so frequent symptoms sit closer;
  * many-body: pairwise repulsion with a fixed negative charge;
  * center: shifts the whole system toward the canvas center.

The simulation owns its node copies in a ``SimulationState``. ``advance``
moves it one step and is scheduler-agnostic: call it from a timer, an asyncio
loop (``SimulationRunner``) or a plain ``for`` loop in a test. Alpha decays
toward ``alpha_target`` and the layout is usable at any step.
"""

from __future__ import annotations

import asyncio
import logging
import math
import random
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..core.config import Settings
from ..schemas.graph import GraphEdge, GraphNode, NodeCategory
from ..utils.normalization import round_coordinate

logger = logging.getLogger(__name__)

Position = Tuple[float, float]
Positions = Dict[str, Position]

GRID_COLUMNS = 6
WEIGHT_DISTANCE_SPAN = 30.0


class LayoutConfig:
    """Canvas geometry and force constants."""

    def __init__(
        self,
        canvas_width: float = 800.0,
        canvas_height: float = 600.0,
        disease_size: float = 28.0,
        symptom_size: float = 14.0,
        link_distance: float = 120.0,
        charge_strength: float = -200.0,
        center_strength: float = 0.05,
        alpha: float = 1.0,
        alpha_min: float = 0.001,
        alpha_target: float = 0.0,
        velocity_decay: float = 0.4,
        reheat_alpha: float = 0.3,
        seed: Optional[int] = 42,
    ):
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height
        self.disease_size = disease_size
        self.symptom_size = symptom_size
        self.link_distance = link_distance
        self.charge_strength = charge_strength
        self.center_strength = center_strength
        self.alpha = alpha
        self.alpha_min = alpha_min
        # Reaches alpha_min after ~300 steps when alpha_target is 0
        self.alpha_decay = 1 - alpha_min ** (1 / 300)
        self.alpha_target = alpha_target
        self.velocity_decay = velocity_decay
        self.reheat_alpha = reheat_alpha
        self.seed = seed

    @classmethod
    def from_settings(cls, settings: Settings) -> "LayoutConfig":
        return cls(
            canvas_width=settings.canvas_width,
            canvas_height=settings.canvas_height,
            disease_size=settings.disease_node_size,
            symptom_size=settings.symptom_node_size,
            link_distance=settings.link_distance,
            charge_strength=settings.charge_strength,
            center_strength=settings.center_strength,
            alpha_target=settings.alpha_target,
            seed=settings.layout_seed,
        )

    @property
    def center(self) -> Position:
        return (self.canvas_width / 2, self.canvas_height / 2)

    def node_size(self, category: str) -> float:
        if category == NodeCategory.DISEASE:
            return self.disease_size
        return self.symptom_size


# ──────────────────────────────────────────────────────────────────────────────
# Initial placement
# ──────────────────────────────────────────────────────────────────────────────


def initial_placement(
    nodes: Sequence[GraphNode], canvas_height: float = 600.0
) -> Positions:
    """
    Deterministic starting positions, also valid as a standalone layout.

    Disease i of N: ``t = i / max(1, N - 1)``, ``x = 120 + 240 t``,
    ``y = 80 + (H - 160) t``. Symptom k: column ``k mod 6`` spread over
    x 420..740, row ``k // 6`` every 80 units from y 60. Coordinates are
    rounded half-up to integers.
    """
    diseases = [n for n in nodes if n.category == NodeCategory.DISEASE]
    symptoms = [n for n in nodes if n.category != NodeCategory.DISEASE]
    positions: Positions = {}

    span = max(1, len(diseases) - 1)
    for i, node in enumerate(diseases):
        t = i / span
        positions[node.id] = (
            float(round_coordinate(120 + t * 240)),
            float(round_coordinate(80 + t * (canvas_height - 160))),
        )

    for idx, node in enumerate(symptoms):
        column = idx % GRID_COLUMNS
        row = idx // GRID_COLUMNS
        positions[node.id] = (
            float(round_coordinate(420 + (column / (GRID_COLUMNS - 1)) * 320)),
            float(round_coordinate(60 + row * 80)),
        )

    return positions


# ──────────────────────────────────────────────────────────────────────────────
# Simulation state
# ──────────────────────────────────────────────────────────────────────────────


class SimNode:
    """Mutable simulation copy of a node."""

    def __init__(self, node_id: str, x: float, y: float):
        self.id = node_id
        self.x = x
        self.y = y
        self.vx = 0.0
        self.vy = 0.0
        self.fx: Optional[float] = None
        self.fy: Optional[float] = None

    @property
    def pinned(self) -> bool:
        return self.fx is not None


class SimLink:
    """Spring between two simulation nodes."""

    def __init__(self, source: SimNode, target: SimNode, distance: float):
        self.source = source
        self.target = target
        self.distance = distance
        self.strength = 1.0
        self.bias = 0.5


class SimulationState:
    """Everything one running simulation owns."""

    def __init__(self, nodes: List[SimNode], links: List[SimLink], config: LayoutConfig):
        self.nodes = nodes
        self.index: Dict[str, SimNode] = {node.id: node for node in nodes}
        self.links = links
        self.config = config
        self.alpha = config.alpha
        self.ticks = 0
        self.relaxing = bool(nodes) and bool(links)
        self.stopped = False
        self.rng = random.Random(config.seed)

    def positions(self) -> Positions:
        return {node.id: (node.x, node.y) for node in self.nodes}


def create_simulation(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    config: Optional[LayoutConfig] = None,
) -> SimulationState:
    """
    Clone the graph into a fresh simulation starting from initial placement.

    Edges whose endpoints are not nodes of the graph are ignored.
    """
    config = config or LayoutConfig()
    placement = initial_placement(nodes, config.canvas_height)
    sim_nodes = [SimNode(node.id, *placement[node.id]) for node in nodes]
    index = {node.id: node for node in sim_nodes}

    links: List[SimLink] = []
    for edge in edges:
        source = index.get(edge.source)
        target = index.get(edge.target)
        if source is None or target is None:
            logger.debug(f"Skipping edge {edge.source} -> {edge.target}: unknown node")
            continue
        distance = config.link_distance - WEIGHT_DISTANCE_SPAN * edge.weight
        links.append(SimLink(source, target, distance))

    _init_links(links)
    return SimulationState(sim_nodes, links, config)


def _init_links(links: List[SimLink]) -> None:
    degree: Dict[str, int] = {}
    for link in links:
        degree[link.source.id] = degree.get(link.source.id, 0) + 1
        degree[link.target.id] = degree.get(link.target.id, 0) + 1
    for link in links:
        source_degree = degree[link.source.id]
        target_degree = degree[link.target.id]
        link.bias = source_degree / (source_degree + target_degree)
        link.strength = 1.0 / min(source_degree, target_degree)


# ──────────────────────────────────────────────────────────────────────────────
# Forces
# ──────────────────────────────────────────────────────────────────────────────


def _jiggle(rng: random.Random) -> float:
    return (rng.random() - 0.5) * 1e-6


def _apply_link_force(state: SimulationState, scale: float) -> None:
    for link in state.links:
        source, target = link.source, link.target
        dx = target.x + target.vx - source.x - source.vx or _jiggle(state.rng)
        dy = target.y + target.vy - source.y - source.vy or _jiggle(state.rng)
        length = math.sqrt(dx * dx + dy * dy)
        factor = (length - link.distance) / length * scale * link.strength
        dx *= factor
        dy *= factor
        target.vx -= dx * link.bias
        target.vy -= dy * link.bias
        source.vx += dx * (1 - link.bias)
        source.vy += dy * (1 - link.bias)


def _apply_charge_force(state: SimulationState, scale: float) -> None:
    strength = state.config.charge_strength * scale
    nodes = state.nodes
    for i in range(len(nodes)):
        a = nodes[i]
        for j in range(i + 1, len(nodes)):
            b = nodes[j]
            dx = b.x - a.x
            dy = b.y - a.y
            if dx == 0:
                dx = _jiggle(state.rng)
            if dy == 0:
                dy = _jiggle(state.rng)
            dist2 = dx * dx + dy * dy
            if dist2 < 1.0:
                dist2 = math.sqrt(dist2)
            w = strength / dist2
            a.vx += dx * w
            a.vy += dy * w
            b.vx -= dx * w
            b.vy -= dy * w


def _apply_center_force(state: SimulationState, dt: float) -> None:
    cx, cy = state.config.center
    count = len(state.nodes)
    mean_x = sum(node.x for node in state.nodes) / count
    mean_y = sum(node.y for node in state.nodes) / count
    pull = min(1.0, state.config.center_strength * dt)
    shift_x = (mean_x - cx) * pull
    shift_y = (mean_y - cy) * pull
    for node in state.nodes:
        node.x -= shift_x
        node.y -= shift_y


def _integrate(state: SimulationState, dt: float) -> None:
    damping = (1 - state.config.velocity_decay) ** dt
    for node in state.nodes:
        if node.pinned:
            node.x, node.y = node.fx, node.fy
            node.vx = node.vy = 0.0
            continue
        node.vx *= damping
        node.vy *= damping
        node.x += node.vx * dt
        node.y += node.vy * dt


# ──────────────────────────────────────────────────────────────────────────────
# Step function
# ──────────────────────────────────────────────────────────────────────────────


def advance(state: SimulationState, dt: float = 1.0) -> SimulationState:
    """
    Move the simulation forward by one step of length ``dt``.

    A stopped simulation, or one over a graph without nodes or edges, is
    left untouched.
    """
    if state.stopped or not state.relaxing:
        return state

    config = state.config
    decay = 1 - (1 - config.alpha_decay) ** dt
    state.alpha += (config.alpha_target - state.alpha) * decay

    scale = state.alpha * dt
    _apply_link_force(state, scale)
    _apply_charge_force(state, scale)
    _apply_center_force(state, dt)
    _integrate(state, dt)

    state.ticks += 1
    return state


def pin_node(state: SimulationState, node_id: str, x: float, y: float) -> bool:
    """
    Fix a node at (x, y) until released, reheating the simulation.

    Returns:
        False if the node is not part of the simulation
    """
    node = state.index.get(node_id)
    if node is None:
        return False
    node.fx, node.fy = x, y
    node.x, node.y = x, y
    node.vx = node.vy = 0.0
    state.alpha = max(state.alpha, state.config.reheat_alpha)
    return True


def release_node(state: SimulationState, node_id: str) -> bool:
    """Let a pinned node rejoin the simulation."""
    node = state.index.get(node_id)
    if node is None:
        return False
    node.fx = node.fy = None
    return True


# ──────────────────────────────────────────────────────────────────────────────
# Per-view owner and scheduler
# ──────────────────────────────────────────────────────────────────────────────


class LayoutEngine:
    """Owns the simulation of one graph view."""

    def __init__(self, config: Optional[LayoutConfig] = None):
        self.config = config or LayoutConfig()
        self.state: Optional[SimulationState] = None

    def load(self, nodes: Sequence[GraphNode], edges: Sequence[GraphEdge]) -> Positions:
        """Discard any running simulation and start over from initial placement."""
        self.stop()
        self.state = create_simulation(nodes, edges, self.config)
        if not self.state.relaxing:
            logger.info(
                f"Layout for {len(nodes)} nodes / {len(edges)} edges uses "
                "initial placement only"
            )
        return self.state.positions()

    def tick(self, dt: float = 1.0) -> Positions:
        if self.state is None:
            return {}
        return advance(self.state, dt).positions()

    def pin(self, node_id: str, x: float, y: float) -> bool:
        return self.state is not None and pin_node(self.state, node_id, x, y)

    def release(self, node_id: str) -> bool:
        return self.state is not None and release_node(self.state, node_id)

    def positions(self) -> Positions:
        return self.state.positions() if self.state is not None else {}

    def stop(self) -> None:
        if self.state is not None:
            self.state.stopped = True
        self.state = None


class SimulationRunner:
    """
    Drives a step callable on the asyncio loop at a fixed interval.

    Steps run one at a time on the loop thread and every step's positions are
    handed to ``on_tick`` when one is given.
    """

    def __init__(
        self,
        step: Callable[[float], Positions],
        on_tick: Optional[Callable[[Positions], None]] = None,
        interval: float = 1 / 60,
        dt: float = 1.0,
    ):
        self.step = step
        self.on_tick = on_tick
        self.interval = interval
        self.dt = dt
        self.ticks = 0
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def run(self, max_ticks: Optional[int] = None) -> int:
        """Tick until stopped, or until ``max_ticks`` steps have run."""
        self._running = True
        try:
            while self._running:
                positions = self.step(self.dt)
                if self.on_tick is not None:
                    self.on_tick(positions)
                self.ticks += 1
                if max_ticks is not None and self.ticks >= max_ticks:
                    break
                await asyncio.sleep(self.interval)
        finally:
            self._running = False
        return self.ticks

    def stop(self) -> None:
        self._running = False
