"""
Graph Data Model.

Typed node, edge and particle records built once per load from a validated
payload. Nodes and edges live in plain lists (an arena) so edges and
particles can refer to them by stable integer index.

An undirected rustworkx mirror of the edges backs neighbor lookups used by
the renderer to isolate the hovered neighborhood.
"""

import logging
import math
import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Set, Tuple

import rustworkx as rx

from ..core.types import EdgeKind, GraphPayload, NodeKind

logger = logging.getLogger(__name__)

# --- Radius scaling (per kind) ---
BASE_RADIUS: Dict[NodeKind, float] = {NodeKind.REPO: 10.0, NodeKind.TOOL: 6.0}
RANGE_RADIUS: Dict[NodeKind, float] = {NodeKind.REPO: 30.0, NodeKind.TOOL: 14.0}

# --- Initial scatter box around the world origin ---
SCATTER_MAX_WIDTH = 500.0
SCATTER_MAX_HEIGHT = 350.0

# --- Particles ---
MAX_PARTICLES_PER_EDGE = 4
PARTICLE_MIN_SPEED = 0.002
PARTICLE_MAX_SPEED = 0.006


@dataclass(eq=False)
class GraphNode:
    """
    A repository or tool plus its simulation state.

    Compared by identity: interaction state holds references to nodes, and a
    reload produces brand new ones.
    """
    id: str
    label: str
    kind: NodeKind
    command_count: int
    session_count: int
    failure_count: int
    radius: float
    color_index: int
    phase: float
    branches: Tuple[str, ...] = ()
    repos: Tuple[str, ...] = ()
    last_active: Optional[datetime] = None
    x: float = 0.0
    y: float = 0.0
    vx: float = 0.0
    vy: float = 0.0

    @property
    def failure_ratio(self) -> float:
        return self.failure_count / max(1, self.command_count)

    @property
    def is_repo(self) -> bool:
        return self.kind is NodeKind.REPO


@dataclass(frozen=True)
class GraphEdge:
    """Undirected usage relationship between two node indices."""
    source_index: int
    target_index: int
    weight: int
    kind: EdgeKind

    def touches(self, index: Optional[int]) -> bool:
        return index is not None and (self.source_index == index or self.target_index == index)


@dataclass
class Particle:
    """A dot flowing along an edge; ``t`` is the position along it in [0, 1)."""
    edge_index: int
    t: float
    speed: float

    def advance(self) -> None:
        self.t = (self.t + self.speed) % 1.0


@dataclass
class GraphModel:
    """
    The complete simulation data for one load.

    Never patched incrementally: a reload builds a new model.
    """
    nodes: List[GraphNode] = field(default_factory=list)
    edges: List[GraphEdge] = field(default_factory=list)
    particles: List[Particle] = field(default_factory=list)
    _index: Dict[str, int] = field(default_factory=dict, repr=False)
    _graph: rx.PyGraph = field(default_factory=rx.PyGraph, repr=False)

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    @property
    def repo_count(self) -> int:
        return sum(1 for n in self.nodes if n.kind is NodeKind.REPO)

    @property
    def tool_count(self) -> int:
        return sum(1 for n in self.nodes if n.kind is NodeKind.TOOL)

    def index_of(self, node: Optional[GraphNode]) -> Optional[int]:
        """Arena index of a node belonging to this model, else None."""
        if node is None:
            return None
        idx = self._index.get(node.id)
        if idx is None or self.nodes[idx] is not node:
            return None
        return idx

    def get(self, node_id: str) -> Optional[GraphNode]:
        idx = self._index.get(node_id)
        return None if idx is None else self.nodes[idx]

    def neighbors(self, node: Optional[GraphNode]) -> Set[int]:
        """Indices of nodes sharing an edge with ``node``."""
        idx = self.index_of(node)
        if idx is None:
            return set()
        return set(self._graph.neighbors(idx))

    def endpoints(self, edge: GraphEdge) -> Tuple[GraphNode, GraphNode]:
        return self.nodes[edge.source_index], self.nodes[edge.target_index]

    def draw_order(
        self,
        hovered: Optional[GraphNode] = None,
        selected: Optional[GraphNode] = None,
    ) -> List[GraphNode]:
        """
        Nodes bottom to top: tools, then repos, then selected, then hovered.

        Shared by the renderer and hit testing so the node drawn on top is
        the one that receives the pointer.
        """
        active = [n for n in (selected, hovered) if n is not None and self.index_of(n) is not None]
        rest = [n for n in self.nodes if all(n is not a for a in active)]
        ordered = [n for n in rest if n.kind is NodeKind.TOOL]
        ordered += [n for n in rest if n.kind is NodeKind.REPO]
        for node in active:
            if all(node is not o for o in ordered):
                ordered.append(node)
        return ordered


def node_radius(kind: NodeKind, command_count: int, max_commands: int) -> float:
    """Square-root scaling keeps node area, not radius, proportional to activity."""
    scale = math.sqrt(max(0, command_count) / max(1, max_commands))
    return BASE_RADIUS[kind] + scale * RANGE_RADIUS[kind]


def scatter_position(rng: random.Random, viewport: Tuple[float, float]) -> Tuple[float, float]:
    """Random offset from the world origin, bounded by the viewport."""
    width, height = viewport
    span_x = min(width, SCATTER_MAX_WIDTH)
    span_y = min(height, SCATTER_MAX_HEIGHT)
    return (rng.random() - 0.5) * span_x, (rng.random() - 0.5) * span_y


def _infer_edge_kind(a: GraphNode, b: GraphNode) -> EdgeKind:
    if a.kind is NodeKind.REPO and b.kind is NodeKind.REPO:
        return EdgeKind.REPO_REPO
    return EdgeKind.REPO_TOOL


def build_model(
    payload: GraphPayload,
    viewport: Tuple[float, float],
    rng: Optional[random.Random] = None,
) -> GraphModel:
    """
    Build a fresh GraphModel from a validated payload.

    Args:
        payload: Validated nodes and edges from the backend.
        viewport: Current (width, height) of the drawing surface; bounds the
            initial scatter.
        rng: Random source for positions, pulse phases and particles.

    Returns:
        GraphModel: A new model. Edges whose endpoints cannot be resolved, and
        self-loops, are dropped and logged.
    """
    rng = rng or random.Random()
    model = GraphModel()

    # 1. Per-kind activity maxima
    max_commands: Dict[NodeKind, int] = {kind: 1 for kind in NodeKind}
    for item in payload.nodes:
        max_commands[item.type] = max(max_commands[item.type], item.commands)

    # 2. Nodes
    ordinals: Dict[NodeKind, int] = {kind: 0 for kind in NodeKind}
    for item in payload.nodes:
        if item.id in model._index:
            logger.warning(f"Duplicate node id {item.id!r} ignored")
            continue

        x, y = scatter_position(rng, viewport)
        node = GraphNode(
            id=item.id,
            label=item.label,
            kind=item.type,
            command_count=item.commands,
            session_count=item.sessions,
            failure_count=item.failures,
            radius=node_radius(item.type, item.commands, max_commands[item.type]),
            color_index=ordinals[item.type],
            phase=rng.uniform(0.0, 2.0 * math.pi),
            branches=tuple(item.branches) if item.type is NodeKind.REPO else (),
            repos=tuple(item.repos) if item.type is NodeKind.TOOL else (),
            last_active=item.last_active,
            x=x,
            y=y,
        )
        ordinals[item.type] += 1
        model._index[node.id] = model._graph.add_node(node.id)
        model.nodes.append(node)

    # 3. Edges
    for item in payload.edges:
        si = model._index.get(item.source)
        ti = model._index.get(item.target)
        if si is None or ti is None:
            missing = item.source if si is None else item.target
            logger.warning(f"Dropping edge {item.source!r} -> {item.target!r}: unknown node {missing!r}")
            continue
        if si == ti:
            logger.warning(f"Dropping self-loop on {item.source!r}")
            continue

        kind = item.type or _infer_edge_kind(model.nodes[si], model.nodes[ti])
        edge = GraphEdge(source_index=si, target_index=ti, weight=item.effective_weight, kind=kind)
        edge_index = len(model.edges)
        model.edges.append(edge)
        model._graph.add_edge(si, ti, edge_index)

        # 4. Particles
        for _ in range(min(edge.weight, MAX_PARTICLES_PER_EDGE)):
            model.particles.append(Particle(
                edge_index=edge_index,
                t=rng.random(),
                speed=rng.uniform(PARTICLE_MIN_SPEED, PARTICLE_MAX_SPEED),
            ))

    logger.debug(
        f"Built graph model: {len(model.nodes)} nodes, {len(model.edges)} edges, "
        f"{len(model.particles)} particles"
    )
    return model


def rescatter(model: GraphModel, viewport: Tuple[float, float], rng: random.Random) -> None:
    """Throw every node back to a random start position with zero velocity."""
    for node in model.nodes:
        node.x, node.y = scatter_position(rng, viewport)
        node.vx = node.vy = 0.0
