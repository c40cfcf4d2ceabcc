"""
Force simulation for the repo/tool graph.

One step per frame of: pairwise inverse-square repulsion, Hookean springs
along edges, a weak pull toward the world origin, then damping and
semi-implicit Euler integration. Once the layout has come to rest the
engine stops computing until something perturbs it.
"""

import logging
import math
from typing import Dict, Optional

from ..core.types import EdgeKind, NodeKind
from .model import GraphModel, GraphNode

logger = logging.getLogger(__name__)

REPULSION = 2200.0
# Tool-tool pairs repel weakly so tools cluster around their repos
TOOL_REPULSION_FACTOR = 0.3
SPRING_K = 0.007
REST_LENGTH: Dict[EdgeKind, float] = {
    EdgeKind.REPO_REPO: 140.0,
    EdgeKind.REPO_TOOL: 70.0,
}
CENTERING = 0.003
DAMPING = 0.87
MIN_DISTANCE = 1.0

WARMUP_FRAMES = 60
SETTLE_EPSILON = 0.05


class PhysicsEngine:
    """
    Iterative force-directed layout.

    The engine owns only the settle bookkeeping; positions and velocities
    live on the nodes of whatever model is passed to ``step``.
    """

    def __init__(
        self,
        repulsion: float = REPULSION,
        spring_k: float = SPRING_K,
        centering: float = CENTERING,
        damping: float = DAMPING,
        warmup_frames: int = WARMUP_FRAMES,
        settle_epsilon: float = SETTLE_EPSILON,
    ):
        self.repulsion = repulsion
        self.spring_k = spring_k
        self.centering = centering
        self.damping = damping
        self.warmup_frames = warmup_frames
        self.settle_epsilon = settle_epsilon
        self.settled = False
        self.frames = 0
        self.energy = 0.0

    def wake(self) -> None:
        """Clear the settle flag and restart the warm-up count."""
        if self.settled:
            logger.debug("Layout perturbed, resuming simulation")
        self.settled = False
        self.frames = 0

    def step(self, model: GraphModel, dragging: Optional[GraphNode] = None) -> bool:
        """
        Advance the simulation by one frame.

        Args:
            model: The graph whose nodes are moved in place.
            dragging: Node held by the pointer; its position is driven
                externally and its velocity is pinned to zero.

        Returns:
            bool: True when the layout is settled (no work was done or the
            layout just came to rest).
        """
        if self.settled:
            return True

        nodes = model.nodes
        self._apply_repulsion(nodes)
        self._apply_springs(model)

        energy = 0.0
        for node in nodes:
            node.vx -= node.x * self.centering
            node.vy -= node.y * self.centering
            if node is dragging:
                node.vx = node.vy = 0.0
                continue
            node.vx *= self.damping
            node.vy *= self.damping
            node.x += node.vx
            node.y += node.vy
            energy += abs(node.vx) + abs(node.vy)

        self.frames += 1
        self.energy = energy
        if self.frames > self.warmup_frames and energy < self.settle_epsilon:
            self.settled = True
            logger.debug(f"Layout settled after {self.frames} frames")
        return self.settled

    def _apply_repulsion(self, nodes) -> None:
        count = len(nodes)
        for i in range(count):
            a = nodes[i]
            for j in range(i + 1, count):
                b = nodes[j]
                dx, dy, dist = _separation(a, b, i, j)
                strength = self.repulsion
                if a.kind is NodeKind.TOOL and b.kind is NodeKind.TOOL:
                    strength *= TOOL_REPULSION_FACTOR
                force = strength / (dist * dist)
                fx = dx / dist * force
                fy = dy / dist * force
                a.vx -= fx
                a.vy -= fy
                b.vx += fx
                b.vy += fy

    def _apply_springs(self, model: GraphModel) -> None:
        for edge in model.edges:
            a, b = model.endpoints(edge)
            dx, dy, dist = _separation(a, b, edge.source_index, edge.target_index)
            force = (dist - REST_LENGTH[edge.kind]) * self.spring_k
            fx = dx / dist * force
            fy = dy / dist * force
            a.vx += fx
            a.vy += fy
            b.vx -= fx
            b.vy -= fy


def _separation(a: GraphNode, b: GraphNode, i: int, j: int):
    """Vector from a to b and its length, clamped to MIN_DISTANCE."""
    dx = b.x - a.x
    dy = b.y - a.y
    dist = math.hypot(dx, dy)
    if dist == 0.0:
        # Coincident nodes: push apart along a fixed, index-dependent direction
        angle = (i * 7 + j * 13) % 360
        dx = math.cos(math.radians(angle))
        dy = math.sin(math.radians(angle))
    return dx, dy, max(dist, MIN_DISTANCE)
