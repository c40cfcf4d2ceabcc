"""
Per-frame renderer.

Draw order per frame:
1. clear
2. camera transform
3. background dot grid (visible world rect only)
4. edges
5. particles (advanced here)
6. nodes, tools under repos, hovered/selected on top
7. HUD in screen space: info panel and status line

The renderer reads node positions but never writes them.
"""

import math
from typing import List, Optional, Set

from ..core.types import EdgeKind, NodeKind
from .camera import Camera
from .interaction import InteractionState
from .model import GraphEdge, GraphModel, GraphNode
from .surface import RGBA, Surface, hex_to_rgba, lerp_color, with_alpha

BACKGROUND = hex_to_rgba("#0a0e14")
GRID_COLOR = hex_to_rgba("#252c3a", 0.5)
LABEL_COLOR = hex_to_rgba("#dce4f0")
MUTED_COLOR = hex_to_rgba("#7d8799")
WARNING_COLOR = hex_to_rgba("#f46d6d")
COUNT_COLOR = (10, 14, 20, 180)
PANEL_FILL = (17, 22, 31, 235)
PANEL_BORDER = hex_to_rgba("#252c3a")
WHITE = (255, 255, 255, 255)

REPO_PALETTE = [hex_to_rgba(c) for c in (
    "#42d77d", "#5eadfc", "#b48cff", "#f2c14e", "#4fd1c5", "#ff9f6e",
)]
TOOL_PALETTE = [hex_to_rgba(c) for c in (
    "#8892a6", "#7aa2c8", "#a3b18a", "#c29fd4",
)]

FAILURE_RATIO_WARNING = 0.3
GRID_SPACING = 40.0
MAX_GRID_DOTS = 20000
DIM_ALPHA = 0.25

PULSE_RATE = 0.08
PULSE_AMPLITUDE = 3.0
GLOW_OFFSET = 6.0

COUNT_MIN_RADIUS = 18.0
LABEL_GAP = 12.0
HUD_MARGIN = 12.0
HUD_LINE_HEIGHT = 17.0
HUD_CHAR_WIDTH = 7.0
# Index of the failures line in describe_node output
FAILURES_LINE = 2


def node_color(node: GraphNode) -> RGBA:
    """Palette entry for the node's kind and ordinal, or the warning color for failing nodes."""
    if node.failure_ratio > FAILURE_RATIO_WARNING:
        return WARNING_COLOR
    palette = REPO_PALETTE if node.kind is NodeKind.REPO else TOOL_PALETTE
    return palette[node.color_index % len(palette)]


def edge_width(edge: GraphEdge) -> float:
    if edge.kind is EdgeKind.REPO_REPO:
        return min(edge.weight * 1.5, 6.0)
    return min(0.5 + edge.weight * 0.5, 3.0)


def describe_node(node: GraphNode) -> List[str]:
    """Lines for the info panel; the failures line, when present, is at FAILURES_LINE."""
    lines = [
        node.label,
        f"{node.command_count} commands · {node.session_count} sessions",
    ]
    if node.failure_count > 0:
        lines.append(f"{node.failure_count} failures")
    if node.branches:
        lines.append(f"branches: {', '.join(node.branches)}")
    if node.repos:
        lines.append(f"repos: {', '.join(node.repos)}")
    if node.last_active is not None:
        lines.append(f"last active: {node.last_active.date().isoformat()}")
    return lines


class Renderer:
    """Draws one frame of the graph view onto a Surface."""

    def __init__(self):
        self.frame = 0

    def render(
        self,
        surface: Surface,
        model: GraphModel,
        camera: Camera,
        interaction: InteractionState,
        status: str = "",
    ) -> None:
        surface.reset_transform()
        surface.clear(BACKGROUND)
        surface.set_transform(camera.zoom, camera.pan_x, camera.pan_y)

        self._draw_grid(surface, camera)

        hovered_idx = model.index_of(interaction.hovered)
        selected_idx = model.index_of(interaction.selected)
        neighborhood: Optional[Set[int]] = None
        if hovered_idx is not None:
            neighborhood = model.neighbors(interaction.hovered) | {hovered_idx}

        self._draw_edges(surface, model, hovered_idx, selected_idx)
        self._draw_particles(surface, model, hovered_idx)
        self._draw_nodes(surface, model, interaction, neighborhood)

        surface.reset_transform()
        self._draw_hud(surface, interaction, status)
        self.frame += 1

    def _draw_grid(self, surface: Surface, camera: Camera) -> None:
        left, top, right, bottom = camera.visible_world_rect()
        spacing = GRID_SPACING
        while ((right - left) / spacing + 1) * ((bottom - top) / spacing + 1) > MAX_GRID_DOTS:
            spacing *= 2
        points = []
        x = math.floor(left / spacing) * spacing
        while x <= right:
            y = math.floor(top / spacing) * spacing
            while y <= bottom:
                points.append((x, y))
                y += spacing
            x += spacing
        if points:
            surface.dots(points, 1.0, GRID_COLOR)

    def _draw_edges(
        self,
        surface: Surface,
        model: GraphModel,
        hovered_idx: Optional[int],
        selected_idx: Optional[int],
    ) -> None:
        for edge in model.edges:
            a, b = model.endpoints(edge)
            active = edge.touches(hovered_idx) or edge.touches(selected_idx)
            width = edge_width(edge)
            if edge.kind is EdgeKind.REPO_REPO:
                alpha, dash = 0.35, None
            else:
                alpha, dash = 0.18, (4.0, 4.0)
            if active:
                width *= 1.6
                alpha = min(1.0, alpha * 2.5)
            surface.gradient_line(
                (a.x, a.y), (b.x, b.y),
                with_alpha(node_color(a), alpha),
                with_alpha(node_color(b), alpha),
                width,
                dash=dash,
            )

    def _draw_particles(self, surface: Surface, model: GraphModel, hovered_idx: Optional[int]) -> None:
        for particle in model.particles:
            particle.advance()
            edge = model.edges[particle.edge_index]
            a, b = model.endpoints(edge)
            x = a.x + (b.x - a.x) * particle.t
            y = a.y + (b.y - a.y) * particle.t
            color = lerp_color(node_color(a), node_color(b), particle.t)
            if edge.touches(hovered_idx):
                surface.circle((x, y), 2.2, fill=with_alpha(color, 0.95))
            else:
                surface.circle((x, y), 1.6, fill=with_alpha(color, 0.5))

    def _draw_nodes(
        self,
        surface: Surface,
        model: GraphModel,
        interaction: InteractionState,
        neighborhood: Optional[Set[int]],
    ) -> None:
        for node in model.draw_order(interaction.hovered, interaction.selected):
            base = node_color(node)
            alpha = 1.0
            if neighborhood is not None and model.index_of(node) not in neighborhood:
                alpha = DIM_ALPHA
            active = node is interaction.hovered or node is interaction.selected
            center = (node.x, node.y)

            if active:
                pulse = math.sin(self.frame * PULSE_RATE + node.phase) * PULSE_AMPLITUDE
                surface.circle(center, node.radius + GLOW_OFFSET + pulse,
                               outline=with_alpha(base, 0.45), width=2.0)

            surface.radial_circle(
                center, node.radius,
                inner=with_alpha(lerp_color(base, WHITE, 0.35), alpha),
                outer=with_alpha(base, alpha),
            )
            if node is interaction.selected:
                surface.circle(center, node.radius + 1.5, outline=with_alpha(WHITE, 0.8), width=1.5)

            font_size = max(11.0, min(14.0, node.radius * 0.45))
            surface.text((node.x, node.y + node.radius + LABEL_GAP), node.label,
                         with_alpha(LABEL_COLOR, alpha), font_size)

            if node.kind is NodeKind.REPO and node.radius > COUNT_MIN_RADIUS:
                surface.text(center, str(node.command_count),
                             with_alpha(COUNT_COLOR, alpha * COUNT_COLOR[3] / 255),
                             math.floor(node.radius * 0.5))

    def _draw_hud(self, surface: Surface, interaction: InteractionState, status: str) -> None:
        focus = interaction.focus
        if focus is not None:
            lines = describe_node(focus)
            width = max(len(line) for line in lines) * HUD_CHAR_WIDTH + 2 * HUD_MARGIN
            height = len(lines) * HUD_LINE_HEIGHT + HUD_MARGIN
            surface.rect((HUD_MARGIN, HUD_MARGIN),
                         (HUD_MARGIN + width, HUD_MARGIN + height),
                         fill=PANEL_FILL, outline=PANEL_BORDER)
            for i, line in enumerate(lines):
                color = LABEL_COLOR if i == 0 else MUTED_COLOR
                if i == FAILURES_LINE and focus.failure_count > 0:
                    color = WARNING_COLOR
                surface.text((2 * HUD_MARGIN, HUD_MARGIN * 1.5 + i * HUD_LINE_HEIGHT),
                             line, color, 13 if i == 0 else 12, align="left")
        if status:
            surface.text((HUD_MARGIN, surface.height - HUD_MARGIN - HUD_LINE_HEIGHT),
                         status, MUTED_COLOR, 12, align="left")
