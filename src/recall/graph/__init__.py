"""
Graph visualization engine.

- model: Nodes, edges and particles built from a payload
- physics: Force-directed layout
- camera: Pan/zoom transform
- interaction: Hit testing and the input state machine
- render / surface: Per-frame drawing
- scheduler: Frame loop
- view: GraphView, the context tying it all together
- window: Live tkinter host (imported on demand)
"""

from .camera import Camera
from .interaction import (
    DrillDownRequest,
    EventKind,
    InputEvent,
    InteractionController,
    InteractionState,
    State,
    find_node_at,
)
from .loader import FileGraphSource, GraphLoadError, HttpGraphSource, parse_payload
from .model import GraphEdge, GraphModel, GraphNode, Particle, build_model
from .physics import PhysicsEngine
from .render import Renderer
from .scheduler import FrameScheduler, LoopState
from .surface import PillowSurface, Surface
from .view import GraphView

__all__ = [
    # Model
    "GraphNode", "GraphEdge", "Particle", "GraphModel", "build_model",
    # Simulation
    "PhysicsEngine", "Camera",
    # Interaction
    "InteractionController", "InteractionState", "InputEvent", "EventKind",
    "State", "DrillDownRequest", "find_node_at",
    # Drawing
    "Renderer", "Surface", "PillowSurface",
    # Loop and loading
    "FrameScheduler", "LoopState",
    "GraphView", "GraphLoadError", "FileGraphSource", "HttpGraphSource", "parse_payload",
]
