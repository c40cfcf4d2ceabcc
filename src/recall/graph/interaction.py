"""
Pointer and keyboard interaction for the graph view.

Raw input is normalised into ``InputEvent`` records (independent of any GUI
toolkit) and routed through an explicit (state, event kind) dispatch table.

States:
- IDLE: pointer over empty space
- HOVERING: pointer over a node
- DRAGGING: a node is held and follows the pointer
- PANNING: empty space is held and the camera follows the pointer

Selection is orthogonal to the state and survives hover changes and
pointer-leave.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from ..core.types import NodeKind
from .camera import Camera
from .model import GraphModel, GraphNode
from .physics import PhysicsEngine

logger = logging.getLogger(__name__)

# Enlarges the clickable disc beyond the visible circle
HIT_PADDING = 5.0


class State(Enum):
    IDLE = "idle"
    HOVERING = "hovering"
    DRAGGING = "dragging"
    PANNING = "panning"


class EventKind(Enum):
    POINTER_MOVE = "pointer_move"
    POINTER_DOWN = "pointer_down"
    POINTER_UP = "pointer_up"
    POINTER_LEAVE = "pointer_leave"
    DOUBLE_CLICK = "double_click"
    WHEEL = "wheel"
    KEY = "key"


@dataclass(frozen=True)
class InputEvent:
    """
    A toolkit-neutral input event in screen coordinates.

    ``delta`` is the wheel direction (positive zooms in); ``key`` is a key
    name such as ``"Escape"`` or ``"Return"``.
    """
    kind: EventKind
    x: float = 0.0
    y: float = 0.0
    delta: float = 0.0
    key: Optional[str] = None


@dataclass(frozen=True)
class DrillDownRequest:
    """Ask the detail collaborator to show the history behind a node."""
    kind: NodeKind
    label: str


@dataclass
class InteractionState:
    hovered: Optional[GraphNode] = None
    selected: Optional[GraphNode] = None
    dragging: Optional[GraphNode] = None
    panning: bool = False
    last_pointer: Optional[Tuple[float, float]] = None

    @property
    def state(self) -> State:
        if self.dragging is not None:
            return State.DRAGGING
        if self.panning:
            return State.PANNING
        if self.hovered is not None:
            return State.HOVERING
        return State.IDLE

    @property
    def focus(self) -> Optional[GraphNode]:
        """Node shown in the info panel."""
        return self.hovered or self.selected

    def release_pointer(self) -> None:
        self.hovered = None
        self.dragging = None
        self.panning = False
        self.last_pointer = None


def find_node_at(
    model: GraphModel,
    camera: Camera,
    sx: float,
    sy: float,
    hovered: Optional[GraphNode] = None,
    selected: Optional[GraphNode] = None,
) -> Optional[GraphNode]:
    """
    Topmost node under a screen point.

    Scans the draw order back to front so that of two overlapping nodes the
    one drawn last wins.
    """
    wx, wy = camera.screen_to_world(sx, sy)
    for node in reversed(model.draw_order(hovered, selected)):
        dx = wx - node.x
        dy = wy - node.y
        reach = node.radius + HIT_PADDING
        if dx * dx + dy * dy < reach * reach:
            return node
    return None


Handler = Callable[[InputEvent, GraphModel], None]


class InteractionController:
    """
    Routes input events to handlers that mutate the camera, the interaction
    state and (for drags) node positions.
    """

    def __init__(
        self,
        camera: Camera,
        physics: PhysicsEngine,
        on_drill_down: Optional[Callable[[DrillDownRequest], None]] = None,
    ):
        self.camera = camera
        self.physics = physics
        self.state = InteractionState()
        self.on_drill_down = on_drill_down
        self._handlers: Dict[Tuple[State, EventKind], Handler] = {
            (State.IDLE, EventKind.POINTER_MOVE): self._hover,
            (State.HOVERING, EventKind.POINTER_MOVE): self._hover,
            (State.DRAGGING, EventKind.POINTER_MOVE): self._drag_to,
            (State.PANNING, EventKind.POINTER_MOVE): self._pan_to,
            (State.IDLE, EventKind.POINTER_DOWN): self._press,
            (State.HOVERING, EventKind.POINTER_DOWN): self._press,
            (State.DRAGGING, EventKind.POINTER_UP): self._release_node,
            (State.PANNING, EventKind.POINTER_UP): self._release_pan,
        }
        for state in State:
            self._handlers[(state, EventKind.POINTER_LEAVE)] = self._leave
            self._handlers[(state, EventKind.DOUBLE_CLICK)] = self._double_click
            self._handlers[(state, EventKind.WHEEL)] = self._wheel
            self._handlers[(state, EventKind.KEY)] = self._key

    def dispatch(self, event: InputEvent, model: GraphModel) -> None:
        """Handle one event. Events with no entry for the current state are ignored."""
        handler = self._handlers.get((self.state.state, event.kind))
        if handler is None:
            return
        handler(event, model)

    def reset(self, model: GraphModel) -> None:
        """
        Forget transient state after a reload; keep the selection when the
        selected id survives in the new model.
        """
        selected = self.state.selected
        self.state = InteractionState()
        if selected is not None:
            self.state.selected = model.get(selected.id)

    def _hit(self, event: InputEvent, model: GraphModel) -> Optional[GraphNode]:
        return find_node_at(
            model, self.camera, event.x, event.y,
            hovered=self.state.hovered, selected=self.state.selected,
        )

    # --- Handlers ---

    def _hover(self, event: InputEvent, model: GraphModel) -> None:
        self.state.hovered = self._hit(event, model)
        self.state.last_pointer = (event.x, event.y)

    def _press(self, event: InputEvent, model: GraphModel) -> None:
        node = self._hit(event, model)
        self.state.last_pointer = (event.x, event.y)
        if node is not None:
            self.state.dragging = node
            self.state.hovered = node
            node.vx = node.vy = 0.0
            self.physics.wake()
        else:
            self.state.panning = True

    def _drag_to(self, event: InputEvent, model: GraphModel) -> None:
        node = self.state.dragging
        node.x, node.y = self.camera.screen_to_world(event.x, event.y)
        node.vx = node.vy = 0.0
        self.state.last_pointer = (event.x, event.y)
        self.physics.wake()

    def _pan_to(self, event: InputEvent, model: GraphModel) -> None:
        last_x, last_y = self.state.last_pointer or (event.x, event.y)
        self.camera.pan_by(event.x - last_x, event.y - last_y)
        self.state.last_pointer = (event.x, event.y)

    def _release_node(self, event: InputEvent, model: GraphModel) -> None:
        node = self.state.dragging
        self.state.dragging = None
        hit = self._hit(event, model)
        # Click vs drag is decided only by whether the node is still under the pointer
        if hit is node:
            self.state.selected = None if self.state.selected is node else node
            logger.debug(f"Selection: {self.state.selected.label if self.state.selected else None}")
        self.state.hovered = hit
        self.state.last_pointer = (event.x, event.y)

    def _release_pan(self, event: InputEvent, model: GraphModel) -> None:
        self.state.panning = False
        self.state.hovered = self._hit(event, model)
        self.state.last_pointer = (event.x, event.y)

    def _leave(self, event: InputEvent, model: GraphModel) -> None:
        self.state.release_pointer()

    def _double_click(self, event: InputEvent, model: GraphModel) -> None:
        node = self._hit(event, model)
        if node is None:
            self.camera.reset()
            return
        self._drill_down(node)

    def _wheel(self, event: InputEvent, model: GraphModel) -> None:
        if event.delta == 0:
            return
        self.camera.zoom_at(event.x, event.y, zoom_in=event.delta > 0)

    def _key(self, event: InputEvent, model: GraphModel) -> None:
        if event.key == "Escape":
            self.state.selected = None
        elif event.key == "Return" and self.state.selected is not None:
            self._drill_down(self.state.selected)
        elif event.key in ("r", "R"):
            self.camera.reset()

    def _drill_down(self, node: GraphNode) -> None:
        request = DrillDownRequest(kind=node.kind, label=node.label)
        logger.info(f"Drill-down requested for {node.kind} {node.label!r}")
        if self.on_drill_down:
            self.on_drill_down(request)
