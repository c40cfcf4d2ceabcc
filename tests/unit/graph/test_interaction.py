"""
Unit tests for hit testing and the pointer/keyboard state machine.
"""

import random
from unittest.mock import MagicMock

import pytest

from recall.core.types import NodeKind
from recall.graph.camera import Camera
from recall.graph.interaction import (
    DrillDownRequest,
    EventKind,
    InputEvent,
    InteractionController,
    State,
    find_node_at,
)
from recall.graph.model import GraphModel, build_model
from recall.graph.physics import PhysicsEngine

# World positions; with an 800x600 viewport the origin is at screen (400, 300)
POSITIONS = {
    "api": (0.0, 0.0),
    "web": (300.0, 0.0),
    "tool:git": (-300.0, 0.0),
    "tool:cargo": (0.0, 250.0),
}
EMPTY = (50.0, 50.0)


@pytest.fixture
def camera():
    cam = Camera()
    cam.resize(800, 600)
    cam.reset()
    return cam


@pytest.fixture
def placed(model):
    for node_id, (x, y) in POSITIONS.items():
        node = model.get(node_id)
        node.x, node.y = x, y
    return model


@pytest.fixture
def drill():
    return MagicMock()


@pytest.fixture
def controller(camera, drill):
    return InteractionController(camera, PhysicsEngine(), on_drill_down=drill)


def event(kind, x=0.0, y=0.0, **kwargs):
    return InputEvent(kind, x, y, **kwargs)


def click(controller, model, x, y):
    controller.dispatch(event(EventKind.POINTER_DOWN, x, y), model)
    controller.dispatch(event(EventKind.POINTER_UP, x, y), model)


class TestFindNodeAt:
    """Topmost-node hit testing."""

    def test_hit_inside_radius(self, placed, camera):
        assert find_node_at(placed, camera, 400, 300).id == "api"
        assert find_node_at(placed, camera, 700, 300).id == "web"

    def test_hit_padding(self, placed, camera):
        # web has radius 25; 28px away is inside the padded disc, 31px is not
        assert find_node_at(placed, camera, 728, 300).id == "web"
        assert find_node_at(placed, camera, 731, 300) is None

    def test_miss(self, placed, camera):
        assert find_node_at(placed, camera, *EMPTY) is None

    def test_repo_drawn_over_tool_wins(self, placed, camera):
        git = placed.get("tool:git")
        git.x, git.y = 0.0, 0.0
        assert find_node_at(placed, camera, 400, 300).id == "api"

    def test_hovered_tool_wins_over_repo(self, placed, camera):
        git = placed.get("tool:git")
        git.x, git.y = 0.0, 0.0
        assert find_node_at(placed, camera, 400, 300, hovered=git) is git

    def test_respects_zoom(self, placed, camera):
        camera.zoom_at(400, 300, zoom_in=True)
        # web now sits at 400 + 300 * 1.1
        assert find_node_at(placed, camera, 730, 300).id == "web"


class TestPointer:
    """Hover, click, drag and pan."""

    def test_hover(self, controller, placed):
        controller.dispatch(event(EventKind.POINTER_MOVE, 700, 300), placed)
        assert controller.state.hovered is placed.get("web")
        assert controller.state.state is State.HOVERING

        controller.dispatch(event(EventKind.POINTER_MOVE, *EMPTY), placed)
        assert controller.state.hovered is None
        assert controller.state.state is State.IDLE

    def test_click_toggles_selection(self, controller, placed):
        api = placed.get("api")

        click(controller, placed, 400, 300)
        assert controller.state.selected is api
        assert controller.state.state is State.HOVERING

        click(controller, placed, 400, 300)
        assert controller.state.selected is None

    def test_click_other_node_moves_selection(self, controller, placed):
        click(controller, placed, 400, 300)
        click(controller, placed, 700, 300)
        assert controller.state.selected is placed.get("web")

    def test_press_on_node_starts_drag(self, controller, placed):
        api = placed.get("api")
        api.vx = 4.0
        controller.physics.settled = True

        controller.dispatch(event(EventKind.POINTER_DOWN, 400, 300), placed)

        assert controller.state.state is State.DRAGGING
        assert controller.state.dragging is api
        assert api.vx == 0.0
        assert not controller.physics.settled

    def test_drag_moves_node(self, controller, placed):
        api = placed.get("api")

        controller.dispatch(event(EventKind.POINTER_DOWN, 400, 300), placed)
        controller.dispatch(event(EventKind.POINTER_MOVE, 520, 260), placed)

        assert (api.x, api.y) == (120.0, -40.0)
        assert (api.vx, api.vy) == (0.0, 0.0)

        controller.dispatch(event(EventKind.POINTER_UP, 520, 260), placed)
        assert controller.state.dragging is None

    def test_press_ignored_while_dragging(self, controller, placed):
        controller.dispatch(event(EventKind.POINTER_DOWN, 400, 300), placed)
        controller.dispatch(event(EventKind.POINTER_DOWN, 700, 300), placed)
        assert controller.state.dragging is placed.get("api")

    def test_pan_on_empty_space(self, controller, placed, camera):
        controller.dispatch(event(EventKind.POINTER_DOWN, *EMPTY), placed)
        assert controller.state.state is State.PANNING

        controller.dispatch(event(EventKind.POINTER_MOVE, 70, 80), placed)
        assert (camera.pan_x, camera.pan_y) == (420, 330)

        controller.dispatch(event(EventKind.POINTER_UP, 70, 80), placed)
        assert controller.state.state is State.IDLE
        assert controller.state.selected is None

    def test_leave_keeps_selection(self, controller, placed):
        click(controller, placed, 400, 300)

        controller.dispatch(event(EventKind.POINTER_LEAVE), placed)

        assert controller.state.hovered is None
        assert controller.state.selected is placed.get("api")
        assert controller.state.focus is placed.get("api")

    def test_leave_mid_drag_releases(self, controller, placed):
        controller.dispatch(event(EventKind.POINTER_DOWN, 400, 300), placed)
        controller.dispatch(event(EventKind.POINTER_LEAVE), placed)
        assert controller.state.state is State.IDLE

    def test_wheel_zooms_at_cursor(self, controller, placed, camera):
        controller.dispatch(event(EventKind.WHEEL, 400, 300, delta=1), placed)
        assert camera.zoom > 1.0

        controller.dispatch(event(EventKind.WHEEL, 400, 300, delta=-1), placed)
        controller.dispatch(event(EventKind.WHEEL, 400, 300, delta=-1), placed)
        assert camera.zoom < 1.0


class TestDrillDown:
    """Double-click and keyboard navigation."""

    def test_double_click_node(self, controller, placed, drill):
        controller.dispatch(event(EventKind.DOUBLE_CLICK, 100, 300), placed)
        drill.assert_called_once_with(DrillDownRequest(kind=NodeKind.TOOL, label="git"))

    def test_double_click_empty_resets_camera(self, controller, placed, camera, drill):
        camera.pan_by(50, 50)
        camera.zoom_at(0, 0, zoom_in=True)

        controller.dispatch(event(EventKind.DOUBLE_CLICK, *EMPTY), placed)

        assert (camera.pan_x, camera.pan_y, camera.zoom) == (400, 300, 1.0)
        drill.assert_not_called()

    def test_escape_clears_selection(self, controller, placed):
        click(controller, placed, 400, 300)
        controller.dispatch(event(EventKind.KEY, key="Escape"), placed)
        assert controller.state.selected is None

    def test_return_drills_into_selection(self, controller, placed, drill):
        controller.dispatch(event(EventKind.KEY, key="Return"), placed)
        drill.assert_not_called()

        click(controller, placed, 700, 300)
        controller.dispatch(event(EventKind.KEY, key="Return"), placed)
        drill.assert_called_once_with(DrillDownRequest(kind=NodeKind.REPO, label="web"))

    def test_r_resets_camera(self, controller, placed, camera):
        camera.pan_by(-30, 12)
        controller.dispatch(event(EventKind.KEY, key="r"), placed)
        assert (camera.pan_x, camera.pan_y) == (400, 300)


class TestReset:
    """State after a reload."""

    def test_selection_re_resolved_by_id(self, controller, placed, payload):
        click(controller, placed, 400, 300)
        reloaded = build_model(payload, (800, 600), random.Random(3))

        controller.reset(reloaded)

        assert controller.state.selected is reloaded.get("api")
        assert controller.state.hovered is None
        assert controller.state.state is State.IDLE

    def test_selection_dropped_when_id_gone(self, controller, placed):
        click(controller, placed, 400, 300)
        controller.reset(GraphModel())

        assert controller.state.selected is None
