"""
GraphView - the engine context for the graph visualization.

Owns the data model, camera, physics engine, interaction controller,
renderer, drawing surface and frame scheduler, and exposes the lifecycle
the host drives:

- show() / hide(): visibility toggle; first show triggers the load
- request_reload(): rebuild the model from the source
- resize(w, h): viewport change; positions and camera are kept
- dispatch(event): raw input
- teardown(): stop for good; late fetch results are ignored

Nothing outside this object writes the model, camera or interaction state.
"""

import logging
import queue
import random
import threading
from typing import Any, Callable, Optional, Tuple

from ..core.types import GraphPayload
from .camera import Camera
from .interaction import DrillDownRequest, InputEvent, InteractionController
from .loader import GraphLoadError, GraphSource
from .model import GraphModel, build_model, rescatter
from .physics import PhysicsEngine
from .render import Renderer
from .scheduler import FrameScheduler
from .surface import PillowSurface, Surface

logger = logging.getLogger(__name__)

STATUS_LOADING = "Loading…"
STATUS_FAILED = "Failed to load"

LoadResult = Tuple[int, Optional[GraphPayload], Optional[GraphLoadError]]


class GraphView:
    """
    Args:
        source: Where the graph payload comes from.
        width, height: Initial viewport size in pixels.
        surface: Drawing target; a PillowSurface of the viewport size by default.
        request_frame, cancel_frame: Platform frame hooks for the scheduler.
            Without them the view is driven manually via frame()/run_frames().
        on_drill_down: Receives DrillDownRequests from double-click / Enter.
        background: Fetch payloads on a worker thread instead of inline.
        rng: Random source for layout scatter, phases and particles.
    """

    def __init__(
        self,
        source: GraphSource,
        width: int = 1200,
        height: int = 800,
        surface: Optional[Surface] = None,
        request_frame: Optional[Callable[[Callable[[], None]], Any]] = None,
        cancel_frame: Optional[Callable[[Any], None]] = None,
        on_drill_down: Optional[Callable[[DrillDownRequest], None]] = None,
        background: bool = False,
        rng: Optional[random.Random] = None,
    ):
        self.source = source
        self.rng = rng or random.Random()
        self.background = background

        self.camera = Camera()
        self.camera.resize(width, height)
        self.camera.reset()
        self.physics = PhysicsEngine()
        self.interaction = InteractionController(self.camera, self.physics, on_drill_down=on_drill_down)
        self.renderer = Renderer()
        self.surface = surface if surface is not None else PillowSurface(width, height)
        self.model = GraphModel()
        self.status = ""
        self.last_error: Optional[GraphLoadError] = None

        self.scheduler: Optional[FrameScheduler] = None
        if request_frame is not None:
            self.scheduler = FrameScheduler(self.frame, request_frame, cancel_frame)

        self.visible = False
        self._generation = 0
        self._reload_requested = False
        self._torn_down = False
        self._inbox: "queue.Queue[LoadResult]" = queue.Queue()

    @property
    def viewport(self) -> Tuple[float, float]:
        return self.camera.viewport_width, self.camera.viewport_height

    # --- Loading ---

    def load(self) -> bool:
        """Fetch and apply a payload synchronously. Returns True on success."""
        generation = self._begin_load()
        self._fetch(generation)
        return self.poll()

    def request_load(self) -> int:
        """Start a load (inline or on a worker thread); returns its generation."""
        generation = self._begin_load()
        if self.background:
            worker = threading.Thread(target=self._fetch, args=(generation,), daemon=True)
            worker.start()
        else:
            self._fetch(generation)
            self.poll()
        return generation

    def request_reload(self) -> None:
        """Rebuild from the source now if visible, otherwise on the next show()."""
        if self.visible:
            self.request_load()
        else:
            self._reload_requested = True

    def poll(self) -> bool:
        """Apply finished loads. Returns True if a current load was applied successfully."""
        applied = False
        while True:
            try:
                generation, payload, error = self._inbox.get_nowait()
            except queue.Empty:
                return applied
            applied = self.apply_load(generation, payload, error)

    def apply_load(
        self,
        generation: int,
        payload: Optional[GraphPayload],
        error: Optional[GraphLoadError] = None,
    ) -> bool:
        """
        Replace the model with one built from ``payload``.

        Results from a superseded load, or arriving after teardown, are ignored.
        """
        if self._torn_down or generation != self._generation:
            logger.debug(f"Ignoring stale graph load (generation {generation})")
            return False

        self.last_error = error
        if error is not None or payload is None:
            logger.error(f"Graph load failed: {error}")
            self.model = GraphModel()
            self.interaction.reset(self.model)
            self.status = STATUS_FAILED
            return False

        self.model = build_model(payload, self.viewport, self.rng)
        self.camera.reset()
        self.interaction.reset(self.model)
        self.physics.wake()
        self.status = self._summary()
        logger.info(f"Loaded graph from {self.source!r}: {self.status}")
        return True

    def _begin_load(self) -> int:
        self._generation += 1
        self.status = STATUS_LOADING
        return self._generation

    def _fetch(self, generation: int) -> None:
        try:
            payload = self.source.load()
        except GraphLoadError as e:
            self._inbox.put((generation, None, e))
            return
        except Exception as e:
            # Every load reports back, including unexpected failures
            logger.exception(f"Unexpected error loading graph from {self.source!r}")
            error = GraphLoadError(f"Unexpected error loading graph: {e}")
            error.__cause__ = e
            self._inbox.put((generation, None, error))
            return
        self._inbox.put((generation, payload, None))

    def _summary(self) -> str:
        return (
            f"{self.model.repo_count} repos · {self.model.tool_count} tools · "
            f"{len(self.model.edges)} connections"
        )

    # --- Lifecycle ---

    def show(self) -> None:
        """View became visible: load on first activation, then run the frame loop."""
        if self._torn_down or self.visible:
            return
        self.visible = True
        if self._generation == 0 or self._reload_requested:
            self._reload_requested = False
            self.request_load()
        if self.scheduler is not None:
            self.scheduler.start()

    def hide(self) -> None:
        """View switched away: stop scheduling frames; the model is kept."""
        self.visible = False
        if self.scheduler is not None:
            self.scheduler.stop()

    def teardown(self) -> None:
        self.hide()
        self._torn_down = True
        self.model = GraphModel()
        self.interaction.reset(self.model)

    def resize(self, width: int, height: int) -> None:
        self.camera.resize(width, height)
        self.surface.resize(width, height)

    def reset_layout(self) -> None:
        """Scatter the nodes again and let the simulation re-run."""
        rescatter(self.model, self.viewport, self.rng)
        self.physics.wake()

    # --- Frames ---

    def dispatch(self, event: InputEvent) -> None:
        self.interaction.dispatch(event, self.model)

    def simulate(self) -> bool:
        return self.physics.step(self.model, dragging=self.interaction.state.dragging)

    def render(self) -> None:
        self.renderer.render(self.surface, self.model, self.camera, self.interaction.state, self.status)

    def frame(self) -> None:
        """One scheduler tick: apply finished loads, then simulate fully before rendering."""
        self.poll()
        self.simulate()
        self.render()

    def run_frames(self, count: int, until_settled: bool = False) -> int:
        """Drive ``count`` frames without a scheduler; returns the number run."""
        ran = 0
        for _ in range(count):
            self.frame()
            ran += 1
            if until_settled and self.physics.settled:
                break
        return ran

    def settle(self, max_frames: int) -> int:
        """Simulate without drawing until the layout rests; returns frames stepped."""
        ran = 0
        while ran < max_frames and not self.physics.settled:
            self.simulate()
            ran += 1
        return ran
