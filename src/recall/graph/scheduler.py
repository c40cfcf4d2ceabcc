"""
Frame scheduler.

Runs one tick (simulate + render) per platform frame callback while the
graph view is visible. The platform hook is injected: the tkinter window
passes ``root.after``; tests pass a list-appending stub and fire frames by hand.
"""

import logging
from enum import Enum
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

FrameCallback = Callable[[], None]


class LoopState(Enum):
    STOPPED = "stopped"
    RUNNING = "running"


class FrameScheduler:
    """
    Self-rescheduling frame loop with an explicit run flag.

    Args:
        tick: Work for one frame.
        request_frame: Schedules a callback for the next display frame and
            returns a handle.
        cancel_frame: Cancels a pending handle; optional.
    """

    def __init__(
        self,
        tick: FrameCallback,
        request_frame: Callable[[FrameCallback], Any],
        cancel_frame: Optional[Callable[[Any], None]] = None,
    ):
        self._tick = tick
        self._request_frame = request_frame
        self._cancel_frame = cancel_frame
        self._pending: Any = None
        self.state = LoopState.STOPPED
        self.frames = 0

    @property
    def running(self) -> bool:
        return self.state is LoopState.RUNNING

    def start(self) -> None:
        if self.running:
            return
        self.state = LoopState.RUNNING
        logger.debug("Frame loop started")
        self._schedule()

    def stop(self) -> None:
        if not self.running:
            return
        self.state = LoopState.STOPPED
        if self._pending is not None and self._cancel_frame is not None:
            self._cancel_frame(self._pending)
        self._pending = None
        logger.debug(f"Frame loop stopped after {self.frames} frames")

    def _schedule(self) -> None:
        self._pending = self._request_frame(self._on_frame)

    def _on_frame(self) -> None:
        self._pending = None
        # A frame that was already queued when stop() ran is a no-op
        if not self.running:
            return
        self._tick()
        self.frames += 1
        if self.running:
            self._schedule()
