"""
Live tkinter window for the graph view.

Each frame is rasterised by the PillowSurface and shown through a
PhotoImage. Tk events are translated into InputEvents; everything else is
the GraphView's business.
"""

import logging
import random
import tkinter as tk
from typing import Callable, Optional

from PIL import ImageTk

from .interaction import DrillDownRequest, EventKind, InputEvent
from .loader import GraphSource
from .scheduler import FrameScheduler
from .surface import PillowSurface
from .view import GraphView

logger = logging.getLogger(__name__)

WINDOW_TITLE = "recall graph"


class GraphWindow:
    """
    Top-level window hosting one GraphView.

    Minimising the window hides the view (frame loop stops); restoring it
    resumes without reloading. F5 reloads, ``l`` re-scatters the layout.
    """

    def __init__(
        self,
        source: GraphSource,
        width: int = 1200,
        height: int = 800,
        frame_interval_ms: int = 16,
        on_drill_down: Optional[Callable[[DrillDownRequest], None]] = None,
        seed: Optional[int] = None,
    ):
        self.root = tk.Tk()
        self.root.title(WINDOW_TITLE)
        self.root.geometry(f"{width}x{height}")
        self.root.protocol("WM_DELETE_WINDOW", self.close)

        self.display = tk.Label(self.root, borderwidth=0, highlightthickness=0, background="#0a0e14")
        self.display.pack(fill=tk.BOTH, expand=True)
        self._photo: Optional[ImageTk.PhotoImage] = None
        self._size = (width, height)
        self._on_drill_down = on_drill_down

        self.view = GraphView(
            source,
            width=width,
            height=height,
            surface=PillowSurface(width, height),
            on_drill_down=self._drill_down,
            background=True,
            rng=random.Random(seed),
        )
        self.scheduler = FrameScheduler(
            self._tick,
            lambda callback: self.root.after(frame_interval_ms, callback),
            self.root.after_cancel,
        )
        self._bind_events()

    def _bind_events(self) -> None:
        d = self.display
        d.bind("<Motion>", lambda e: self._pointer(EventKind.POINTER_MOVE, e))
        d.bind("<ButtonPress-1>", lambda e: self._pointer(EventKind.POINTER_DOWN, e))
        d.bind("<ButtonRelease-1>", lambda e: self._pointer(EventKind.POINTER_UP, e))
        d.bind("<Double-Button-1>", lambda e: self._pointer(EventKind.DOUBLE_CLICK, e))
        d.bind("<Leave>", lambda e: self._pointer(EventKind.POINTER_LEAVE, e))
        d.bind("<MouseWheel>", lambda e: self._wheel(e, e.delta))
        # X11 reports wheel motion as buttons 4/5
        d.bind("<Button-4>", lambda e: self._wheel(e, 1))
        d.bind("<Button-5>", lambda e: self._wheel(e, -1))
        d.bind("<Configure>", self._on_configure)
        self.root.bind("<Key>", self._on_key)
        self.root.bind("<Unmap>", self._on_unmap)
        self.root.bind("<Map>", self._on_map)

    # --- Event translation ---

    def _pointer(self, kind: EventKind, event: tk.Event) -> None:
        self.view.dispatch(InputEvent(kind, x=event.x, y=event.y))

    def _wheel(self, event: tk.Event, delta: float) -> None:
        self.view.dispatch(InputEvent(EventKind.WHEEL, x=event.x, y=event.y, delta=delta))

    def _on_key(self, event: tk.Event) -> None:
        if event.keysym == "F5":
            self.view.request_reload()
        elif event.keysym == "l":
            self.view.reset_layout()
        else:
            self.view.dispatch(InputEvent(EventKind.KEY, key=event.keysym))

    def _on_configure(self, event: tk.Event) -> None:
        size = (event.width, event.height)
        if size != self._size and event.width > 1 and event.height > 1:
            self._size = size
            self.view.resize(*size)

    def _on_unmap(self, event: tk.Event) -> None:
        if event.widget is self.root:
            self.view.hide()
            self.scheduler.stop()

    def _on_map(self, event: tk.Event) -> None:
        if event.widget is self.root:
            self.view.show()
            self.scheduler.start()

    def _drill_down(self, request: DrillDownRequest) -> None:
        self.root.title(f"{WINDOW_TITLE} - {request.kind}: {request.label}")
        if self._on_drill_down:
            self._on_drill_down(request)

    # --- Loop ---

    def _tick(self) -> None:
        self.view.frame()
        self._photo = ImageTk.PhotoImage(self.view.surface.image)
        self.display.configure(image=self._photo)

    def run(self) -> None:
        self.view.show()
        self.scheduler.start()
        self.root.mainloop()

    def close(self) -> None:
        self.scheduler.stop()
        self.view.teardown()
        self.root.destroy()
