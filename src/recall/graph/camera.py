"""
Camera: world <-> screen transform with pan and zoom.

screen = world * zoom + pan
"""

from dataclasses import dataclass
from typing import Tuple

MIN_ZOOM = 0.2
MAX_ZOOM = 5.0
ZOOM_STEP = 1.1


@dataclass
class Camera:
    """Pan offset (screen position of the world origin) and zoom factor."""
    viewport_width: float = 0.0
    viewport_height: float = 0.0
    pan_x: float = 0.0
    pan_y: float = 0.0
    zoom: float = 1.0

    def world_to_screen(self, x: float, y: float) -> Tuple[float, float]:
        return x * self.zoom + self.pan_x, y * self.zoom + self.pan_y

    def screen_to_world(self, sx: float, sy: float) -> Tuple[float, float]:
        return (sx - self.pan_x) / self.zoom, (sy - self.pan_y) / self.zoom

    def pan_by(self, dx: float, dy: float) -> None:
        self.pan_x += dx
        self.pan_y += dy

    def zoom_at(self, sx: float, sy: float, zoom_in: bool) -> None:
        """
        Zoom by one wheel step keeping the world point under (sx, sy) fixed.
        """
        factor = ZOOM_STEP if zoom_in else 1.0 / ZOOM_STEP
        new_zoom = max(MIN_ZOOM, min(MAX_ZOOM, self.zoom * factor))
        if new_zoom == self.zoom:
            return
        ratio = new_zoom / self.zoom
        self.pan_x = sx - (sx - self.pan_x) * ratio
        self.pan_y = sy - (sy - self.pan_y) * ratio
        self.zoom = new_zoom

    def reset(self) -> None:
        """Centre the world origin in the viewport at zoom 1."""
        self.pan_x = self.viewport_width / 2
        self.pan_y = self.viewport_height / 2
        self.zoom = 1.0

    def resize(self, width: float, height: float) -> None:
        """Record a new viewport size. Pan and zoom are left alone."""
        self.viewport_width = width
        self.viewport_height = height

    def visible_world_rect(self) -> Tuple[float, float, float, float]:
        """(left, top, right, bottom) of the viewport in world coordinates."""
        left, top = self.screen_to_world(0.0, 0.0)
        right, bottom = self.screen_to_world(self.viewport_width, self.viewport_height)
        return left, top, right, bottom
