"""
Drawing surface for the renderer.

``Surface`` is the small canvas-like API the renderer draws through: a
current world->screen transform plus a handful of primitives. The
``PillowSurface`` implementation rasterises into a PIL image, which is
what both the headless snapshot command and the tkinter window display.

Colors are RGBA tuples with 0-255 channels.
"""

import math
from typing import Dict, Iterable, Iterator, Optional, Protocol, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

RGBA = Tuple[int, int, int, int]
Point = Tuple[float, float]

GRADIENT_LINE_SEGMENTS = 10
RADIAL_STEPS = 10


def hex_to_rgba(value: str, alpha: float = 1.0) -> RGBA:
    """'#42d77d' -> (66, 215, 125, 255)"""
    value = value.lstrip("#")
    r, g, b = (int(value[i:i + 2], 16) for i in (0, 2, 4))
    return r, g, b, int(round(255 * max(0.0, min(1.0, alpha))))


def with_alpha(color: RGBA, alpha: float) -> RGBA:
    """Replace the alpha channel (0.0 - 1.0)."""
    return color[0], color[1], color[2], int(round(255 * max(0.0, min(1.0, alpha))))


def lerp_color(c1: RGBA, c2: RGBA, t: float) -> RGBA:
    """Linear interpolation between two RGBA colors."""
    t = max(0.0, min(1.0, t))
    return tuple(int(a + (b - a) * t) for a, b in zip(c1, c2))  # type: ignore[return-value]


class Surface(Protocol):
    """What the renderer needs from a drawing target."""

    width: int
    height: int

    def resize(self, width: int, height: int) -> None: ...
    def clear(self, color: RGBA) -> None: ...
    def set_transform(self, zoom: float, pan_x: float, pan_y: float) -> None: ...
    def reset_transform(self) -> None: ...
    def dots(self, points: Sequence[Point], radius: float, color: RGBA) -> None: ...
    def gradient_line(self, p1: Point, p2: Point, start: RGBA, end: RGBA, width: float,
                      dash: Optional[Tuple[float, float]] = None) -> None: ...
    def circle(self, center: Point, radius: float, fill: Optional[RGBA] = None,
               outline: Optional[RGBA] = None, width: float = 1.0) -> None: ...
    def radial_circle(self, center: Point, radius: float, inner: RGBA, outer: RGBA) -> None: ...
    def text(self, pos: Point, text: str, color: RGBA, size: float, align: str = "center") -> None: ...
    def rect(self, top_left: Point, bottom_right: Point, fill: RGBA,
             outline: Optional[RGBA] = None) -> None: ...


def dash_segments(p1: Point, p2: Point, pattern: Tuple[float, float]) -> Iterator[Tuple[float, float]]:
    """
    Yield (t_start, t_end) parameter ranges of the 'on' parts of a dashed line.
    """
    length = math.hypot(p2[0] - p1[0], p2[1] - p1[1])
    on, off = pattern
    if length == 0 or on <= 0:
        return
    period = on + max(0.0, off)
    pos = 0.0
    while pos < length:
        yield pos / length, min(pos + on, length) / length
        pos += period


def _chunks(count: int) -> Iterator[Tuple[float, float]]:
    for i in range(count):
        yield i / count, (i + 1) / count


def _lerp_point(p1: Point, p2: Point, t: float) -> Point:
    return p1[0] + (p2[0] - p1[0]) * t, p1[1] + (p2[1] - p1[1]) * t


class PillowSurface:
    """
    Surface backed by a PIL RGB image drawn with alpha blending.
    """

    def __init__(self, width: int, height: int, background: RGBA = (10, 14, 20, 255)):
        self.background = background
        self._fonts: Dict[int, ImageFont.ImageFont] = {}
        self._zoom = 1.0
        self._pan = (0.0, 0.0)
        self.resize(width, height)

    def resize(self, width: int, height: int) -> None:
        self.width = max(1, int(width))
        self.height = max(1, int(height))
        self.image = Image.new("RGB", (self.width, self.height), self.background[:3])
        self._draw = ImageDraw.Draw(self.image, "RGBA")

    def save(self, path) -> None:
        self.image.save(path)

    # --- Transform ---

    def set_transform(self, zoom: float, pan_x: float, pan_y: float) -> None:
        self._zoom = zoom
        self._pan = (pan_x, pan_y)

    def reset_transform(self) -> None:
        self._zoom = 1.0
        self._pan = (0.0, 0.0)

    def _pt(self, p: Point) -> Point:
        return p[0] * self._zoom + self._pan[0], p[1] * self._zoom + self._pan[1]

    def _len(self, value: float) -> float:
        return value * self._zoom

    # --- Primitives ---

    def clear(self, color: RGBA) -> None:
        self._draw.rectangle((0, 0, self.width, self.height), fill=color[:3])

    def dots(self, points: Sequence[Point], radius: float, color: RGBA) -> None:
        r = self._len(radius)
        if r < 1.0:
            self._draw.point([self._pt(p) for p in points], fill=color)
            return
        for p in points:
            x, y = self._pt(p)
            self._draw.ellipse((x - r, y - r, x + r, y + r), fill=color)

    def gradient_line(self, p1: Point, p2: Point, start: RGBA, end: RGBA, width: float,
                      dash: Optional[Tuple[float, float]] = None) -> None:
        a, b = self._pt(p1), self._pt(p2)
        stroke = max(1, int(round(self._len(width))))
        if dash is not None:
            pieces: Iterable[Tuple[float, float]] = dash_segments(
                a, b, (self._len(dash[0]), self._len(dash[1])))
        elif start == end:
            pieces = [(0.0, 1.0)]
        else:
            pieces = _chunks(GRADIENT_LINE_SEGMENTS)
        for t0, t1 in pieces:
            color = lerp_color(start, end, (t0 + t1) / 2)
            self._draw.line([_lerp_point(a, b, t0), _lerp_point(a, b, t1)], fill=color, width=stroke)

    def circle(self, center: Point, radius: float, fill: Optional[RGBA] = None,
               outline: Optional[RGBA] = None, width: float = 1.0) -> None:
        x, y = self._pt(center)
        r = self._len(radius)
        if r <= 0:
            return
        self._draw.ellipse(
            (x - r, y - r, x + r, y + r),
            fill=fill,
            outline=outline,
            width=max(1, int(round(self._len(width)))) if outline else 0,
        )

    def radial_circle(self, center: Point, radius: float, inner: RGBA, outer: RGBA) -> None:
        """Filled disc shading from ``outer`` at the rim to ``inner`` near the upper left."""
        x, y = self._pt(center)
        r = self._len(radius)
        if r <= 0:
            return
        steps = max(1, min(RADIAL_STEPS, int(r)))
        for i in range(steps):
            t = i / steps
            rr = r * (1.0 - t * 0.85)
            # Highlight drifts toward the upper left like a lit sphere
            cx = x - r * 0.3 * t
            cy = y - r * 0.3 * t
            self._draw.ellipse((cx - rr, cy - rr, cx + rr, cy + rr), fill=lerp_color(outer, inner, t))

    def text(self, pos: Point, text: str, color: RGBA, size: float, align: str = "center") -> None:
        x, y = self._pt(pos)
        font = self._font(self._len(size))
        left, top, right, bottom = self._draw.textbbox((0, 0), text, font=font)
        w, h = right - left, bottom - top
        if align == "center":
            origin = (x - w / 2 - left, y - h / 2 - top)
        else:
            origin = (x - left, y - top)
        self._draw.text(origin, text, fill=color, font=font)

    def rect(self, top_left: Point, bottom_right: Point, fill: RGBA,
             outline: Optional[RGBA] = None) -> None:
        (x0, y0), (x1, y1) = self._pt(top_left), self._pt(bottom_right)
        self._draw.rectangle((x0, y0, x1, y1), fill=fill, outline=outline)

    def _font(self, size: float):
        key = max(6, int(round(size)))
        if key not in self._fonts:
            self._fonts[key] = ImageFont.load_default(size=key)
        return self._fonts[key]
