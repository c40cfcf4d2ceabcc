"""
Shared fixtures for the recall graph tests.
"""

import random

import pytest

from recall.core.types import GraphPayload
from recall.graph.loader import parse_payload
from recall.graph.model import build_model

VIEWPORT = (1200, 800)


def sample_data() -> dict:
    """A small payload in the shape served by GET /api/graph."""
    return {
        "nodes": [
            {"id": "api", "label": "api", "type": "repo", "commands": 120, "sessions": 14,
             "failures": 6, "last_active": 1717200000000, "branches": ["main", "feat/auth"]},
            {"id": "web", "label": "web", "type": "repo", "commands": 30, "sessions": 5,
             "failures": 20, "last_active": 1717100000000, "branches": ["main"]},
            {"id": "tool:git", "label": "git", "type": "tool", "commands": 80, "sessions": 12,
             "failures": 1, "repos": ["api", "web"]},
            {"id": "tool:cargo", "label": "cargo", "type": "tool", "commands": 40, "sessions": 6,
             "failures": 4, "repos": ["api"]},
        ],
        "edges": [
            {"source": "api", "target": "web", "type": "repo-repo", "shared_sessions": 3},
            {"source": "api", "target": "tool:git", "type": "repo-tool", "weight": 50},
            {"source": "web", "target": "tool:git", "type": "repo-tool", "weight": 30},
            {"source": "api", "target": "tool:cargo", "type": "repo-tool", "weight": 2},
        ],
    }


@pytest.fixture
def graph_data() -> dict:
    return sample_data()


@pytest.fixture
def payload(graph_data) -> GraphPayload:
    return parse_payload(graph_data)


@pytest.fixture
def model(payload):
    return build_model(payload, VIEWPORT, random.Random(7))


class StaticSource:
    """GraphSource returning a fixed payload, or raising a fixed error."""

    def __init__(self, payload=None, error=None):
        self.payload = payload
        self.error = error
        self.calls = 0

    def load(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.payload


@pytest.fixture
def make_source():
    """Factory for StaticSource instances."""
    return StaticSource


class RecordingSurface:
    """
    Surface that records draw calls instead of rasterising.

    ``calls`` holds (method, args, kwargs) for the current frame only;
    ``clear`` starts a new frame.
    """

    def __init__(self, width=1200, height=800):
        self.width = width
        self.height = height
        self.calls = []
        self.transform = (1.0, 0.0, 0.0)
        self.frames = 0

    def resize(self, width, height):
        self.width = width
        self.height = height

    def clear(self, color):
        self.frames += 1
        self.calls = [("clear", (color,), {})]

    def set_transform(self, zoom, pan_x, pan_y):
        self.transform = (zoom, pan_x, pan_y)
        self.calls.append(("set_transform", (zoom, pan_x, pan_y), {}))

    def reset_transform(self):
        self.transform = (1.0, 0.0, 0.0)
        self.calls.append(("reset_transform", (), {}))

    def __getattr__(self, name):
        if name in ("dots", "gradient_line", "circle", "radial_circle", "text", "rect"):
            def record(*args, **kwargs):
                self.calls.append((name, args, kwargs))
            return record
        raise AttributeError(name)

    def named(self, name):
        return [c for c in self.calls if c[0] == name]

    def texts(self):
        return [args[1] for _, args, _ in self.named("text")]


@pytest.fixture
def recording_surface():
    return RecordingSurface()
