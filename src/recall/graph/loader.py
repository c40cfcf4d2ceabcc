"""
Graph payload sources.

A source turns "wherever the graph lives" into a validated GraphPayload or
raises GraphLoadError. Individual malformed nodes/edges are dropped and
logged; only a payload whose overall shape is wrong fails the load.
"""

import json
import logging
from pathlib import Path
from typing import Any, Protocol

import requests
from pydantic import ValidationError

from ..core.types import EdgePayload, GraphPayload, NodePayload

logger = logging.getLogger(__name__)

GRAPH_ENDPOINT = "/api/graph"


class GraphLoadError(Exception):
    """The graph payload could not be fetched or is not a graph."""


class GraphSource(Protocol):
    def load(self) -> GraphPayload: ...


def parse_payload(data: Any) -> GraphPayload:
    """
    Validate a decoded JSON payload entry by entry.

    Raises:
        GraphLoadError: If the payload is not an object with list-valued
            ``nodes`` and ``edges``.
    """
    if not isinstance(data, dict):
        raise GraphLoadError(f"Expected a JSON object, got {type(data).__name__}")

    raw_nodes = data.get("nodes") or []
    raw_edges = data.get("edges") or []
    if not isinstance(raw_nodes, list) or not isinstance(raw_edges, list):
        raise GraphLoadError("'nodes' and 'edges' must be lists")

    nodes = []
    for raw in raw_nodes:
        try:
            nodes.append(NodePayload.model_validate(raw))
        except ValidationError as e:
            logger.warning(f"Skipping malformed node {raw!r}: {e.error_count()} error(s)")

    edges = []
    for raw in raw_edges:
        try:
            edges.append(EdgePayload.model_validate(raw))
        except ValidationError as e:
            logger.warning(f"Skipping malformed edge {raw!r}: {e.error_count()} error(s)")

    return GraphPayload(nodes=nodes, edges=edges)


class HttpGraphSource:
    """Fetches the payload from a running recall web server."""

    def __init__(self, base_url: str, timeout: float = 10.0, session: requests.Session | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def url(self) -> str:
        return f"{self.base_url}{GRAPH_ENDPOINT}"

    def load(self) -> GraphPayload:
        logger.debug(f"Fetching graph from {self.url}")
        try:
            resp = self.session.get(self.url, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as e:
            raise GraphLoadError(f"Failed to fetch {self.url}: {e}") from e
        except ValueError as e:
            raise GraphLoadError(f"Invalid JSON from {self.url}: {e}") from e
        return parse_payload(data)

    def __repr__(self) -> str:
        return f"HttpGraphSource({self.base_url!r})"


class FileGraphSource:
    """Reads the payload from a JSON file saved from the graph endpoint."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> GraphPayload:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except OSError as e:
            raise GraphLoadError(f"Cannot read {self.path}: {e}") from e
        except UnicodeDecodeError as e:
            raise GraphLoadError(f"{self.path} is not UTF-8 text: {e}") from e
        except json.JSONDecodeError as e:
            raise GraphLoadError(f"Invalid JSON in {self.path}: {e}") from e
        return parse_payload(data)

    def __repr__(self) -> str:
        return f"FileGraphSource({str(self.path)!r})"
