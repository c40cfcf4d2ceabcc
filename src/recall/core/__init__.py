"""
Core types for recall graph.

- types: Payload records exchanged with the recall backend (NodePayload, EdgePayload)
"""

from .types import EdgeKind, EdgePayload, GraphPayload, NodeKind, NodePayload

__all__ = [
    "NodeKind", "EdgeKind",
    "NodePayload", "EdgePayload", "GraphPayload",
]
