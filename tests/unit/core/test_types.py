"""
Unit tests for the graph payload types.
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from recall.core.types import EdgeKind, EdgePayload, NodeKind, NodePayload


class TestNodePayload:
    """Validation and normalisation of nodes."""

    def test_label_defaults_to_id(self):
        node = NodePayload(id="tool:git", type="tool")
        assert node.label == "tool:git"
        assert node.type is NodeKind.TOOL

    def test_null_counts_become_zero(self):
        node = NodePayload.model_validate(
            {"id": "api", "type": "repo", "commands": None, "sessions": None, "failures": None}
        )
        assert (node.commands, node.sessions, node.failures) == (0, 0, 0)

    def test_null_lists_become_empty(self):
        node = NodePayload.model_validate({"id": "api", "type": "repo", "branches": None})
        assert node.branches == []
        assert node.repos == []

    def test_last_active_epoch_millis(self):
        node = NodePayload.model_validate({"id": "api", "type": "repo", "last_active": 1717200000000})
        assert node.last_active == datetime(2024, 6, 1, tzinfo=timezone.utc)

    def test_last_active_zero_is_unknown(self):
        node = NodePayload.model_validate({"id": "api", "type": "repo", "last_active": 0})
        assert node.last_active is None

    def test_unknown_fields_ignored(self):
        node = NodePayload.model_validate({"id": "api", "type": "repo", "color": "#fff"})
        assert not hasattr(node, "color")

    @pytest.mark.parametrize("raw", [
        {"id": "api", "type": "service"},
        {"id": "api", "type": "repo", "commands": -1},
        {"type": "repo"},
    ])
    def test_invalid_nodes_rejected(self, raw):
        with pytest.raises(ValidationError):
            NodePayload.model_validate(raw)


class TestEdgePayload:
    """Edge weight fallbacks."""

    def test_weight_preferred(self):
        edge = EdgePayload(source="a", target="b", weight=5, shared_sessions=9)
        assert edge.effective_weight == 5

    def test_shared_sessions_fallback(self):
        edge = EdgePayload(source="a", target="b", shared_sessions=3, type="repo-repo")
        assert edge.effective_weight == 3
        assert edge.type is EdgeKind.REPO_REPO

    def test_missing_weight_is_one(self):
        assert EdgePayload(source="a", target="b").effective_weight == 1

    def test_non_positive_weight_clamped(self):
        assert EdgePayload(source="a", target="b", weight=0).effective_weight == 1


class TestTimestampOverflow:
    """Out-of-range timestamps reject the node instead of crashing validation."""

    @pytest.mark.parametrize("value", [1e25, float("inf"), float("nan")])
    def test_unrepresentable_last_active_rejected(self, value):
        with pytest.raises(ValidationError, match="last_active"):
            NodePayload.model_validate({"id": "api", "type": "repo", "last_active": value})
