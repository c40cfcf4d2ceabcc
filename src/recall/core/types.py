"""
Payload type definitions for the recall graph endpoint.

These mirror the JSON served by ``GET /api/graph``. They are validated with
pydantic on load and then converted into the simulation records in
``recall.graph.model``; nothing downstream touches raw dicts.
"""

from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class NodeKind(StrEnum):
    """The two sides of the bipartite usage graph."""
    REPO = "repo"
    TOOL = "tool"


class EdgeKind(StrEnum):
    """Relationship kinds; fixes spring rest length and visual treatment."""
    REPO_REPO = "repo-repo"
    REPO_TOOL = "repo-tool"


class NodePayload(BaseModel):
    """
    A repository or tool as reported by the backend.
    """
    id: str
    label: str = ""
    type: NodeKind
    commands: int = Field(default=0, ge=0)
    sessions: int = Field(default=0, ge=0)
    failures: int = Field(default=0, ge=0)
    branches: List[str] = Field(default_factory=list)
    repos: List[str] = Field(default_factory=list)
    last_active: Optional[datetime] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("commands", "sessions", "failures", mode="before")
    @classmethod
    def _null_counts(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("branches", "repos", mode="before")
    @classmethod
    def _null_lists(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("last_active", mode="before")
    @classmethod
    def _epoch_millis(cls, value: Any) -> Any:
        # The backend sends session start times as epoch milliseconds, 0 when unknown.
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            if value <= 0:
                return None
            try:
                return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
            except (OverflowError, OSError, ValueError) as e:
                raise ValueError(f"last_active {value!r} is not a valid timestamp: {e}") from e
        return value

    @model_validator(mode="after")
    def _default_label(self) -> "NodePayload":
        if not self.label:
            self.label = self.id
        return self


class EdgePayload(BaseModel):
    """
    A usage relationship between two node ids.

    Repo-repo edges carry ``shared_sessions``; repo-tool edges carry ``weight``.
    """
    source: str
    target: str
    weight: Optional[int] = None
    shared_sessions: Optional[int] = None
    type: Optional[EdgeKind] = None

    model_config = ConfigDict(extra="ignore")

    @property
    def effective_weight(self) -> int:
        """Positive weight, falling back from ``weight`` to ``shared_sessions`` to 1."""
        raw = self.weight if self.weight is not None else self.shared_sessions
        if raw is None:
            return 1
        return max(1, raw)


class GraphPayload(BaseModel):
    """Validated graph payload."""
    nodes: List[NodePayload] = Field(default_factory=list)
    edges: List[EdgePayload] = Field(default_factory=list)
