"""Memory graph models: nodes, sessions and aggregate statistics.

A MemoryNode is one recorded reasoning artifact.  Its content never changes
after creation; only ``connections`` grows, through explicit linking in the
MemoryStore.  ``metadata`` is an open map: any component may read or write
it, and keys it does not recognise are inert.

A ReasoningSession tracks a goal and the accumulated confidence/quality of
the steps recorded against it.  It is merged in place after every step, so
assignment is validated to keep confidence clamped.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from advanced_reason.domain.enums import NodeKind, QualityLevel
from advanced_reason.foundation.clock import utc_now

DEFAULT_CONFIDENCE = 0.5


def clamp_unit(value: Any, default: float = DEFAULT_CONFIDENCE) -> float:
    """Clamp a numeric value into [0, 1]; non-numbers fall back to *default*."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if value != value:  # NaN
        return default
    return max(0.0, min(float(value), 1.0))


# ── Memory Node ──────────────────────────────────────────────────────────────

class MemoryNode(BaseModel):
    """One recorded reasoning artifact in the current library."""

    id: str
    content: str
    kind: NodeKind = NodeKind.THOUGHT
    metadata: dict[str, Any] = Field(default_factory=dict)
    connections: list[str] = Field(
        default_factory=list,
        description="Ids of linked nodes; kept symmetric by the store",
    )
    created_at: datetime = Field(default_factory=utc_now)
    confidence: float = DEFAULT_CONFIDENCE

    @field_validator("confidence", mode="before")
    @classmethod
    def confidence_in_unit_range(cls, v: Any) -> float:
        return clamp_unit(v)


# ── Reasoning Session ────────────────────────────────────────────────────────

class ReasoningSession(BaseModel):
    """Stateful reasoning context bound to a goal."""

    session_id: str
    goal: str
    current_focus: str = ""
    confidence: float = DEFAULT_CONFIDENCE
    quality_level: QualityLevel = QualityLevel.MEDIUM
    meta_assessment: str = "Starting new reasoning session"
    active_hypotheses: list[str] = Field(default_factory=list)
    working_memory: list[str] = Field(default_factory=list)

    model_config = {"validate_assignment": True}

    @field_validator("confidence", mode="before")
    @classmethod
    def confidence_in_unit_range(cls, v: Any) -> float:
        return clamp_unit(v)

    @field_validator("quality_level", mode="before")
    @classmethod
    def unknown_quality_is_medium(cls, v: Any) -> Any:
        if isinstance(v, QualityLevel):
            return v
        if isinstance(v, str) and v in {q.value for q in QualityLevel}:
            return v
        return QualityLevel.MEDIUM

    @field_validator("meta_assessment", "current_focus", mode="before")
    @classmethod
    def none_is_empty(cls, v: Any) -> Any:
        return "" if v is None else v


# ── Aggregates ───────────────────────────────────────────────────────────────

class MemoryStats(BaseModel):
    """Counts for the current library.  ``connections`` counts undirected edges."""

    nodes: int = 0
    sessions: int = 0
    connections: int = 0


class LibraryInfo(BaseModel):
    """Directory entry for one memory library."""

    name: str
    node_count: int = 0
    last_modified: datetime | None = None
    current: bool = False
