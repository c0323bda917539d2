"""ThoughtRecord: the validated input of one reasoning step.

Validation policy:
    - Four fields are mandatory and strictly typed: ``thought`` (non-empty
      string), ``thoughtNumber`` and ``totalThoughts`` (positive integers)
      and ``nextThoughtNeeded`` (boolean).  Anything else is rejected with a
      ThoughtValidationError naming the field.
    - Every other field is optional and recovered locally: malformed values
      fall back to a default or are dropped, never rejected.

Wire names follow the tool input schema (``thoughtNumber``, ``meta_thought``,
``branchId`` ...); Python attributes are snake_case aliases of those.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from advanced_reason.domain.enums import QualityLevel
from advanced_reason.domain.memory import DEFAULT_CONFIDENCE, clamp_unit


class ThoughtValidationError(ValueError):
    """Raised when a mandatory reasoning-step field is missing or mistyped."""

    def __init__(self, field_name: str, reason: str) -> None:
        self.field_name = field_name
        self.reason = reason
        super().__init__(f"Invalid {field_name}: {reason}")


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


class ThoughtRecord(BaseModel):
    """One normalised reasoning step."""

    thought: str
    thought_number: int = Field(..., alias="thoughtNumber", ge=1)
    total_thoughts: int = Field(..., alias="totalThoughts", ge=1)
    next_thought_needed: bool = Field(..., alias="nextThoughtNeeded")

    # Cognitive self-assessment
    confidence: float = DEFAULT_CONFIDENCE
    reasoning_quality: QualityLevel = QualityLevel.MEDIUM
    meta_thought: str = ""
    goal: Optional[str] = None
    progress: Optional[float] = None

    # Hypothesis testing
    hypothesis: Optional[str] = None
    test_plan: Optional[str] = None
    test_result: Optional[str] = None
    evidence: Optional[list[str]] = None

    # Memory and context
    session_id: Optional[str] = None
    builds_on: Optional[list[str]] = None
    challenges: Optional[list[str]] = None

    # Branching and revision
    is_revision: Optional[bool] = Field(None, alias="isRevision")
    revises_thought: Optional[int] = Field(None, alias="revisesThought")
    branch_from_thought: Optional[int] = Field(None, alias="branchFromThought")
    branch_id: Optional[str] = Field(None, alias="branchId")
    needs_more_thoughts: Optional[bool] = Field(None, alias="needsMoreThoughts")

    model_config = {"populate_by_name": True}

    # ── Lenient optional fields ──────────────────────────────────────────

    @field_validator("confidence", mode="before")
    @classmethod
    def default_confidence(cls, v: Any) -> float:
        return clamp_unit(v)

    @field_validator("progress", mode="before")
    @classmethod
    def clamp_progress(cls, v: Any) -> Optional[float]:
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            return None
        return clamp_unit(v)

    @field_validator("reasoning_quality", mode="before")
    @classmethod
    def default_quality(cls, v: Any) -> Any:
        if isinstance(v, QualityLevel):
            return v
        if isinstance(v, str) and v in {q.value for q in QualityLevel}:
            return v
        return QualityLevel.MEDIUM

    @field_validator("meta_thought", mode="before")
    @classmethod
    def meta_thought_is_text(cls, v: Any) -> str:
        return v if isinstance(v, str) else ""

    @field_validator(
        "goal", "hypothesis", "test_plan", "test_result", "session_id", "branch_id",
        mode="before",
    )
    @classmethod
    def optional_text(cls, v: Any) -> Optional[str]:
        return v if isinstance(v, str) and v else None

    @field_validator("evidence", "builds_on", "challenges", mode="before")
    @classmethod
    def optional_text_list(cls, v: Any) -> Optional[list[str]]:
        if not isinstance(v, list):
            return None
        return [item for item in v if isinstance(item, str)]

    @field_validator("revises_thought", "branch_from_thought", mode="before")
    @classmethod
    def optional_position(cls, v: Any) -> Optional[int]:
        return v if _is_positive_int(v) else None

    @field_validator("is_revision", "needs_more_thoughts", mode="before")
    @classmethod
    def optional_flag(cls, v: Any) -> Optional[bool]:
        return v if isinstance(v, bool) else None

    # ── Construction ─────────────────────────────────────────────────────

    @classmethod
    def from_arguments(cls, raw: Any) -> "ThoughtRecord":
        """Validate raw tool arguments into a ThoughtRecord.

        Raises:
            ThoughtValidationError: If a mandatory field is missing or mistyped.
        """
        if not isinstance(raw, dict):
            raise ThoughtValidationError("arguments", "must be an object")

        thought = raw.get("thought")
        if not isinstance(thought, str) or not thought:
            raise ThoughtValidationError("thought", "must be a non-empty string")
        for name in ("thoughtNumber", "totalThoughts"):
            if not _is_positive_int(raw.get(name)):
                raise ThoughtValidationError(name, "must be a positive integer")
        if not isinstance(raw.get("nextThoughtNeeded"), bool):
            raise ThoughtValidationError("nextThoughtNeeded", "must be a boolean")

        return cls.model_validate(raw)

    def to_wire(self) -> dict[str, Any]:
        """Serialise back to tool-schema field names, omitting unset fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
