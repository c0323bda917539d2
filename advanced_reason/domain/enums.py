"""Controlled enumerations for the advanced-reason domain.

Every categorical field in the domain MUST reference an enum defined here.
Free-form strings are not acceptable for classification fields.
"""

from __future__ import annotations

from enum import Enum


class NodeKind(str, Enum):
    """What a recorded memory node represents in a line of reasoning."""

    THOUGHT = "thought"
    HYPOTHESIS = "hypothesis"
    EVIDENCE = "evidence"
    CONCLUSION = "conclusion"


class QualityLevel(str, Enum):
    """Self-assessed quality of a reasoning step or session."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
