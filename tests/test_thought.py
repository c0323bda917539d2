"""Tests for reasoning step validation and normalisation."""

import pytest

from advanced_reason.domain.enums import QualityLevel
from advanced_reason.domain.thought import ThoughtRecord, ThoughtValidationError


def _valid_step(**overrides) -> dict:
    """Return valid advanced_reasoning arguments, with optional overrides."""
    base = {
        "thought": "Capital of France?",
        "thoughtNumber": 1,
        "totalThoughts": 1,
        "nextThoughtNeeded": False,
    }
    base.update(overrides)
    return base


class TestMandatoryFields:
    def test_minimal_step(self) -> None:
        record = ThoughtRecord.from_arguments(_valid_step())
        assert record.thought == "Capital of France?"
        assert record.thought_number == 1
        assert record.total_thoughts == 1
        assert record.next_thought_needed is False

    def test_defaults(self) -> None:
        record = ThoughtRecord.from_arguments(_valid_step())
        assert record.confidence == 0.5
        assert record.reasoning_quality == QualityLevel.MEDIUM
        assert record.meta_thought == ""
        assert record.session_id is None

    @pytest.mark.parametrize("value", [None, "", 42, ["x"]])
    def test_bad_thought(self, value) -> None:
        with pytest.raises(ThoughtValidationError) as info:
            ThoughtRecord.from_arguments(_valid_step(thought=value))
        assert info.value.field_name == "thought"
        assert str(info.value).startswith("Invalid thought:")

    @pytest.mark.parametrize("field", ["thoughtNumber", "totalThoughts"])
    @pytest.mark.parametrize("value", [0, -1, 1.5, "1", True, None])
    def test_bad_positions(self, field: str, value) -> None:
        with pytest.raises(ThoughtValidationError) as info:
            ThoughtRecord.from_arguments(_valid_step(**{field: value}))
        assert info.value.field_name == field

    @pytest.mark.parametrize("value", ["false", 0, None])
    def test_bad_next_thought_needed(self, value) -> None:
        with pytest.raises(ThoughtValidationError, match="nextThoughtNeeded"):
            ThoughtRecord.from_arguments(_valid_step(nextThoughtNeeded=value))

    def test_missing_field(self) -> None:
        args = _valid_step()
        del args["totalThoughts"]
        with pytest.raises(ThoughtValidationError, match="totalThoughts"):
            ThoughtRecord.from_arguments(args)

    def test_arguments_must_be_object(self) -> None:
        with pytest.raises(ThoughtValidationError):
            ThoughtRecord.from_arguments(["not", "a", "dict"])

    def test_is_a_value_error(self) -> None:
        assert issubclass(ThoughtValidationError, ValueError)


class TestOptionalFields:
    @pytest.mark.parametrize(
        "given,expected",
        [(0.8, 0.8), (1.7, 1.0), (-0.2, 0.0), ("high", 0.5), (None, 0.5), (True, 0.5)],
    )
    def test_confidence_recovered(self, given, expected) -> None:
        record = ThoughtRecord.from_arguments(_valid_step(confidence=given))
        assert record.confidence == pytest.approx(expected)

    @pytest.mark.parametrize("given", ["excellent", 3, None, ["high"]])
    def test_unknown_quality_becomes_medium(self, given) -> None:
        record = ThoughtRecord.from_arguments(_valid_step(reasoning_quality=given))
        assert record.reasoning_quality == QualityLevel.MEDIUM

    def test_known_quality_kept(self) -> None:
        record = ThoughtRecord.from_arguments(_valid_step(reasoning_quality="high"))
        assert record.reasoning_quality == QualityLevel.HIGH

    def test_malformed_optionals_are_dropped(self) -> None:
        record = ThoughtRecord.from_arguments(_valid_step(
            hypothesis=12,
            evidence="not a list",
            branchFromThought=0,
            isRevision="yes",
            meta_thought=None,
        ))
        assert record.hypothesis is None
        assert record.evidence is None
        assert record.branch_from_thought is None
        assert record.is_revision is None
        assert record.meta_thought == ""

    def test_evidence_keeps_only_strings(self) -> None:
        record = ThoughtRecord.from_arguments(_valid_step(evidence=["a", 1, "b"]))
        assert record.evidence == ["a", "b"]

    def test_branch_fields(self) -> None:
        record = ThoughtRecord.from_arguments(_valid_step(branchFromThought=1, branchId="alt"))
        assert record.branch_from_thought == 1
        assert record.branch_id == "alt"

    def test_inert_fields_are_kept(self) -> None:
        record = ThoughtRecord.from_arguments(_valid_step(
            needsMoreThoughts=True, builds_on=["node_1"], challenges=["node_2"],
        ))
        assert record.needs_more_thoughts is True
        assert record.builds_on == ["node_1"]
        assert record.challenges == ["node_2"]

    def test_to_wire_uses_tool_field_names(self) -> None:
        wire = ThoughtRecord.from_arguments(_valid_step(branchId="alt", branchFromThought=1)).to_wire()
        assert wire["thoughtNumber"] == 1
        assert wire["branchId"] == "alt"
        assert "hypothesis" not in wire
