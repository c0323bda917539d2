"""ThoughtFormatter: framed plain-text rendering of a reasoning step.

Used only for operator-facing log output.  The rendering never feeds back
into a tool result, so it is free to change without affecting callers.

Example:
    ┌──────────────────────────────────────┐
    │ Branch 2/5 (from thought 1, ID: alt) │
    │ Quality: HIGH │ Confidence: [████████  ] 80% │
    ├──────────────────────────────────────┤
    │ Main: Maybe the cache is stale       │
    └──────────────────────────────────────┘
"""

from __future__ import annotations

from advanced_reason.domain.thought import ThoughtRecord

_BAR_WIDTH = 10


class ThoughtFormatter:
    """Deterministic box renderer for ThoughtRecords."""

    @staticmethod
    def header(record: ThoughtRecord) -> str:
        position = f"{record.thought_number}/{record.total_thoughts}"
        if record.is_revision:
            return f"Revision {position} (revising thought {record.revises_thought})"
        if record.branch_from_thought:
            return f"Branch {position} (from thought {record.branch_from_thought}, ID: {record.branch_id})"
        return f"Thought {position}"

    @staticmethod
    def confidence_bar(confidence: float) -> str:
        filled = round(confidence * _BAR_WIDTH)
        return f"[{'█' * filled}{' ' * (_BAR_WIDTH - filled)}] {round(confidence * 100)}%"

    @classmethod
    def format_plain(cls, record: ThoughtRecord) -> str:
        header = cls.header(record)
        assessment = (
            f"Quality: {record.reasoning_quality.value.upper()} │ "
            f"Confidence: {cls.confidence_bar(record.confidence)}"
        )

        body = [f"Main: {record.thought}"]
        if record.meta_thought:
            body.append(f"Meta: {record.meta_thought}")
        if record.hypothesis:
            body.append(f"Hypothesis: {record.hypothesis}")

        width = max(len(line) for line in [header, assessment, *body])
        border = "─" * (width + 2)

        def row(text: str) -> str:
            return f"│ {text.ljust(width)} │"

        lines = [f"┌{border}┐", row(header), row(assessment), f"├{border}┤"]
        lines.extend(row(line) for line in body)
        lines.append(f"└{border}┘")
        return "\n".join(lines)
