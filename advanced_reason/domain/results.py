"""Tool results: the ``call_tool`` result shape shared by every tool.

A tool never raises through the protocol layer.  Success and failure are
both a ToolResult; failures set ``isError`` and carry a JSON payload with
an ``error`` message and ``status: failed``.
"""

from __future__ import annotations

import json
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field


class TextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolResult(BaseModel):
    """Result of one tool invocation."""

    content: list[TextContent] = Field(default_factory=list)
    is_error: Optional[bool] = Field(None, alias="isError")

    model_config = {"populate_by_name": True}

    @classmethod
    def text(cls, text: str, *, is_error: bool = False) -> "ToolResult":
        return cls(content=[TextContent(text=text)], is_error=True if is_error else None)

    @classmethod
    def from_payload(cls, payload: Any) -> "ToolResult":
        return cls.text(json.dumps(payload, indent=2, default=str))

    @classmethod
    def failure(cls, exc: BaseException | str) -> "ToolResult":
        message = exc if isinstance(exc, str) else str(exc)
        return cls.text(
            json.dumps({"error": message, "status": "failed"}, indent=2),
            is_error=True,
        )

    @property
    def payload(self) -> Any:
        """Decode the first text block as JSON (tests and HTTP adapters)."""
        return json.loads(self.content[0].text)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
