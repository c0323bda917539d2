from advanced_reason.domain.enums import NodeKind, QualityLevel
from advanced_reason.domain.memory import LibraryInfo, MemoryNode, MemoryStats, ReasoningSession
from advanced_reason.domain.results import TextContent, ToolResult
from advanced_reason.domain.system_json import SystemJsonDocument
from advanced_reason.domain.thought import ThoughtRecord, ThoughtValidationError

__all__ = [
    "LibraryInfo",
    "MemoryNode",
    "MemoryStats",
    "NodeKind",
    "QualityLevel",
    "ReasoningSession",
    "SystemJsonDocument",
    "TextContent",
    "ThoughtRecord",
    "ThoughtValidationError",
    "ToolResult",
]
