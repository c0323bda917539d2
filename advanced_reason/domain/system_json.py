"""SystemJsonDocument: named structured data kept beside the memory libraries.

System JSON documents hold reusable instructions, workflows or reference
data for a domain.  They are addressed by name and found by text search
over their name, domain, description and tags.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from advanced_reason.foundation.clock import utc_now


class SystemJsonDocument(BaseModel):
    """A stored system JSON document."""

    name: str = Field(..., min_length=1, max_length=128)
    domain: str
    description: str
    data: dict[str, Any] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def search_text(self) -> str:
        """Flattened text that search queries are matched against."""
        return " ".join([self.name, self.domain, self.description, *self.tags])

    def summary(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "domain": self.domain,
            "description": self.description,
            "tags": self.tags,
            "updated_at": self.updated_at.isoformat(),
        }
