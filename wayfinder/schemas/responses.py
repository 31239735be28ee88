from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ToolContentItem(BaseModel):
    type: str = Field(default="text")
    text: str | None = None
    data: str | None = None

    model_config = ConfigDict(extra="ignore")


class ToolResponse(BaseModel):
    """Envelope returned by an MCP tool invocation, reduced to the fields the engine reads."""

    content: list[ToolContentItem] = Field(default_factory=list)
    snapshot: str | None = None
    result: Any = None

    model_config = ConfigDict(extra="ignore")

    def as_text(self) -> str:
        if self.snapshot:
            return self.snapshot
        texts = [item.text for item in self.content if item.type == "text" and item.text]
        if texts:
            return "\n\n".join(texts)
        if self.result is None:
            return ""
        if isinstance(self.result, str):
            return self.result
        if isinstance(self.result, dict) and isinstance(self.result.get("content"), list):
            # Nested MCP envelope as forwarded by the invoke endpoint.
            return ToolResponse.model_validate(self.result).as_text()
        try:
            return json.dumps(self.result, indent=2, default=str)
        except (TypeError, ValueError):
            return str(self.result)


__all__ = ["ToolContentItem", "ToolResponse"]
