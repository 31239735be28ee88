from __future__ import annotations

from enum import Enum
from typing import Any, Mapping

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


class CapabilityCategory(str, Enum):
    LOCATION = "location"
    LIVE_EXTRACTION = "live_extraction"
    NEWS_SEARCH = "news_search"
    ORCHESTRATION = "orchestration"
    UNCLASSIFIED = "unclassified"

    @property
    def output_context(self) -> str:
        return OUTPUT_CONTEXTS[self]


OUTPUT_CONTEXTS: Mapping[CapabilityCategory, str] = {
    CapabilityCategory.LOCATION: "Place IDs, Coordinates, Neighborhood Vibe",
    CapabilityCategory.LIVE_EXTRACTION: "Live Prices, Hidden Rules, Contact Details",
    CapabilityCategory.NEWS_SEARCH: "Trends, Alerts, Sentiment",
    CapabilityCategory.ORCHESTRATION: "Logical Synthesis, Calculations, Reports",
    CapabilityCategory.UNCLASSIFIED: "Result",
}

# Checked in order; the first category whose marker appears in the id or name wins.
_CATEGORY_MARKERS: tuple[tuple[CapabilityCategory, tuple[str, ...]], ...] = (
    (CapabilityCategory.LIVE_EXTRACTION, ("playwright", "browser", "puppeteer", "scrape")),
    (CapabilityCategory.LOCATION, ("google-maps", "maps", "places", "geocod")),
    (CapabilityCategory.NEWS_SEARCH, ("exa", "search", "news", "brave")),
    (CapabilityCategory.ORCHESTRATION, ("langchain", "orchestrat", "agent")),
)


def infer_category(*names: str) -> CapabilityCategory:
    """Infer a category from server identifiers using the tool-context marker table."""
    haystack = " ".join(name.lower() for name in names if name)
    for category, markers in _CATEGORY_MARKERS:
        if any(marker in haystack for marker in markers):
            return category
    return CapabilityCategory.UNCLASSIFIED


class ToolDescriptor(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = Field(default="")

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Tool name must not be blank")
        return stripped

    @field_validator("description", mode="before")
    @classmethod
    def _coerce_description(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()


class CapabilityDescriptor(BaseModel):
    """A registered tool server and the tools it exposes."""

    server_id: str = Field(..., min_length=1, validation_alias=AliasChoices("server_id", "serverId"))
    display_name: str = Field(
        default="",
        validation_alias=AliasChoices("display_name", "displayName", "name"),
    )
    tools: tuple[ToolDescriptor, ...] = Field(default_factory=tuple)
    category: CapabilityCategory = Field(default=CapabilityCategory.UNCLASSIFIED)
    metadata: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    @field_validator("server_id")
    @classmethod
    def _strip_server_id(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("server_id must not be blank")
        return stripped

    @field_validator("category", mode="before")
    @classmethod
    def _coerce_category(cls, value: Any) -> Any:
        if value is None or value == "":
            return CapabilityCategory.UNCLASSIFIED
        if isinstance(value, str):
            return value.strip().lower().replace("-", "_").replace(" ", "_")
        return value

    @field_validator("metadata", mode="before")
    @classmethod
    def _coerce_metadata(cls, value: Any) -> Any:
        if value is None:
            return {}
        return value

    @model_validator(mode="after")
    def _fill_defaults(self) -> "CapabilityDescriptor":
        if not self.display_name.strip():
            object.__setattr__(self, "display_name", self.server_id)
        if self.category is CapabilityCategory.UNCLASSIFIED:
            object.__setattr__(self, "category", infer_category(self.server_id, self.display_name))
        return self

    @property
    def first_tool(self) -> ToolDescriptor | None:
        return self.tools[0] if self.tools else None

    def mentions(self, marker: str) -> bool:
        needle = marker.lower()
        return needle in self.server_id.lower() or needle in self.display_name.lower()


__all__ = [
    "CapabilityCategory",
    "CapabilityDescriptor",
    "OUTPUT_CONTEXTS",
    "ToolDescriptor",
    "infer_category",
]
