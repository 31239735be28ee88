from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal, Mapping

from pydantic import AliasChoices, BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..schemas.capabilities import CapabilityCategory


class RoutingSettings(BaseModel):
    keyword_score_normalizer: int = Field(
        4,
        ge=1,
        description="Number of distinct keyword hits that saturates a category confidence at 1.0.",
    )
    min_fast_search_confidence: float = Field(
        0.6,
        ge=0.0,
        le=1.0,
        description="Search confidence required before the fast-search shortcut is considered.",
    )
    max_design_confidence: float = Field(
        0.5,
        ge=0.0,
        le=1.0,
        description="Design/orchestration confidence at or above which the fast-search shortcut is refused.",
    )
    default_category: CapabilityCategory = Field(
        CapabilityCategory.NEWS_SEARCH,
        description="Category assigned to steps whose text matches no keyword group.",
    )


class PlanningSettings(BaseModel):
    max_steps: int = Field(12, ge=1, description="Upper bound on the number of steps in a workflow plan.")
    min_clause_chars: int = Field(
        10,
        ge=0,
        description="Clauses at or below this length that match no hand-off rule are dropped as noise.",
    )
    step_duration_seconds: int = Field(30, ge=1, description="Estimated execution time per planned step.")


class ExtractionSettings(BaseModel):
    window_before: int = Field(10, ge=0, description="Lines scanned before each anchor line.")
    window_after: int = Field(25, ge=1, description="Lines scanned after each anchor line.")
    max_results: int = Field(10, ge=1, description="Maximum entries rendered in a formatted answer.")
    min_content_nodes: int = Field(
        10,
        ge=0,
        description="Pages with search controls and fewer content nodes than this are treated as empty.",
    )
    ticket_confidence: float = Field(0.9, ge=0.0, le=1.0)
    base_confidence: float = Field(0.7, ge=0.0, le=1.0)
    page_date_confidence: float = Field(
        0.5,
        ge=0.0,
        le=1.0,
        description="Confidence of dates listed page-wide because none sat near the subject.",
    )
    max_payload_chars: int = Field(
        500_000,
        ge=1_000,
        description="Raw tool output beyond this many characters is truncated before parsing.",
    )


class GuardrailSettings(BaseModel):
    leak_message: str = Field(
        "I found the search results, but I'm having trouble reading the page layout. "
        "The search completed successfully. Would you like me to try extracting the information again, "
        "or would you prefer to check the site directly?",
        min_length=16,
    )
    technical_data_message: str = Field(
        "I received technical data from the search that I couldn't turn into a readable answer. "
        "Please try again or refine your request.",
        min_length=16,
    )
    error_message: str = Field(
        "I encountered an error processing the response. The search may have completed, "
        "so try checking the website directly or refining your search terms.",
        min_length=16,
    )
    empty_message: str = Field(
        "I've completed the search. Review the source page for details.",
        min_length=16,
    )


class ObservabilitySettings(BaseModel):
    prometheus_enabled: bool = Field(True)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


class Settings(BaseSettings):
    environment: Literal["local", "test", "production"] = Field("local")

    routing: RoutingSettings = Field(default_factory=RoutingSettings)  # type: ignore[arg-type]
    planning: PlanningSettings = Field(default_factory=PlanningSettings)  # type: ignore[arg-type]
    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)  # type: ignore[arg-type]
    guardrails: GuardrailSettings = Field(default_factory=GuardrailSettings)  # type: ignore[arg-type]
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)  # type: ignore[arg-type]

    model_config = SettingsConfigDict(
        env_prefix="WAYFINDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )


class CapabilityOverrideSettings(BaseSettings):
    """Operator-controlled capability preference, re-read on every routing call."""

    default_capability_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "WAYFINDER_DEFAULT_CAPABILITY_ID",
            "DEFAULT_CAPABILITY_ID",
            "DEFAULT_SEARCH_SERVER_ID",
        ),
    )

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


def read_default_capability_override() -> str | None:
    value = CapabilityOverrideSettings().default_capability_id  # type: ignore[call-arg]
    if value is None:
        return None
    value = value.strip()
    return value or None


@lru_cache(maxsize=1)
def _get_cached_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]


def get_settings(overrides: Mapping[str, Any] | None = None) -> Settings:
    """Return settings, using cached defaults unless overrides are provided."""
    if overrides:
        return Settings(**dict(overrides))
    return _get_cached_settings()
