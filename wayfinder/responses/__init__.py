from .extractor import (
    ExtractedEvent,
    ExtractionResult,
    Link,
    StructuredFallback,
    analyze_response,
    collect_page_dates,
    extract_events,
    parse_structure,
)
from .formatter import fallback_sentence, format_events, format_structured, render_result
from .guardrails import GuardrailVerdict, LeakKind, apply_guardrail, inspect_output
from .negative import NegativeKind, detect_negative_result
from .snapshot import coerce_tool_output, count_content_nodes, page_url, strip_noise, unwrap_snapshot

__all__ = [
    "ExtractedEvent",
    "ExtractionResult",
    "GuardrailVerdict",
    "LeakKind",
    "Link",
    "NegativeKind",
    "StructuredFallback",
    "analyze_response",
    "apply_guardrail",
    "coerce_tool_output",
    "collect_page_dates",
    "count_content_nodes",
    "detect_negative_result",
    "extract_events",
    "fallback_sentence",
    "format_events",
    "format_structured",
    "inspect_output",
    "page_url",
    "parse_structure",
    "render_result",
    "strip_noise",
    "unwrap_snapshot",
]
