from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from ..core import metrics
from ..core.config import GuardrailSettings, get_settings
from ..core.logging import get_logger

logger = get_logger(name=__name__)


class LeakKind(str, Enum):
    LIST_DASH = "list_dash"
    YAML_FENCE = "yaml_fence"
    NODE_LABEL = "node_label"
    REF_MARKER = "ref_marker"
    URL_LINE = "url_line"
    STYLESHEET = "stylesheet"
    GRAPHICS_SYMBOL = "graphics_symbol"
    JSON_PAYLOAD = "json_payload"
    EMPTY = "empty"


# Checked in order; the first matching rule decides the verdict.
_LEAK_RULES: tuple[tuple[LeakKind, re.Pattern[str]], ...] = (
    (LeakKind.LIST_DASH, re.compile(r"^[ \t]*-[ \t]", re.MULTILINE)),
    (LeakKind.YAML_FENCE, re.compile(r"```ya?ml", re.IGNORECASE)),
    (
        LeakKind.NODE_LABEL,
        re.compile(r'\b(?:heading|link|button|listitem|h[1-6]|p|span|img|generic)\s+"', re.IGNORECASE),
    ),
    (LeakKind.REF_MARKER, re.compile(r"\[ref=[^\]]*\]")),
    (LeakKind.URL_LINE, re.compile(r"/url:")),
    (LeakKind.STYLESHEET, re.compile(r"\.cls-\d*")),
    (LeakKind.GRAPHICS_SYMBOL, re.compile(r"graphics-symbol")),
)


@dataclass(frozen=True, slots=True)
class GuardrailVerdict:
    kind: LeakKind | None

    @property
    def passed(self) -> bool:
        return self.kind is None


def inspect_output(text: str | None) -> GuardrailVerdict:
    """Report which leak rule, if any, the text trips without replacing it."""
    if text is None or not text.strip():
        return GuardrailVerdict(kind=LeakKind.EMPTY)
    for kind, pattern in _LEAK_RULES:
        if pattern.search(text):
            return GuardrailVerdict(kind=kind)
    if text.lstrip().startswith("{") and '"' in text:
        return GuardrailVerdict(kind=LeakKind.JSON_PAYLOAD)
    return GuardrailVerdict(kind=None)


def apply_guardrail(text: str | None, *, settings: GuardrailSettings | None = None) -> str:
    """Return ``text`` unless it carries raw page structure, in which case return a fixed message."""
    config = settings or get_settings().guardrails
    verdict = inspect_output(text)
    if verdict.passed:
        return text  # type: ignore[return-value]

    metrics.increment_guardrail_intercept(kind=verdict.kind.value)
    if verdict.kind is LeakKind.EMPTY:
        return config.empty_message
    logger.warning("guardrail_intercepted_output", kind=verdict.kind.value, length=len(text or ""))
    if verdict.kind is LeakKind.JSON_PAYLOAD:
        return config.technical_data_message
    return config.leak_message


__all__ = ["GuardrailVerdict", "LeakKind", "apply_guardrail", "inspect_output"]
