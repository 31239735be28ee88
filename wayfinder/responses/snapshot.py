"""Helpers for reading the accessibility dumps returned by browser automation tools."""

from __future__ import annotations

import re
from typing import Any, Mapping

from pydantic import ValidationError

from ..schemas.responses import ToolResponse

_YAML_BLOCK = re.compile(r"```ya?ml[ \t]*\n(?P<body>.*?)(?:\n```|\Z)", re.DOTALL)
_PAGE_SNAPSHOT = re.compile(r"Page Snapshot:?[ \t]*\n(?P<body>.*)", re.DOTALL | re.IGNORECASE)
_PAGE_URL = re.compile(r"^[ \t]*(?:-[ \t]+)?Page URL:[ \t]*(?P<url>\S+)", re.MULTILINE | re.IGNORECASE)

_STYLESHEET_RULE = re.compile(r"\.cls-\d+\s*\{[^}]*\}")
_GRAPHICS_SYMBOL = re.compile(r'graphics-symbol\s+"[^"]*"')
_PLACEHOLDER_NODE = re.compile(r"^[ \t]*-[ \t]+(?:input|img|graphics-symbol)(?:[ \t]*\[[^\]\n]*\])*[ \t]*:?[ \t]*$\n?", re.MULTILINE)
_DECORATIVE_BUTTON = re.compile(r'button\s+"(?:Favorite|Get Notified|Follow|Share)"', re.IGNORECASE)
_CONTENT_NODE = re.compile(r'"[^"\n]{3,}"')

_ENVELOPE_KEYS = ("content", "snapshot", "result")


def coerce_tool_output(payload: Any) -> str:
    """Turn whatever a tool invocation returned into plain text."""
    if payload is None:
        return ""
    if isinstance(payload, str):
        return payload
    if isinstance(payload, ToolResponse):
        return payload.as_text()
    if isinstance(payload, Mapping) and any(key in payload for key in _ENVELOPE_KEYS):
        try:
            return ToolResponse.model_validate(dict(payload)).as_text()
        except ValidationError:
            pass
    return ToolResponse(result=payload).as_text()


def truncate_payload(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    # Cut on a line boundary so the last node is never half a line.
    cut = text.rfind("\n", 0, max_chars)
    return text[: cut if cut > 0 else max_chars]


def unwrap_snapshot(text: str) -> str:
    """Return the yaml body of a snapshot response, or the text itself when it carries none."""
    if not text:
        return ""
    match = _YAML_BLOCK.search(text)
    if match is not None:
        return match.group("body")
    match = _PAGE_SNAPSHOT.search(text)
    if match is not None:
        return match.group("body")
    return text


def has_snapshot(text: str) -> bool:
    return bool(text) and (_YAML_BLOCK.search(text) is not None or _PAGE_SNAPSHOT.search(text) is not None)


def page_url(text: str) -> str | None:
    match = _PAGE_URL.search(text or "")
    if match is None:
        return None
    return match.group("url").strip()


def strip_noise(snapshot: str) -> str:
    """Drop stylesheet rules, icons, empty placeholders and decorative buttons."""
    cleaned = _STYLESHEET_RULE.sub("", snapshot)
    cleaned = _GRAPHICS_SYMBOL.sub("", cleaned)
    cleaned = _PLACEHOLDER_NODE.sub("", cleaned)
    cleaned = _DECORATIVE_BUTTON.sub("", cleaned)
    return cleaned


def count_content_nodes(snapshot: str) -> int:
    return len(_CONTENT_NODE.findall(snapshot or ""))


__all__ = [
    "coerce_tool_output",
    "count_content_nodes",
    "has_snapshot",
    "page_url",
    "strip_noise",
    "truncate_payload",
    "unwrap_snapshot",
]
