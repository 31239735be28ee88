from __future__ import annotations

import re

FOLLOW_UP_MARKER = "Follow-up question:"
CONTEXT_MARKER = "Previous context:"

_CONTRACTION = re.compile(r"\b(when|where|what|who|how)(?:['’]?s)\b", re.IGNORECASE)


def extract_follow_up(text: str) -> str:
    """Return the question that follows a follow-up marker, dropping the conversational wrapper."""
    if not text:
        return ""
    current = text
    while FOLLOW_UP_MARKER in current:
        start = current.index(FOLLOW_UP_MARKER) + len(FOLLOW_UP_MARKER)
        end = current.find(CONTEXT_MARKER, start)
        current = current[start:] if end == -1 else current[start:end]
    return current


def _expand(match: re.Match[str]) -> str:
    return f"{match.group(1)} is"


def expand_contractions(text: str) -> str:
    if not text:
        return ""
    return _CONTRACTION.sub(_expand, text)


def normalize_query(text: str | None) -> str:
    """Isolate the actual request and expand contracted interrogatives.

    Idempotent: normalizing an already normalized query returns it unchanged.
    """
    if not text:
        return ""
    return expand_contractions(extract_follow_up(text)).strip()


__all__ = ["expand_contractions", "extract_follow_up", "normalize_query"]
