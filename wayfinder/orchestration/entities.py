from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from .keywords import DEFAULT_KEYWORD_TABLES, KeywordTables


@dataclass(frozen=True, slots=True)
class QueryEntities:
    subject: str | None = None
    location: str | None = None
    location_synonyms: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return self.subject is None and self.location is None


class SubjectRule(str, Enum):
    QUOTED = "quoted"
    LOOK_FOR = "look_for"
    WHEN_PLAYING = "when_playing"
    TOKEN_WINDOW = "token_window"


@dataclass(frozen=True, slots=True)
class _Candidate:
    subject: str | None
    location: str | None = None


_QUOTED = re.compile(r"(?<![\w])'([^']+)'(?![\w])|\"([^\"]+)\"|“([^”]+)”")
_LOOK_FOR = re.compile(
    r"\b(?:look\s+for|search\s+for|find|get)\s+(?P<subject>.+?)\s+"
    r"(?:(?:concert\s+)?(?:tickets?|concerts?|shows?)\s+)?"
    r"(?:in|near|at)\s+(?P<location>.+)$",
    re.IGNORECASE,
)
_WHEN_PLAYING = re.compile(
    r"\bwhen\s+(?:is|are|does|do)\s+(?P<inverted>.+?)\s+(?:playing|performing|play|perform|touring)\b"
    r"|\bwhen\s+(?P<subject>.+?)\s+(?:is\s+playing|plays|performs|is\s+performing)\b",
    re.IGNORECASE,
)
_LOCATION = re.compile(r"\b(?i:in|near|at)\s+(?P<location>[A-Z][\w'.-]*(?:\s+[A-Z][\w'.-]*){0,2})")
_TRAILING_NOISE = re.compile(r"\s+(?:concert\s+)?(?:tickets?|concerts?|shows?|events?)$", re.IGNORECASE)
_LOCATION_STOP = re.compile(
    r"\s+(?:next|this|on|for|during|tonight|tomorrow|soon|and|then|once|please|before|after)\b.*$|[,.;:?!].*$",
    re.IGNORECASE,
)

_STARTER_TOKENS = ("for", "find", "get", "when")
_STOP_TOKENS = frozenset(
    {"concert", "concerts", "tickets", "ticket", "show", "shows", "event", "events", "is", "playing", "plays",
     "in", "near", "at", "next"}
)


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = value.strip().strip("'\"“”‘’").strip()
    cleaned = _TRAILING_NOISE.sub("", cleaned).strip()
    if len(cleaned) < 2:
        return None
    return cleaned


def _trim_location(value: str) -> str | None:
    trimmed = _LOCATION_STOP.sub("", value.strip()).strip().strip("'\"")
    return trimmed or None


def _quoted(query: str) -> _Candidate | None:
    match = _QUOTED.search(query)
    if match is None:
        return None
    value = next((group for group in match.groups() if group), None)
    return _Candidate(subject=_clean(value))


def _look_for(query: str) -> _Candidate | None:
    match = _LOOK_FOR.search(query)
    if match is None:
        return None
    subject = match.group("subject")
    # "find when X is playing" belongs to the when-playing rule
    if _WHEN_PLAYING.search(subject) or subject.lower().startswith("when "):
        return None
    return _Candidate(subject=_clean(subject), location=_trim_location(match.group("location")))


def _when_playing(query: str) -> _Candidate | None:
    match = _WHEN_PLAYING.search(query)
    if match is None:
        return None
    return _Candidate(subject=_clean(match.group("inverted") or match.group("subject")))


def _token_window(query: str) -> _Candidate | None:
    words = query.split()
    lowered = [word.lower().strip("'\"?,.!") for word in words]
    start = -1
    for starter in _STARTER_TOKENS:
        if starter in lowered:
            start = lowered.index(starter)
            break
    if start < 0:
        return None
    span: list[str] = []
    for word, token in zip(words[start + 1 :], lowered[start + 1 :]):
        if token in _STOP_TOKENS:
            break
        span.append(word.strip("'\"?,.!"))
    if not span:
        return None
    return _Candidate(subject=_clean(" ".join(span)))


_SUBJECT_RULES: tuple[tuple[SubjectRule, Callable[[str], _Candidate | None]], ...] = (
    (SubjectRule.QUOTED, _quoted),
    (SubjectRule.LOOK_FOR, _look_for),
    (SubjectRule.WHEN_PLAYING, _when_playing),
    (SubjectRule.TOKEN_WINDOW, _token_window),
)


def match_location(query: str, *, tables: KeywordTables = DEFAULT_KEYWORD_TABLES) -> str | None:
    match = _LOCATION.search(query)
    if match is not None:
        return _trim_location(match.group("location"))
    lowered = query.lower()
    for key in tables.location_synonyms:
        if re.search(rf"\b(?:in|near|at)\s+{re.escape(key)}\b", lowered):
            return key.title()
    return None


def extract_entities(query: str | None, *, tables: KeywordTables = DEFAULT_KEYWORD_TABLES) -> QueryEntities:
    """Pull the subject and location out of a normalized query; never raises."""
    if not query or not query.strip():
        return QueryEntities()
    text = query.strip()

    subject: str | None = None
    location: str | None = None
    for _rule, extractor in _SUBJECT_RULES:
        candidate = extractor(text)
        if candidate is None or candidate.subject is None:
            continue
        subject = candidate.subject
        location = candidate.location
        break

    if location is None:
        location = match_location(text, tables=tables)
    synonyms = tables.location_synonyms.get(location.lower(), ()) if location else ()
    return QueryEntities(subject=subject, location=location, location_synonyms=tuple(synonyms))


__all__ = ["QueryEntities", "SubjectRule", "extract_entities", "match_location"]
