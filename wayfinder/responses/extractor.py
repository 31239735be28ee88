"""Anchor-windowed extraction of event details from structure dumps.

The dumps are loosely hierarchical text: one node per line, a role label
followed by a quoted value. Rather than parse the whole tree, the extractor
finds the lines that mention the query subject (anchors) and scans a bounded
window of lines around each one for a month/day/year triple, then for venue,
time and link details near that triple. When the subject is on the page but
no date sits within reach of it, every date on the page is listed instead.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import NamedTuple
from urllib.parse import urljoin

from ..core.config import ExtractionSettings, get_settings
from ..core.logging import get_logger
from ..orchestration.entities import QueryEntities
from ..orchestration.keywords import TICKET_VENDORS
from .negative import detect_negative_result
from .snapshot import page_url, strip_noise, truncate_payload, unwrap_snapshot

logger = get_logger(name=__name__)

MONTH_NAMES: dict[str, str] = {
    "jan": "January",
    "feb": "February",
    "mar": "March",
    "apr": "April",
    "may": "May",
    "jun": "June",
    "jul": "July",
    "aug": "August",
    "sep": "September",
    "oct": "October",
    "nov": "November",
    "dec": "December",
}

_NODE_VALUE = re.compile(r'^\s*(?:-\s+)?(?P<role>[A-Za-z][\w-]*)\b[^"\n]*"(?P<value>[^"\n]*)"')
_MONTH_VALUE = re.compile(r"^(?P<month>jan|feb|mar|apr|may|jun|jul|aug|sept?|oct|nov|dec)[a-z]*\.?$", re.IGNORECASE)
_DAY_VALUE = re.compile(r"^\d{1,2}$")
_YEAR_VALUE = re.compile(r"^(?:19|20)\d{2}$")
_QUOTED_MONTH = re.compile(r'"(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)"', re.IGNORECASE)
_TIME = re.compile(r"\b(\d{1,2}:\d{2}\s*[AaPp][Mm])\b")
_URL_REF = re.compile(r"/url:\s*(?P<url>\S+)")
_TICKET_CTA = re.compile(r"\b(?:see|get|buy)\s+tickets\b", re.IGNORECASE)

_VENUE_KEYWORD = re.compile(
    r"\b(?:Theater|Theatre|Arena|Stadium|Hall|Center|Centre|Park|Pavilion|Auditorium|Ballroom|Club|Venue|"
    r"Amphitheater|Amphitheatre|Field|Coliseum|Garden|Gardens|Fairgrounds|Bowl|Music Factory)\b",
    re.IGNORECASE,
)
_VENUE_PLACE = re.compile(r"^[A-Z][\w&'.\s-]{3,60}(?:,\s*[A-Z][A-Za-z.\s]+){1,2}$")
_VENUE_PREFIX = re.compile(r"^(?:at\s+|venue[:\s]+)", re.IGNORECASE)

_EVENT_LISTITEM = re.compile(
    r"listitem[^:\n]*:[ \t]*\"?(?P<name>[^-\n\"]+?)\s+-\s+(?P<date>[A-Za-z]+,\s*[A-Za-z]+\.?\s+\d{1,2})\s*"
    r"(?:•|â€¢|\|)\s*(?P<time>\d{1,2}:\d{2}\s*[AaPp][Mm])\s*-\s*(?P<venue>[^\n\"]+)"
)
_HEADING = re.compile(r'heading\s+"(?P<text>[^"]+)"')
_LISTITEM_TEXT = re.compile(r'listitem(?:[ \t]*\[[^\]\n]*\])*[ \t]*:[ \t]*-?[ \t]*"?(?P<text>[^\n"]+)"?[ \t]*$', re.MULTILINE)
_NUMBERED_NOISE = re.compile(r"^\d+ - ")
_LINK_REF = re.compile(r'link\s+"(?P<text>[^"]+)"[^\n]*?(?::\s*\n?\s*-?\s*/url:\s*(?P<url>\S+))')
_MARKDOWN_LINK = re.compile(r"\[(?P<text>[^\]\n]+)\]\((?P<url>https?://[^)\s]+)\)")
_BARE_URL = re.compile(r"(?<![(\[/\w])(?P<url>https?://[^\s)\]\"'<>]+)")


@dataclass(frozen=True, slots=True)
class ExtractedEvent:
    subject: str
    date: str | None = None
    time: str | None = None
    venue: str | None = None
    url: str | None = None
    confidence: float = 0.7


class Link(NamedTuple):
    text: str
    url: str


@dataclass(frozen=True, slots=True)
class StructuredFallback:
    events: tuple[ExtractedEvent, ...] = ()
    search_results: tuple[str, ...] = ()
    links: tuple[Link, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.events or self.search_results or self.links)


@dataclass(frozen=True, slots=True)
class ExtractionResult:
    events: tuple[ExtractedEvent, ...] = ()
    negative_message: str | None = None
    structured: StructuredFallback = field(default_factory=StructuredFallback)
    source_url: str | None = None

    @property
    def outcome(self) -> str:
        if self.negative_message:
            return "negative"
        if self.events:
            return "events"
        if not self.structured.is_empty:
            return "structured"
        return "fallback"


@dataclass(frozen=True, slots=True)
class _DateTriple:
    line: int
    month: str
    day: int
    year: str

    @property
    def end(self) -> int:
        return self.line + 2

    @property
    def label(self) -> str:
        return f"{self.month} {self.day}, {self.year}"


def _node_value(line: str) -> str | None:
    match = _NODE_VALUE.match(line)
    if match is None:
        return None
    return match.group("value").strip()


def _find_triples(values: list[str | None]) -> list[_DateTriple]:
    triples: list[_DateTriple] = []
    for index in range(len(values) - 2):
        month, day, year = values[index], values[index + 1], values[index + 2]
        if month is None or day is None or year is None:
            continue
        month_match = _MONTH_VALUE.match(month)
        if month_match is None or not _DAY_VALUE.match(day) or not _YEAR_VALUE.match(year):
            continue
        day_number = int(day)
        if not 1 <= day_number <= 31:
            continue
        key = month_match.group("month").lower()[:3]
        triples.append(_DateTriple(line=index, month=MONTH_NAMES[key], day=day_number, year=year))
    return triples


def subject_variants(subject: str) -> tuple[str, ...]:
    lowered = subject.lower().strip()
    candidates = (
        lowered,
        re.sub(r"\s+", "", lowered),
        re.sub(r"['\"]", "", lowered),
        lowered[: max(4, len(lowered) - 2)],
    )
    variants: list[str] = []
    for candidate in candidates:
        if len(candidate) >= 3 and candidate not in variants:
            variants.append(candidate)
    return tuple(variants)


def mentions_subject(text: str, subject: str | None) -> bool:
    if not subject or not text:
        return False
    lowered = text.lower()
    return any(variant in lowered for variant in subject_variants(subject))


def _anchor_lines(lines: list[str], subject: str) -> list[int]:
    variants = subject_variants(subject)
    anchors = [index for index, line in enumerate(lines) if any(variant in line.lower() for variant in variants)]
    if anchors:
        return anchors
    return [index for index, line in enumerate(lines) if _QUOTED_MONTH.search(line)]


def _clean_venue(value: str, subject: str) -> str | None:
    venue = _VENUE_PREFIX.sub("", value.strip()).strip()
    lowered = venue.lower()
    if not 5 < len(venue) < 120 or venue.isdigit():
        return None
    if lowered == subject.lower() or any(re.search(rf"\b{vendor}\b", lowered) for vendor in TICKET_VENDORS):
        return None
    if _TICKET_CTA.search(venue):
        return None
    return venue


def _find_venue(segments: tuple[list[str | None], ...], subject: str) -> str | None:
    for values in segments:
        for predicate in (_VENUE_KEYWORD.search, _VENUE_PLACE.match):
            for value in values:
                if not value or predicate(value) is None:
                    continue
                venue = _clean_venue(value, subject)
                if venue is not None:
                    return venue
    return None


def _find_time(segments: tuple[list[str], ...]) -> str | None:
    for lines in segments:
        for line in lines:
            match = _TIME.search(line)
            if match is not None:
                return re.sub(r"\s+", " ", match.group(1)).upper()
    return None


def _absolute(url: str, base: str | None) -> str:
    if url.startswith(("http://", "https://")) or not base:
        return url
    return urljoin(base, url)


def _find_url(segments: tuple[list[str], ...], base: str | None) -> str | None:
    for lines in segments:
        for line in lines:
            match = _URL_REF.search(line)
            if match is not None:
                return _absolute(match.group("url"), base)
    return None


def extract_events(
    dump: str,
    entities: QueryEntities,
    *,
    settings: ExtractionSettings | None = None,
    base_url: str | None = None,
) -> list[ExtractedEvent]:
    """Scan windows around subject anchors for dated events, one per distinct date."""
    subject = entities.subject
    if not dump or not subject:
        return []
    config = settings or get_settings().extraction
    lines = dump.splitlines()
    values = [_node_value(line) for line in lines]
    triples = _find_triples(values)
    if not triples:
        return []

    events: list[ExtractedEvent] = []
    seen: set[tuple[str, str]] = set()
    for anchor in _anchor_lines(lines, subject):
        start = max(0, anchor - config.window_before)
        stop = min(len(lines), anchor + config.window_after)
        in_window = [triple for triple in triples if triple.line >= start and triple.end < stop]
        if not in_window:
            continue
        # Nearest triple wins; on a tie the one following the anchor is preferred.
        triple = min(in_window, key=lambda item: (abs(item.line - anchor), item.line < anchor))
        key = (subject.lower(), triple.label)
        if key in seen:
            continue
        seen.add(key)

        following = next((other.line for other in triples if other.line > triple.end), stop)
        after_stop = min(stop, following)
        after_lines = lines[triple.end + 1 : after_stop]
        window_lines = lines[start:stop]
        after_values = values[triple.end + 1 : after_stop]
        window_values = values[start:stop]

        window_text = "\n".join(window_lines)
        confidence = config.ticket_confidence if _TICKET_CTA.search(window_text) else config.base_confidence
        events.append(
            ExtractedEvent(
                subject=subject,
                date=triple.label,
                time=_find_time((after_lines, window_lines)),
                venue=_find_venue((after_values, window_values), subject),
                url=_find_url((after_lines, window_lines), base_url),
                confidence=confidence,
            )
        )
    return events


def collect_page_dates(
    dump: str,
    entities: QueryEntities,
    *,
    settings: ExtractionSettings | None = None,
) -> list[ExtractedEvent]:
    """List every date on a page that mentions the subject, once per date, in page order."""
    subject = entities.subject
    if not dump or not mentions_subject(dump, subject):
        return []
    config = settings or get_settings().extraction
    events: list[ExtractedEvent] = []
    seen: set[str] = set()
    for triple in _find_triples([_node_value(line) for line in dump.splitlines()]):
        if triple.label in seen:
            continue
        seen.add(triple.label)
        events.append(ExtractedEvent(subject=subject, date=triple.label, confidence=config.page_date_confidence))
        if len(events) >= config.max_results:
            break
    return events


def parse_structure(dump: str, *, base_url: str | None = None) -> StructuredFallback:
    """Pick list-item events, result headings, list texts and links out of a dump."""
    if not dump:
        return StructuredFallback()

    events: list[ExtractedEvent] = []
    event_spans: list[tuple[int, int]] = []
    for match in _EVENT_LISTITEM.finditer(dump):
        events.append(
            ExtractedEvent(
                subject=match.group("name").strip(),
                date=match.group("date").strip(),
                time=match.group("time").strip(),
                venue=match.group("venue").strip(),
            )
        )
        event_spans.append(match.span())

    results: list[str] = []
    for match in _HEADING.finditer(dump):
        heading = match.group("text").strip()
        lowered = heading.lower()
        if ("search" in lowered or "result" in lowered) and heading not in results:
            results.append(heading)
    for match in _LISTITEM_TEXT.finditer(dump):
        if any(start <= match.start() < end for start, end in event_spans):
            continue
        item = match.group("text").strip()
        if len(item) > 10 and not _NUMBERED_NOISE.match(item) and item not in results:
            results.append(item)

    links: list[Link] = []
    seen_urls: set[str] = set()

    def add_link(text: str, url: str) -> None:
        absolute = _absolute(url.rstrip(".,;"), base_url)
        if absolute in seen_urls:
            return
        seen_urls.add(absolute)
        links.append(Link(text=text.strip() or absolute, url=absolute))

    for match in _LINK_REF.finditer(dump):
        add_link(match.group("text"), match.group("url"))
    for match in _MARKDOWN_LINK.finditer(dump):
        add_link(match.group("text"), match.group("url"))
    for match in _BARE_URL.finditer(dump):
        add_link(match.group("url"), match.group("url"))

    return StructuredFallback(events=tuple(events), search_results=tuple(results), links=tuple(links))


def analyze_response(
    raw_text: str,
    entities: QueryEntities,
    *,
    snapshot_mode: bool,
    settings: ExtractionSettings | None = None,
) -> ExtractionResult:
    """Run negative detection, windowed extraction and the structural fallback over one tool output."""
    config = settings or get_settings().extraction
    text = truncate_payload(raw_text or "", config.max_payload_chars)
    base_url = page_url(text)
    dump = unwrap_snapshot(text)

    if snapshot_mode:
        if not entities.is_empty:
            negative = detect_negative_result(dump, entities, min_content_nodes=config.min_content_nodes)
            if negative is not None:
                logger.info("negative_result_detected", subject=entities.subject, location=entities.location)
                return ExtractionResult(negative_message=negative, source_url=base_url)
        if entities.subject:
            cleaned = strip_noise(dump)
            events = extract_events(cleaned, entities, settings=config, base_url=base_url)
            if events:
                logger.info("events_extracted", subject=entities.subject, events=len(events))
                return ExtractionResult(events=tuple(events), source_url=base_url)
            # Subject is on the page but no date sat within reach of it.
            events = collect_page_dates(cleaned, entities, settings=config)
            if events:
                logger.info("page_dates_collected", subject=entities.subject, events=len(events))
                return ExtractionResult(events=tuple(events), source_url=base_url)

    structured = parse_structure(dump, base_url=base_url)
    logger.debug(
        "structured_fallback_parsed",
        events=len(structured.events),
        search_results=len(structured.search_results),
        links=len(structured.links),
    )
    return ExtractionResult(structured=structured, source_url=base_url)


__all__ = [
    "ExtractedEvent",
    "ExtractionResult",
    "Link",
    "MONTH_NAMES",
    "StructuredFallback",
    "analyze_response",
    "collect_page_dates",
    "extract_events",
    "mentions_subject",
    "parse_structure",
    "subject_variants",
]
