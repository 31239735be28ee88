from __future__ import annotations

from typing import Sequence
from urllib.parse import urlsplit

from ..orchestration.entities import QueryEntities
from .extractor import ExtractedEvent, ExtractionResult, StructuredFallback

DEFAULT_MAX_RESULTS = 10


def _plural(count: int, singular: str, plural: str | None = None) -> str:
    return singular if count == 1 else (plural or f"{singular}s")


def _scope(entities: QueryEntities | None) -> str:
    if entities is None:
        return ""
    scope = f" for **{entities.subject}**" if entities.subject else ""
    if entities.location:
        scope += f" in {entities.location}"
    return scope


def _site_root(url: str | None) -> str | None:
    if not url:
        return None
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        return None
    return f"{parts.scheme}://{parts.netloc}"


def fallback_sentence(entities: QueryEntities | None = None) -> str:
    if entities is None or entities.is_empty:
        return "I've completed the search. Review the source page for details."
    subject = entities.subject or "events"
    where = f" in {entities.location}" if entities.location else ""
    return (
        f"I completed the search for **{subject}**{where}, but couldn't pull specific details from the page, "
        "so check the source site directly for the full listing."
    )


def format_events(
    events: Sequence[ExtractedEvent],
    entities: QueryEntities | None = None,
    *,
    max_results: int = DEFAULT_MAX_RESULTS,
    source_url: str | None = None,
) -> str:
    """Render events as numbered paragraphs, highest confidence first."""
    if not events:
        return fallback_sentence(entities)
    ranked = sorted(events, key=lambda event: event.confidence, reverse=True)[:max_results]
    lines = [f"I found {len(ranked)} {_plural(len(ranked), 'event')}{_scope(entities)}:", ""]
    for position, event in enumerate(ranked, start=1):
        lines.append(f"{position}. **{event.subject}**")
        if event.date:
            when = f"{event.date} at {event.time}" if event.time else event.date
            lines.append(f"   Date: {when}")
        elif event.time:
            lines.append(f"   Time: {event.time}")
        if event.venue:
            lines.append(f"   Venue: {event.venue}")
        if event.url:
            lines.append(f"   Tickets: {event.url}")
        lines.append("")
    site = _site_root(source_url)
    if site:
        lines.append(f"Tickets and full details are available at {site}.")
    return "\n".join(lines).strip()


def format_structured(
    fallback: StructuredFallback,
    entities: QueryEntities | None = None,
    *,
    max_results: int = DEFAULT_MAX_RESULTS,
) -> str:
    if fallback.events:
        return format_events(fallback.events, entities, max_results=max_results)
    if fallback.search_results:
        results = fallback.search_results[:max_results]
        lines = [f"I found {len(results)} {_plural(len(results), 'result')}:", ""]
        lines.extend(f"{position}. {result}" for position, result in enumerate(results, start=1))
        return "\n".join(lines)
    if fallback.links:
        links = fallback.links[:max_results]
        lines = [f"I found {len(links)} relevant {_plural(len(links), 'link')}:", ""]
        lines.extend(f"{position}. [{link.text}]({link.url})" for position, link in enumerate(links, start=1))
        return "\n".join(lines)
    return fallback_sentence(entities)


def render_result(
    result: ExtractionResult,
    entities: QueryEntities | None = None,
    *,
    max_results: int = DEFAULT_MAX_RESULTS,
) -> str:
    if result.negative_message:
        return result.negative_message
    if result.events:
        return format_events(result.events, entities, max_results=max_results, source_url=result.source_url)
    return format_structured(result.structured, entities, max_results=max_results)


__all__ = ["fallback_sentence", "format_events", "format_structured", "render_result"]
