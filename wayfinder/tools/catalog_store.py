from __future__ import annotations

import re
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from pydantic import TypeAdapter

from ..core import metrics
from ..core.logging import get_logger
from ..schemas.capabilities import CapabilityCategory, CapabilityDescriptor
from .exceptions import CapabilityNotFoundError

__all__ = ["CapabilityCatalog", "CatalogSnapshot", "capability_catalog", "normalize_capability_id"]

_ID_SEPARATORS = re.compile(r"[\\/\s_]+")
_DASH_COLLAPSE = re.compile(r"-+")

_DESCRIPTORS = TypeAdapter(list[CapabilityDescriptor])


def normalize_capability_id(value: str) -> str:
    """Return the lookup key for a capability id or display name."""
    if not isinstance(value, str):
        raise TypeError("Capability id must be a string")
    collapsed = _ID_SEPARATORS.sub("-", value.strip())
    collapsed = _DASH_COLLAPSE.sub("-", collapsed)
    return collapsed.strip("-").lower()


@dataclass(slots=True, frozen=True)
class CatalogSnapshot:
    generated_at: datetime
    entries: tuple[CapabilityDescriptor, ...] = ()
    by_id: Mapping[str, CapabilityDescriptor] = field(default_factory=lambda: MappingProxyType({}))
    version: int = 0

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    @property
    def tool_count(self) -> int:
        return sum(len(entry.tools) for entry in self.entries)

    def get(self, server_id: str) -> CapabilityDescriptor | None:
        return self.by_id.get(normalize_capability_id(server_id))

    def require(self, server_id: str) -> CapabilityDescriptor:
        descriptor = self.get(server_id)
        if descriptor is None:
            raise CapabilityNotFoundError(f"Capability '{server_id}' is not registered")
        return descriptor

    def in_category(self, category: CapabilityCategory) -> tuple[CapabilityDescriptor, ...]:
        return tuple(entry for entry in self.entries if entry.category is category)


def _build_snapshot(entries: Iterable[CapabilityDescriptor], *, version: int) -> CatalogSnapshot:
    ordered: dict[str, CapabilityDescriptor] = {}
    for entry in entries:
        # A later registration of the same id replaces the earlier one in place.
        ordered[normalize_capability_id(entry.server_id)] = entry
    return CatalogSnapshot(
        generated_at=datetime.now(timezone.utc),
        entries=tuple(ordered.values()),
        by_id=MappingProxyType(dict(ordered)),
        version=version,
    )


class CapabilityCatalog:
    """Holds the active capability snapshot and swaps it on every write.

    Readers call :meth:`snapshot` and work on the returned immutable value for
    the whole request. Writers validate their input first, build the next
    snapshot under a lock and replace the reference, so a reader never sees a
    partially applied update.
    """

    def __init__(self) -> None:
        self._logger = get_logger(name=__name__)
        self._lock = threading.Lock()
        self._snapshot = _build_snapshot((), version=0)

    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    def replace(self, descriptors: Iterable[CapabilityDescriptor | Mapping[str, Any]]) -> CatalogSnapshot:
        """Swap in a new catalog built from ``descriptors``; raises ``ValidationError`` on bad input."""
        validated = _DESCRIPTORS.validate_python(list(descriptors))
        with self._lock:
            snapshot = _build_snapshot(validated, version=self._snapshot.version + 1)
            self._snapshot = snapshot
        self._record(snapshot, action="replace")
        return snapshot

    def upsert(self, descriptor: CapabilityDescriptor | Mapping[str, Any]) -> CatalogSnapshot:
        validated = CapabilityDescriptor.model_validate(descriptor)
        with self._lock:
            current = self._snapshot
            snapshot = _build_snapshot((*current.entries, validated), version=current.version + 1)
            self._snapshot = snapshot
        self._record(snapshot, action="upsert", server_id=validated.server_id)
        return snapshot

    def remove(self, server_id: str) -> CatalogSnapshot:
        key = normalize_capability_id(server_id)
        with self._lock:
            current = self._snapshot
            if key not in current.by_id:
                raise CapabilityNotFoundError(f"Capability '{server_id}' is not registered")
            remaining = (entry for entry in current.entries if normalize_capability_id(entry.server_id) != key)
            snapshot = _build_snapshot(remaining, version=current.version + 1)
            self._snapshot = snapshot
        self._record(snapshot, action="remove", server_id=server_id)
        return snapshot

    def clear(self) -> None:
        with self._lock:
            snapshot = _build_snapshot((), version=self._snapshot.version + 1)
            self._snapshot = snapshot
        metrics.observe_capability_catalog_entries(0)

    def status(self) -> dict[str, Any]:
        snapshot = self._snapshot
        return {
            "capabilities": len(snapshot),
            "tools": snapshot.tool_count,
            "version": snapshot.version,
            "generated_at": snapshot.generated_at.isoformat(),
            "categories": {
                category.value: len(snapshot.in_category(category))
                for category in CapabilityCategory
                if snapshot.in_category(category)
            },
        }

    def _record(self, snapshot: CatalogSnapshot, *, action: str, server_id: str | None = None) -> None:
        metrics.observe_capability_catalog_entries(len(snapshot))
        self._logger.info(
            "capability_catalog_updated",
            action=action,
            server_id=server_id,
            capabilities=len(snapshot),
            tools=snapshot.tool_count,
            version=snapshot.version,
        )


capability_catalog = CapabilityCatalog()
