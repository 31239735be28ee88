from .catalog_store import CapabilityCatalog, CatalogSnapshot, capability_catalog, normalize_capability_id
from .exceptions import CapabilityNotFoundError, CatalogError, StepAlreadyAssignedError

__all__ = [
    "CapabilityCatalog",
    "CapabilityNotFoundError",
    "CatalogError",
    "CatalogSnapshot",
    "StepAlreadyAssignedError",
    "capability_catalog",
    "normalize_capability_id",
]
