from __future__ import annotations


class CatalogError(RuntimeError):
    """Base class for capability catalog failures."""


class CapabilityNotFoundError(CatalogError):
    """Raised when a capability id cannot be resolved in the active snapshot."""


class StepAlreadyAssignedError(CatalogError):
    """Raised when a workflow step is assigned a second capability."""
