from __future__ import annotations

from typing import Iterable

from ..core.config import Settings, get_settings
from ..core.logging import configure_logging, get_logger
from ..core.metrics import render_metrics
from .engine import CapabilityInput, RoutingEngine

logger = get_logger(name=__name__)


def bootstrap_engine(
    settings: Settings | None = None,
    *,
    capabilities: Iterable[CapabilityInput] | None = None,
) -> RoutingEngine:
    """Configure logging and build an engine, optionally seeded with a capability catalog."""
    settings = settings or get_settings()
    configure_logging(settings.observability.log_level)
    engine = RoutingEngine(settings=settings)
    if capabilities is not None:
        engine.register_capabilities(capabilities)
    logger.info(
        "routing_engine_ready",
        environment=settings.environment,
        capabilities=len(engine.catalog.snapshot()),
    )
    return engine


def metrics_payload(settings: Settings | None = None) -> tuple[bytes, str] | None:
    """Return the Prometheus exposition body and content type, or ``None`` when disabled."""
    settings = settings or get_settings()
    if not settings.observability.prometheus_enabled:
        return None
    return render_metrics()


__all__ = ["bootstrap_engine", "metrics_payload"]
