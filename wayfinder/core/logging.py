from __future__ import annotations

import logging
from typing import Any

import structlog

_ROOT_PACKAGE = "wayfinder"


def configure_logging(level: str = "INFO") -> None:
    """Route engine events through stdlib logging as one JSON object per line."""
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper(), logging.INFO),
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def component_for(name: str | None) -> str:
    """Map a module path such as ``wayfinder.responses.extractor`` to its engine stage (``responses``)."""
    if not name:
        return _ROOT_PACKAGE
    parts = name.split(".")
    if parts[0] == _ROOT_PACKAGE and len(parts) > 1:
        return parts[1]
    return parts[0]


def get_logger(*, name: str | None = None, **kwargs: Any) -> structlog.stdlib.BoundLogger:
    """Return a logger whose events carry the engine stage that emitted them."""
    return structlog.get_logger(name, component=component_for(name), **kwargs)
