"""structlog setup for processes embedding the OPA client."""

from __future__ import annotations

import logging
from typing import Any

import structlog

__all__ = ["configure_logging", "get_logger"]

COMPONENT = "opa"


def configure_logging(
    *,
    json_output: bool = True,
    level: str = "INFO",
    verbose: bool = False,
) -> None:
    """Configure structlog output for OPA client events.

    ``verbose`` mirrors the client verbose flag and lowers the level to
    DEBUG, so the always-allow client events are emitted too.
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]
    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    min_level = logging.DEBUG if verbose else logging.getLevelNamesMapping()[level.upper()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(
    logger: structlog.BoundLogger | None = None,
    **context: Any,
) -> structlog.BoundLogger:
    """Return ``logger`` (or a fresh one) bound to the OPA component."""
    base = logger if logger is not None else structlog.get_logger()
    return base.bind(component=COMPONENT, **context)  # type: ignore[no-any-return]
