"""
Logging — structlog setup.

    import bookify
    bookify.configure_logging("debug", json=False)
"""

from __future__ import annotations

import logging

import structlog

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


def parse_level(level: str | int) -> int:
    """Turn "info" / "INFO" / 20 into a stdlib level number."""
    if isinstance(level, int):
        return level
    try:
        return _LEVELS[level.strip().lower()]
    except KeyError:
        raise ValueError(f"unknown log level: {level!r}") from None


def configure_logging(level: str | int = "info", json: bool = True) -> None:
    """Configure structlog for the whole process."""
    renderer = (
        structlog.processors.JSONRenderer()
        if json
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(parse_level(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
    )


def get_logger(component: str) -> structlog.typing.FilteringBoundLogger:
    """Lazy logger tagged with component; resolves configuration on first use."""
    return structlog.get_logger(component=component)


__all__ = ("configure_logging", "get_logger", "parse_level")
