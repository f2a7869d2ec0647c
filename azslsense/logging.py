"""Structured logging for the analysis core.

Everything the indexer and validator report (corpus walks, skipped files,
index statistics, suppressed checks) goes through structlog bound loggers
routed into stdlib logging, so a host can attach its own handlers.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def _add_component(
    _logger: structlog.types.WrappedLogger,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    event_dict.setdefault("component", "azslsense")
    return event_dict


def configure_logging(
    *,
    level: str = "WARNING",
    json_format: bool = False,
    stream: Any = None,
) -> None:
    """Configure structlog on top of the stdlib root logger.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR)
        json_format: Render JSON lines instead of console output
        stream: Output stream, stderr by default
    """
    default_level = _LEVEL_MAP.get(level.upper(), logging.WARNING)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
        _add_component,  # type: ignore[list-item]
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(default_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    out = stream if stream is not None else sys.stderr
    if json_format:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=out.isatty() if hasattr(out, "isatty") else False,
            pad_event_to=0,
            pad_level=False,
        )
    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(out)
    handler.setLevel(default_level)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(default_level)
    root_logger.addHandler(handler)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    # positional args reach the logger factory lazily, on first use, so
    # module-level loggers still pick up configure_logging
    if name:
        return structlog.get_logger(name)  # type: ignore[no-any-return]
    return structlog.get_logger()  # type: ignore[no-any-return]
