"""
structlog setup for the adapter.

One JSON object per line on stdout (LOG_FORMAT=console for local runs), keyed
by ``event_type``. Loggers handed to a module instance carry its
``module_alias`` so two adapters on one host can be told apart.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog


def _env_level() -> int:
    return getattr(logging, os.getenv("LOG_LEVEL", "INFO").strip().upper(), logging.INFO)


def _env_format() -> str:
    return os.getenv("LOG_FORMAT", "json").strip().lower()


def rename_event_key(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """structlog's positional ``event`` becomes ``event_type``."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    return event_dict


def configure_logging(level: int | None = None, fmt: str | None = None) -> None:
    fmt = fmt or _env_format()
    renderer: Any
    if fmt == "console":
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    else:
        renderer = structlog.processors.JSONRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
            structlog.processors.format_exc_info,
            rename_event_key,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level or _env_level()),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_logging()


def get_logger(name: str, **context: Any) -> structlog.BoundLogger:
    """
    Logger bound to ``logger=name`` plus any extra context, e.g.
    ``get_logger(__name__, module_alias="ark_dex_adapter")``.
    """
    return structlog.get_logger(name).bind(logger=name, **context)
