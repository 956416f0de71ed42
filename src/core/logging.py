from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from src.core.config import get_settings

_CONFIGURED = False


def _resolve_level(level: int | str | None) -> int:
    if level is None:
        level = get_settings().log_level
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: int | str | None = None, *, json_logs: bool | None = None) -> None:
    """Configure structlog once for the process.

    JSON lines are emitted everywhere except the ``local`` environment, which gets
    the human-friendly console renderer unless ``json_logs`` forces a choice.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    settings = get_settings()
    log_level = _resolve_level(level)
    if json_logs is None:
        json_logs = settings.environment != "local"

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        stream=sys.stdout,
    )

    renderer: Any = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.dict_tracebacks,
        renderer,
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=True,
    )

    _CONFIGURED = True
