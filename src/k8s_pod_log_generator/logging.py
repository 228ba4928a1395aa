"""Logging setup shared by the generator's modules.

Progress lines are written as ``<event> key=value ...`` so a run can be
followed (and grepped) from container logs.
"""

import logging
from typing import Any

from .settings import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(extra_handlers: list[logging.Handler] | None = None) -> None:
    """Install the root handler at ``LOGGEN_LOG_LEVEL``; later calls are no-ops."""

    logging.basicConfig(level=get_settings().log_level, format=LOG_FORMAT)

    if extra_handlers:
        root = logging.getLogger()
        for handler in extra_handlers:
            root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name)


def format_context(**context: Any) -> str:
    """Render ``key=value`` pairs; values containing spaces are quoted."""

    parts = []
    for key, value in context.items():
        text = str(value)
        if not text or " " in text:
            text = f'"{text}"'
        parts.append(f"{key}={text}")
    return " ".join(parts)


def log_structured(
    logger: logging.Logger,
    message: str,
    *,
    level: int = logging.INFO,
    **context: Any,
) -> None:
    """Emit ``message`` followed by its context as ``key=value`` pairs."""

    if not logger.isEnabledFor(level):
        return
    logger.log(level, "%s %s", message, format_context(**context))
