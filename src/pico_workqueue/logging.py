"""Logging helpers for pico-workqueue.

Every logger in the library hangs off the ``pico_workqueue`` namespace, so a
single ``configure_logging()`` call controls queue, scheduler and container
output together.  The level may also come from ``PICO_WORKQUEUE_LOG_LEVEL``.
"""

import logging
import os
import sys
from typing import Optional, Union

ROOT_LOGGER = "pico_workqueue"

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
"""str: Default log format used by ``configure_logging``."""

LEVEL_ENV_VAR = "PICO_WORKQUEUE_LOG_LEVEL"


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``pico_workqueue`` namespace.

    Args:
        name: Logger name, usually ``__name__``.  Names outside the
            namespace are prefixed with ``pico_workqueue.``.
    """
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def resolve_level(level: Union[int, str, None]) -> int:
    """Turn a level name, number or ``None`` into a numeric logging level.

    ``None`` falls back to ``PICO_WORKQUEUE_LOG_LEVEL`` and then ``INFO``.
    Unknown names resolve to ``INFO``.
    """
    if level is None:
        level = os.getenv(LEVEL_ENV_VAR, "INFO")
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: Union[int, str, None] = None, handler: Optional[logging.Handler] = None) -> None:
    """Set the level for all pico_workqueue loggers and attach a handler once.

    Args:
        level: Level number or name.  ``None`` reads ``PICO_WORKQUEUE_LOG_LEVEL``.
        handler: Handler to attach when none is present yet.  Defaults to a
            ``StreamHandler`` on stderr.
    """
    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(resolve_level(level))

    if root_logger.handlers:
        return
    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
    root_logger.addHandler(handler)
