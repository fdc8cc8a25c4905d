"""
Process logging setup for the hook sidecar.

Every record carries the sidecar's component name so that its lines can be
told apart from the hypervisor manager's in a shared pod log.
"""

from __future__ import annotations

import logging as _logging
import sys as _sys
import typing as _typing

import customhook.constants as constants

LOG_FORMAT = "%(asctime)s %(levelname)s [%(component)s] %(name)s: %(message)s"

_HANDLER_NAME = "customhook"


class ComponentFilter(_logging.Filter):
    """Attach a ``component`` attribute to every record passing through."""

    def __init__(self, component: str) -> None:
        super().__init__()
        self.component = component

    def filter(self, record: _logging.LogRecord) -> bool:
        record.component = self.component
        return True


def configure_logging(
    level: str | int = "info",
    component: str = constants.DEFAULT_LOG_COMPONENT,
    *,
    stream: _typing.TextIO | None = None,
) -> _logging.Handler:
    """
    Install the sidecar's log handler on the ``customhook`` logger.

    Calling this again replaces the handler installed by the previous call,
    so the level and component can be changed at runtime.

    Args:
        level: Level name (case-insensitive) or number.
        component: Component name shown in each line.
        stream: Output stream. Defaults to stderr.

    Returns:
        The installed handler.

    Raises:
        ValueError: If ``level`` is not a known level name.
    """
    if isinstance(level, str):
        numeric = _logging.getLevelName(level.upper())
        if not isinstance(numeric, int):
            raise ValueError(f"Unknown log level: {level!r}")
        level = numeric

    logger = _logging.getLogger("customhook")
    for existing in list(logger.handlers):
        if existing.get_name() == _HANDLER_NAME:
            logger.removeHandler(existing)

    handler = _logging.StreamHandler(stream or _sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.addFilter(ComponentFilter(component))
    handler.setFormatter(_logging.Formatter(LOG_FORMAT))

    logger.addHandler(handler)
    logger.setLevel(level)
    return handler
