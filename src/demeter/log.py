from __future__ import annotations

"""Logger access and process-wide logging setup."""

import logging

from .config import LoggingSettings

ROOT_LOGGER = "demeter"


def getLogger(name: str) -> logging.Logger:
    """Return a logger; module loggers live under the ``demeter`` hierarchy."""
    return logging.getLogger(name)


def configure_logging(settings: LoggingSettings) -> logging.Logger:
    """
    Attach a single stream handler to the package root logger.

    Calling this again replaces the handler instead of stacking a new one.
    """
    root = logging.getLogger(ROOT_LOGGER)
    for handler in list(root.handlers):
        if getattr(handler, "_demeter_handler", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(settings.format))
    handler._demeter_handler = True  # type: ignore[attr-defined]

    root.addHandler(handler)
    root.setLevel(settings.level)
    return root
