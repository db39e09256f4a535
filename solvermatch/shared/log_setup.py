"""Logging setup for library consumers and developer scripts."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Attach a single stream handler to the ``solvermatch`` logger.

    Calling this more than once only updates the level.
    """
    root = logging.getLogger("solvermatch")
    root.setLevel(level)
    if not any(getattr(h, "_solvermatch", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._solvermatch = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    return root
