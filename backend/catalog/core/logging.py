"""Logging setup for the catalog service.

Modules log through ``logging.getLogger(__name__)``; this only attaches a
single stream handler to the ``catalog`` logger and sets its level.
"""
from __future__ import annotations

import logging

_FORMAT = "[catalog] %(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    logger = logging.getLogger("catalog")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
    logger.propagate = False
    return logger


__all__ = ["configure_logging"]
