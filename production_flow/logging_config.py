"""Shared logging configuration."""

from __future__ import annotations

import logging
import os

LOG_LEVEL_ENV = "PRODUCTION_FLOW_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _resolve_level(value: int | str | None) -> int:
    if isinstance(value, int):
        return value
    for candidate_value in (value, os.environ.get(LOG_LEVEL_ENV)):
        if isinstance(candidate_value, str):
            candidate = logging.getLevelName(candidate_value.strip().upper())
            if isinstance(candidate, int):
                return candidate
    return logging.INFO


def configure_logging(level: int | str | None = None) -> None:
    resolved = _resolve_level(level)
    root = logging.getLogger()
    if not root.hasHandlers():
        logging.basicConfig(level=resolved, format=LOG_FORMAT)
    else:
        root.setLevel(resolved)
    logging.getLogger("production_flow").setLevel(resolved)


__all__ = ["configure_logging", "LOG_LEVEL_ENV"]
