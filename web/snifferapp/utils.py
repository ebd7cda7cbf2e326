"""
Utility helpers: directory setup, logging config, and time utils.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

# Loggers configured by init_logging; the core library only creates children.
LOGGER_NAMES = ("snifferapp", "payload_router")

_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def ensure_dirs(*paths: Path) -> None:
    """Ensure each directory exists."""
    for p in paths:
        p.mkdir(parents=True, exist_ok=True)


def init_logging(level: Union[str, int] = "INFO", log_file: Optional[Union[str, Path]] = None) -> logging.Logger:
    """Configure a console logger + optional rotating file handler.

    Applies to both the app and the core library loggers and returns the app
    logger. Calling it again replaces the handlers instead of stacking them.
    """
    if isinstance(level, str):
        log_level = getattr(logging, level.upper(), logging.INFO)
    else:
        log_level = level

    handlers = []

    # Console
    ch = logging.StreamHandler()
    ch.setLevel(log_level)
    ch.setFormatter(logging.Formatter(_FORMAT))
    handlers.append(ch)

    # File (rotating)
    if log_file:
        path = Path(log_file)
        ensure_dirs(path.parent)
        fh = RotatingFileHandler(path, maxBytes=1_000_000, backupCount=5, encoding="utf-8")
        fh.setLevel(log_level)
        fh.setFormatter(logging.Formatter(_FORMAT))
        handlers.append(fh)

    for name in LOGGER_NAMES:
        lg = logging.getLogger(name)
        for old in list(lg.handlers):
            lg.removeHandler(old)
            old.close()
        lg.setLevel(log_level)
        lg.propagate = False  # avoid duplicate logs if root has handlers
        for h in handlers:
            lg.addHandler(h)

    return logging.getLogger(LOGGER_NAMES[0])


def utcnow_iso() -> str:
    """Return current UTC timestamp in RFC3339-ish ISO format."""
    return datetime.now(timezone.utc).replace(tzinfo=None).isoformat() + "Z"
