from __future__ import annotations

import logging
import os
from typing import Final

_HANDLER_ATTACHED: bool = False
_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that log every request at INFO
_NOISY_LOGGERS: Final[tuple[str, ...]] = ("httpx", "httpcore")


def _resolve_level(level_name: str | None = None) -> int:
    level_name = (level_name or os.getenv("TRACKING_LOG_LEVEL", "INFO")).upper()
    return getattr(logging, level_name, logging.INFO)


def configure_logging(level_name: str | None = None) -> int:
    """Attach the stream handler to the root logger once and apply the level.

    Returns the numeric level in effect.
    """
    global _HANDLER_ATTACHED

    level = _resolve_level(level_name)
    root = logging.getLogger()

    if not _HANDLER_ATTACHED:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(handler)
        for noisy in _NOISY_LOGGERS:
            logging.getLogger(noisy).setLevel(max(level, logging.WARNING))
        _HANDLER_ATTACHED = True

    root.setLevel(level)
    return level


def get_logger(name: str) -> logging.Logger:
    """Return a module logger; configures the root handler on first use."""
    level = configure_logging()
    logger = logging.getLogger(name)
    logger.setLevel(level)
    return logger
