from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

_BROCADE_HANDLER: logging.Handler | None = None
_CONFIGURED_TARGET: str | None = None

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(*, level: str = "INFO", log_path: Optional[Path] = None) -> logging.Handler:
    """Install the Brocade handler on the ``brocade`` logger.

    Logs go to stderr, or to ``log_path`` when given. Idempotent per-process:
    calling again with the same target only adjusts the level.
    """
    global _BROCADE_HANDLER, _CONFIGURED_TARGET

    target = str(Path(log_path).resolve()) if log_path is not None else "<stderr>"
    root = logging.getLogger("brocade")
    root.setLevel(_level_from_name(level))

    if _BROCADE_HANDLER is not None and _CONFIGURED_TARGET == target:
        _BROCADE_HANDLER.setLevel(_level_from_name(level))
        return _BROCADE_HANDLER

    # Replace the handler when switching targets.
    if _BROCADE_HANDLER is not None:
        root.removeHandler(_BROCADE_HANDLER)
        _BROCADE_HANDLER.close()
        _BROCADE_HANDLER = None

    handler: logging.Handler
    if log_path is not None:
        Path(target).parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(target, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(_level_from_name(level))
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    _BROCADE_HANDLER = handler
    _CONFIGURED_TARGET = target
    return handler


def reset_logging_for_tests() -> None:
    """Test-only: remove the handler installed by configure_logging()."""
    global _BROCADE_HANDLER, _CONFIGURED_TARGET
    if _BROCADE_HANDLER is not None:
        logging.getLogger("brocade").removeHandler(_BROCADE_HANDLER)
        _BROCADE_HANDLER.close()
    _BROCADE_HANDLER = None
    _CONFIGURED_TARGET = None


__all__ = ["configure_logging", "reset_logging_for_tests", "LOG_FORMAT"]
