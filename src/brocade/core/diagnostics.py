"""Soft diagnostics collected during a build.

Duplicate imports, deprecated addon versions and missing companion addons
never abort composition. They are logged through the stdlib logger of the
module that detected them and recorded here so callers can inspect them
after the engine has been constructed.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

INFO = "info"
WARNING = "warning"
DEPRECATION = "deprecation"

_LEVELS = {
    INFO: logging.INFO,
    WARNING: logging.WARNING,
    DEPRECATION: logging.WARNING,
}


@dataclass
class Diagnostic:
    level: str
    message: str
    context: Dict[str, Any] = field(default_factory=dict)


class Diagnostics:
    """Ordered record of non-fatal build messages."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self._records: List[Diagnostic] = []

    def _emit(
        self,
        level: str,
        message: str,
        logger: Optional[logging.Logger],
        context: Dict[str, Any],
    ) -> Diagnostic:
        record = Diagnostic(level=level, message=message, context=context)
        self._records.append(record)
        prefix = "DEPRECATION: " if level == DEPRECATION else ""
        (logger or self._logger).log(_LEVELS[level], "%s%s", prefix, message)
        return record

    def info(self, message: str, *, logger: Optional[logging.Logger] = None, **context: Any) -> Diagnostic:
        return self._emit(INFO, message, logger, context)

    def warn(self, message: str, *, logger: Optional[logging.Logger] = None, **context: Any) -> Diagnostic:
        return self._emit(WARNING, message, logger, context)

    def deprecate(self, message: str, *, logger: Optional[logging.Logger] = None, **context: Any) -> Diagnostic:
        return self._emit(DEPRECATION, message, logger, context)

    def by_level(self, level: str) -> List[Diagnostic]:
        return [r for r in self._records if r.level == level]

    def messages(self, level: Optional[str] = None) -> List[str]:
        return [r.message for r in self._records if level is None or r.level == level]

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(list(self._records))

    def __len__(self) -> int:
        return len(self._records)


__all__ = ["Diagnostic", "Diagnostics", "INFO", "WARNING", "DEPRECATION"]
