from __future__ import annotations

from typing import Any, Dict, Mapping


class BrocadeError(Exception):
    """Base exception for Brocade."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class ConfigurationError(BrocadeError, ValueError):
    """Raised for build configuration mistakes detected before any tree is read.

    Covers unknown addons in deny/allow lists, conflicting default plugins,
    malformed asset imports and invalid build options.
    """

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        BrocadeError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class AddonContractError(BrocadeError, TypeError):
    """Raised when an addon returns something its hook contract forbids."""

    def __init__(
        self,
        message: str = "",
        *,
        addon: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        if addon:
            ctx["addon"] = addon
        BrocadeError.__init__(self, message, context=ctx)
        TypeError.__init__(self, message)


class TreeMergeError(BrocadeError, RuntimeError):
    """Raised when a non-overwriting merge sees the same path twice."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        BrocadeError.__init__(self, message, context=context)
        RuntimeError.__init__(self, message)


class TreeReadError(BrocadeError, FileNotFoundError):
    """Raised when a tree references files that do not exist."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        BrocadeError.__init__(self, message, context=context)
        FileNotFoundError.__init__(self, message)


__all__ = [
    "BrocadeError",
    "ConfigurationError",
    "AddonContractError",
    "TreeMergeError",
    "TreeReadError",
]
