"""Addon model.

An addon is any object with a ``name``. Everything else is an optional
capability, detected once per addon by :class:`AddonCapabilities`:

``is_enabled()``
    Return False to take the addon out of the build (default: enabled).
``included(host)``
    Called once, after deny/allow-list validation, before any tree hook.
``tree_for(type)``
    Return the addon's tree for a tree type (``app``, ``addon``, ``styles``,
    ``templates``, ``vendor``, ``public``, ``test-support``, ...).
``preprocess_tree(type, tree)`` / ``postprocess_tree(type, tree)``
    Chained transforms before / after the type's compiler.
``lint_tree(type, tree)``
    Return a lint result tree; results of all addons are merged.
``import_transforms()``
    Return ``{name: callable}`` or ``{name: {"transform": callable,
    "process_options": callable}}`` for ``import_(..., using=[...])``.
``content_for(type, config)``
    Return text spliced into ``{{content-for "type"}}`` markers.
``setup_preprocessor_registry(registry)``
    Register compiler plugins.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from brocade.core.trees.nodes import Tree

HOOKS = (
    "is_enabled",
    "included",
    "tree_for",
    "preprocess_tree",
    "postprocess_tree",
    "lint_tree",
    "import_transforms",
    "content_for",
    "setup_preprocessor_registry",
)


@dataclass(frozen=True)
class AddonCapabilities:
    """Which optional hooks an addon implements."""

    hooks: FrozenSet[str]

    @classmethod
    def of(cls, addon: Any) -> "AddonCapabilities":
        return cls(frozenset(h for h in HOOKS if callable(getattr(addon, h, None))))

    def has(self, hook: str) -> bool:
        return hook in self.hooks


class Addon:
    """Convenience base class for addons.

    Subclasses add hook methods as needed. ``trees`` maps tree types to the
    trees returned by the default ``tree_for``.
    """

    name: str = ""

    def __init__(
        self,
        name: Optional[str] = None,
        *,
        root: Optional[Path | str] = None,
        version: str = "0.0.0",
        addons: Optional[List[Any]] = None,
        trees: Optional[Mapping[str, Tree]] = None,
    ) -> None:
        self.name = name or type(self).name or type(self).__name__
        self.root = Path(root) if root is not None else None
        self.version = version
        self.addons: List[Any] = list(addons or [])
        self.trees: Dict[str, Tree] = dict(trees or {})
        self.app: Any = None

    def tree_for(self, type_: str) -> Optional[Tree]:
        return self.trees.get(type_)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}@{self.version}>"


__all__ = ["HOOKS", "Addon", "AddonCapabilities"]
