"""Addon hook runner.

Threads a tree through every eligible addon's hooks for one tree type in a
fixed stage order:

1. PRE-PROCESS   - ``preprocess_tree(type, tree)``, chained in declaration order
2. COMPILE       - the type's compiler (supplied by the caller)
3. LINT          - ``lint_tree(type, tree)`` for every addon, merged into one
                   parallel tree (not chained)
4. POST-PROCESS  - ``postprocess_tree(type, tree)``, chained in declaration order

:meth:`AddonHookRunner.process` runs the same chain without the LINT stage.

Eligibility: an addon takes part when it is enabled (``is_enabled()``,
default True), not deny-listed, and allow-listed when an allow-list is set.
Deny/allow-list entries naming unknown addons are configuration errors
raised by :meth:`AddonHookRunner.validate_lists` before any hook runs.

Hook exceptions are not caught: addons are trusted and a failing hook aborts
the build.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from brocade.core.exceptions import ConfigurationError
from brocade.core.trees.merge import is_empty_tree, merge_trees
from brocade.core.trees.nodes import Tree

from .base import AddonCapabilities

logger = logging.getLogger(__name__)


@dataclass
class AddonTree:
    """A tree contributed by one addon for one tree type."""

    name: str
    tree: Tree
    root: Optional[Path]


@dataclass
class StageResult:
    tree: Tree
    lint: Tree


class AddonHookRunner:
    """Run addon hooks for a tree type over the eligible addons."""

    def __init__(
        self,
        addons: Sequence[Any],
        *,
        blacklist: Optional[Sequence[str]] = None,
        whitelist: Optional[Sequence[str]] = None,
    ) -> None:
        self._declared: List[Any] = list(addons)
        self.addons: List[Any] = list(addons)
        self.blacklist = list(blacklist) if blacklist is not None else None
        self.whitelist = list(whitelist) if whitelist is not None else None
        self._capabilities: Dict[int, AddonCapabilities] = {}
        self._included = False

    # ------------------------------------------------------------------
    # Eligibility
    # ------------------------------------------------------------------
    def capabilities(self, addon: Any) -> AddonCapabilities:
        caps = self._capabilities.get(id(addon))
        if caps is None:
            caps = self._capabilities[id(addon)] = AddonCapabilities.of(addon)
        return caps

    def validate_lists(self) -> None:
        names = {addon.name for addon in self._declared}
        for list_name, entries in (("blacklist", self.blacklist), ("whitelist", self.whitelist)):
            for entry in entries or []:
                if entry not in names:
                    raise ConfigurationError(
                        f'Addon "{entry}" defined in {list_name} is not found',
                        context={"addon": entry, "list": list_name},
                    )

    def is_enabled(self, addon: Any) -> bool:
        if not self.capabilities(addon).has("is_enabled"):
            return True
        return bool(addon.is_enabled())

    def should_include(self, addon: Any) -> bool:
        if not self.is_enabled(addon):
            return False
        if self.blacklist is not None and addon.name in self.blacklist:
            return False
        if self.whitelist is not None and addon.name not in self.whitelist:
            return False
        return True

    def eligible(self) -> List[Any]:
        return [addon for addon in self.addons if self.should_include(addon)]

    def notify_included(self, host: Any) -> List[Any]:
        """Filter the addon list and call each remaining addon's ``included`` once."""
        if self._included:
            return list(self.addons)
        self.validate_lists()

        kept: List[Any] = []
        for addon in self._declared:
            if not self.should_include(addon):
                logger.debug("addon %s excluded from build", addon.name)
                continue
            if self.capabilities(addon).has("included"):
                addon.included(host)
            kept.append(addon)

        self.addons = kept
        self._included = True
        return list(kept)

    def with_hook(self, hook: str) -> List[Any]:
        return [addon for addon in self.addons if self.capabilities(addon).has(hook)]

    # ------------------------------------------------------------------
    # Trees and stages
    # ------------------------------------------------------------------
    def trees_for(self, type_: str) -> List[AddonTree]:
        bundles: List[AddonTree] = []
        for addon in self.with_hook("tree_for"):
            tree = addon.tree_for(type_)
            if tree is not None and not is_empty_tree(tree):
                bundles.append(AddonTree(addon.name, tree, getattr(addon, "root", None)))
        return bundles

    def preprocess(self, type_: str, tree: Tree) -> Tree:
        for addon in self.with_hook("preprocess_tree"):
            tree = addon.preprocess_tree(type_, tree)
        return tree

    def postprocess(self, type_: str, tree: Tree) -> Tree:
        for addon in self.with_hook("postprocess_tree"):
            tree = addon.postprocess_tree(type_, tree)
        return tree

    def lint(self, type_: str, tree: Optional[Tree]) -> Tree:
        outputs = []
        for addon in self.with_hook("lint_tree"):
            result = addon.lint_tree(type_, tree)
            if result is not None:
                outputs.append(result)
        return merge_trees(outputs, overwrite=True, annotation=f"TreeMerger (lint {type_})")

    def process(
        self,
        type_: str,
        tree: Tree,
        compiler: Optional[Callable[[Tree], Tree]] = None,
    ) -> Tree:
        """Pre-process, compile and post-process ``tree`` without the lint stage."""
        tree = self.preprocess(type_, tree)
        if compiler is not None:
            tree = compiler(tree)
        return self.postprocess(type_, tree)

    def run(
        self,
        type_: str,
        tree: Tree,
        compiler: Optional[Callable[[Tree], Tree]] = None,
    ) -> StageResult:
        """Run every stage for ``type_`` and return the result and lint trees."""
        tree = self.preprocess(type_, tree)
        if compiler is not None:
            tree = compiler(tree)
        lint = self.lint(type_, tree)
        tree = self.postprocess(type_, tree)
        return StageResult(tree=tree, lint=lint)


__all__ = ["AddonTree", "StageResult", "AddonHookRunner"]
