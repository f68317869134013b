"""Default preprocessors: run every registered plugin of a type in order.

The concrete compilers (script transpilers, style languages, template
compilers, minifiers) are plugins supplied by addons. Without plugins the
script, template and minifier stages pass trees through unchanged, and the
style stage copies ``<input_path>/<name>.css`` to each configured app CSS
output path.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from brocade.core.trees.merge import merge_trees
from brocade.core.trees.nodes import Funnel, Tree

from .registry import PluginRegistry

logger = logging.getLogger(__name__)


def is_type(path: str, type_: str, registry: PluginRegistry) -> bool:
    """Return True if ``path`` has an extension registered for ``type_``."""
    return any(path.endswith(f".{ext}") for ext in registry.extensions_for_type(type_))


def _run_plugins(type_: str, tree: Tree, registry: PluginRegistry, *args: Any, **options: Any) -> Tree:
    for plugin in registry.load(type_):
        logger.debug("running %s plugin %s", type_, plugin.name)
        tree = plugin.to_tree(tree, *args, **options)
    return tree


def preprocess_js(
    tree: Tree,
    input_path: str,
    output_path: str,
    *,
    registry: PluginRegistry,
    **options: Any,
) -> Tree:
    return _run_plugins("js", tree, registry, input_path, output_path, **options)


def preprocess_css(
    tree: Tree,
    input_path: str,
    output_path: str,
    *,
    registry: PluginRegistry,
    output_paths: Optional[Mapping[str, str]] = None,
    **options: Any,
) -> Tree:
    if registry.load("css"):
        return _run_plugins(
            "css", tree, registry, input_path, output_path, output_paths=output_paths, **options
        )

    copies = [
        Funnel(
            tree,
            src_dir=input_path,
            files=[f"{name}.css"],
            get_destination_path=lambda _rel, out=out: out,
            annotation=f"Funnel (css {name})",
        )
        for name, out in (output_paths or {}).items()
    ]
    return merge_trees(copies, overwrite=True, annotation="TreeMerger (css)")


def preprocess_templates(tree: Tree, *, registry: PluginRegistry, **options: Any) -> Tree:
    return _run_plugins("template", tree, registry, **options)


def preprocess_minify_css(tree: Tree, *, registry: PluginRegistry, **options: Any) -> Tree:
    return _run_plugins("minify-css", tree, registry, **options)


def preprocess_minify_js(tree: Tree, *, registry: PluginRegistry, **options: Any) -> Tree:
    return _run_plugins("minify-js", tree, registry, **options)


__all__ = [
    "is_type",
    "preprocess_js",
    "preprocess_css",
    "preprocess_templates",
    "preprocess_minify_css",
    "preprocess_minify_js",
]
