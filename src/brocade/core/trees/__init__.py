"""Lazy tree primitives, the per-build tree cache and the tree reader."""
from __future__ import annotations

from .cache import TreeCache, cache_key
from .funnel_reducer import FunnelSpec, reduce_funnels
from .merge import EMPTY_TREE, is_empty_tree, merge_trees
from .nodes import (
    ConcatTree,
    Funnel,
    MergedTree,
    SourceDir,
    StaticTree,
    TransformedTree,
    Tree,
    clean_path,
    unwatched_dir,
    watched_dir,
)
from .reader import TreeReader, read_tree

__all__ = [
    "Tree",
    "SourceDir",
    "StaticTree",
    "Funnel",
    "MergedTree",
    "ConcatTree",
    "TransformedTree",
    "watched_dir",
    "unwatched_dir",
    "clean_path",
    "EMPTY_TREE",
    "is_empty_tree",
    "merge_trees",
    "FunnelSpec",
    "reduce_funnels",
    "TreeCache",
    "cache_key",
    "TreeReader",
    "read_tree",
]
