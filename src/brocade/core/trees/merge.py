from __future__ import annotations

from typing import Iterable, List, Optional

from .nodes import MergedTree, Tree

# Returned for merges with no inputs so callers can skip it cheaply.
EMPTY_TREE = MergedTree([], annotation="EMPTY_MERGE_TREE")


def is_empty_tree(tree: Optional[Tree]) -> bool:
    return tree is None or tree is EMPTY_TREE


def merge_trees(
    trees: Iterable[Optional[Tree]],
    *,
    overwrite: bool = False,
    annotation: str = "",
) -> Tree:
    """Merge trees, dropping empties and duplicate inputs.

    Duplicate inputs keep their last position so the later occurrence still
    wins when ``overwrite`` is set. A single remaining input is returned as-is.
    """
    inputs = [t for t in trees if not is_empty_tree(t)]

    deduped: List[Tree] = []
    seen = set()
    for tree in reversed(inputs):
        if id(tree) in seen:
            continue
        seen.add(id(tree))
        deduped.append(tree)
    deduped.reverse()

    if not deduped:
        return EMPTY_TREE
    if len(deduped) == 1:
        return deduped[0]
    return MergedTree(deduped, overwrite=overwrite, annotation=annotation)


__all__ = ["EMPTY_TREE", "is_empty_tree", "merge_trees"]
