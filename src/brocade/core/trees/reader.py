"""Materialise lazy trees into ``{relative_path: text}`` mappings.

The reader stands in for an external execution phase: it walks a tree
description, reads source directories and applies every funnel, merge,
concat and transform in order. Results are memoised per node for the
lifetime of one reader, and every mapping is returned sorted by path so
output never depends on file-system enumeration order.
"""
from __future__ import annotations

import logging
from typing import Dict

from brocade.core.exceptions import TreeMergeError, TreeReadError
from brocade.core.utils.patterns import matches_any_pattern

from .nodes import ConcatTree, Funnel, MergedTree, SourceDir, StaticTree, TransformedTree, Tree, clean_path

logger = logging.getLogger(__name__)

Files = Dict[str, str]


class TreeReader:
    """Read trees into sorted file mappings."""

    def __init__(self) -> None:
        self._memo: Dict[int, tuple[Tree, Files]] = {}
        self.reads = 0

    def read(self, tree: Tree) -> Files:
        cached = self._memo.get(id(tree))
        if cached is not None:
            return dict(cached[1])

        self.reads += 1
        if isinstance(tree, SourceDir):
            files = self._read_source(tree)
        elif isinstance(tree, StaticTree):
            files = dict(tree.files)
        elif isinstance(tree, Funnel):
            files = self._read_funnel(tree)
        elif isinstance(tree, MergedTree):
            files = self._read_merge(tree)
        elif isinstance(tree, ConcatTree):
            files = self._read_concat(tree)
        elif isinstance(tree, TransformedTree):
            files = self._read_transformed(tree)
        else:
            raise TypeError(f"Unsupported tree node: {tree!r}")

        result = dict(sorted(files.items()))
        # Keep the node alive so its id() cannot be reused while memoised.
        self._memo[id(tree)] = (tree, result)
        return dict(result)

    def _read_source(self, tree: SourceDir) -> Files:
        root = tree.path
        if not root.is_dir():
            raise TreeReadError(
                f"Source directory does not exist: {root}",
                context={"path": str(root)},
            )
        files: Files = {}
        for path in sorted(root.rglob("*")):
            if path.is_file():
                files[path.relative_to(root).as_posix()] = path.read_text(encoding="utf-8")
        return files

    def _read_funnel(self, tree: Funnel) -> Files:
        source = self.read(tree.input_tree)
        prefix = f"{tree.src_dir}/" if tree.src_dir else ""
        wanted = set(tree.files) if tree.files is not None else None

        selected: Files = {}
        for path, text in source.items():
            if prefix and not path.startswith(prefix):
                continue
            rel = path[len(prefix):]
            if wanted is not None and rel not in wanted:
                continue
            if tree.include is not None and not matches_any_pattern(rel, tree.include):
                continue
            if tree.exclude and matches_any_pattern(rel, tree.exclude):
                continue
            if tree.get_destination_path is not None:
                rel = clean_path(tree.get_destination_path(rel))
            dest = f"{tree.dest_dir}/{rel}" if tree.dest_dir else rel
            selected[dest] = text
        return selected

    def _read_merge(self, tree: MergedTree) -> Files:
        merged: Files = {}
        for child in tree.input_trees:
            for path, text in self.read(child).items():
                if path in merged and not tree.overwrite:
                    raise TreeMergeError(
                        f"Merge error: file {path} exists in more than one input of "
                        f"'{tree.annotation}'. Pass overwrite=True to allow later trees to win.",
                        context={"path": path, "annotation": tree.annotation},
                    )
                merged[path] = text
        return merged

    def _read_concat(self, tree: ConcatTree) -> Files:
        source = self.read(tree.input_tree)
        listed = set(tree.header_files) | set(tree.footer_files)

        def required(path: str) -> str:
            if path not in source:
                raise TreeReadError(
                    f"{tree.annotation}: file not found: {path}",
                    context={"path": path, "output_file": tree.output_file},
                )
            return source[path]

        parts = [required(p) for p in tree.header_files]
        if tree.input_files:
            parts.extend(
                text
                for path, text in source.items()
                if path not in listed and matches_any_pattern(path, tree.input_files)
            )
        parts.extend(required(p) for p in tree.footer_files)

        if not parts and not tree.allow_none:
            raise TreeReadError(
                f"{tree.annotation}: no input files matched {tree.input_files}",
                context={"output_file": tree.output_file},
            )
        logger.debug("concat %s from %d part(s)", tree.output_file, len(parts))
        return {tree.output_file: tree.separator.join(parts)}

    def _read_transformed(self, tree: TransformedTree) -> Files:
        source = self.read(tree.input_tree)
        out: Files = {}
        for path, text in source.items():
            if tree.files is None or matches_any_pattern(path, tree.files):
                out[path] = tree.callback(path, text)
            else:
                out[path] = text
        return out


def read_tree(tree: Tree) -> Files:
    """Materialise ``tree`` with a fresh reader."""
    return TreeReader().read(tree)


__all__ = ["TreeReader", "read_tree"]
