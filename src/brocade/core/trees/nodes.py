"""Lazy tree descriptions.

A tree describes a set of files rooted at a virtual path. Constructing a
node never touches the file system; files are only read when a
:class:`~brocade.core.trees.reader.TreeReader` materialises the tree.

Nodes compare and hash by identity so they can be used as cache keys and
de-duplicated inside merges.
"""
from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Sequence


class Tree:
    """Base class for every lazy tree node."""

    annotation: str = ""

    def __init__(self, annotation: str = "") -> None:
        self.annotation = annotation or type(self).__name__

    @property
    def inputs(self) -> List["Tree"]:
        return []

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.annotation!r}>"


class SourceDir(Tree):
    """A directory on disk."""

    def __init__(self, path: Path | str, *, watched: bool = True, annotation: str = "") -> None:
        super().__init__(annotation or f"SourceDir({path})")
        self.path = Path(path)
        self.watched = watched


def watched_dir(path: Path | str) -> SourceDir:
    return SourceDir(path, watched=True)


def unwatched_dir(path: Path | str) -> SourceDir:
    return SourceDir(path, watched=False)


class StaticTree(Tree):
    """An in-memory tree of text files keyed by relative path."""

    def __init__(self, files: Mapping[str, str], *, annotation: str = "") -> None:
        super().__init__(annotation)
        self.files: Dict[str, str] = {clean_path(p): text for p, text in files.items()}


class Funnel(Tree):
    """Select, filter, rename and relocate files of another tree.

    ``src_dir`` narrows the input to one directory, ``files`` / ``include`` /
    ``exclude`` filter paths relative to ``src_dir``, ``get_destination_path``
    renames and ``dest_dir`` prefixes the result.
    """

    def __init__(
        self,
        input_tree: Tree,
        *,
        src_dir: Optional[str] = None,
        dest_dir: Optional[str] = None,
        files: Optional[Sequence[str]] = None,
        include: Optional[Sequence[str]] = None,
        exclude: Optional[Sequence[str]] = None,
        get_destination_path: Optional[Callable[[str], str]] = None,
        annotation: str = "",
    ) -> None:
        super().__init__(annotation)
        self.input_tree = input_tree
        self.src_dir = clean_path(src_dir or "")
        self.dest_dir = clean_path(dest_dir or "")
        self.files = [clean_path(f) for f in files] if files is not None else None
        self.include = list(include) if include is not None else None
        self.exclude = list(exclude or [])
        self.get_destination_path = get_destination_path

    @property
    def inputs(self) -> List[Tree]:
        return [self.input_tree]


class MergedTree(Tree):
    """Union of several trees; later inputs win on collision when ``overwrite``."""

    def __init__(self, input_trees: Sequence[Tree], *, overwrite: bool = False, annotation: str = "") -> None:
        super().__init__(annotation)
        self.input_trees = list(input_trees)
        self.overwrite = overwrite

    @property
    def inputs(self) -> List[Tree]:
        return list(self.input_trees)


class ConcatTree(Tree):
    """Concatenate files of a tree into one output file.

    Order: ``header_files`` as listed, then files matching ``input_files``
    (sorted, headers and footers excluded), then ``footer_files`` as listed.
    """

    def __init__(
        self,
        input_tree: Tree,
        *,
        output_file: str,
        header_files: Sequence[str] = (),
        input_files: Sequence[str] = (),
        footer_files: Sequence[str] = (),
        allow_none: bool = False,
        separator: str = "\n",
        source_map_config: Optional[Mapping[str, object]] = None,
        annotation: str = "",
    ) -> None:
        super().__init__(annotation or f"Concat: {output_file}")
        self.input_tree = input_tree
        self.output_file = clean_path(output_file)
        self.header_files = [clean_path(f) for f in header_files]
        self.input_files = list(input_files)
        self.footer_files = [clean_path(f) for f in footer_files]
        self.allow_none = allow_none
        self.separator = separator
        self.source_map_config = dict(source_map_config or {})

    @property
    def inputs(self) -> List[Tree]:
        return [self.input_tree]


class TransformedTree(Tree):
    """Rewrite the text of matching files with ``callback(path, text)``."""

    def __init__(
        self,
        input_tree: Tree,
        callback: Callable[[str, str], str],
        *,
        files: Optional[Sequence[str]] = None,
        annotation: str = "",
    ) -> None:
        super().__init__(annotation)
        self.input_tree = input_tree
        self.callback = callback
        self.files = list(files) if files is not None else None

    @property
    def inputs(self) -> List[Tree]:
        return [self.input_tree]


def clean_path(path: str) -> str:
    cleaned = str(path).replace("\\", "/").strip("/")
    return "" if cleaned == "." else cleaned


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
]
