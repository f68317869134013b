from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, List, Optional

from .traversal import find_addon_by_name, walk_addons


class Project:
    """The application being built and its resolved, ordered addon list.

    Package resolution happens elsewhere; a project receives its addons
    already instantiated, in declaration order.
    """

    def __init__(
        self,
        name: str,
        root: Path | str,
        addons: Iterable[Any] = (),
        *,
        watch_bower: bool = False,
    ) -> None:
        self.name = name
        self.root = Path(root)
        self.addons: List[Any] = list(addons)
        self.watch_bower = watch_bower

    def find_addon_by_name(self, name: str) -> Optional[Any]:
        return find_addon_by_name(self.addons, name)

    def all_addons(self) -> List[Any]:
        return list(walk_addons(self.addons))

    def __repr__(self) -> str:
        return f"<Project {self.name} ({len(self.addons)} addons)>"


__all__ = ["Project"]
