from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

from .nodes import clean_path


@dataclass
class FunnelSpec:
    """Options for one funnel over the external tree."""

    src_dir: str
    dest_dir: str
    include: List[str] = field(default_factory=list)

    @property
    def annotation(self) -> str:
        return f"Funnel {self.src_dir} -> {self.dest_dir} include:{len(self.include)}"


def reduce_funnels(assets: Iterable[object]) -> List[FunnelSpec]:
    """Combine single-file funnels that share a source and destination.

    ``assets`` are objects with ``src``, ``file`` and ``dest`` attributes.
    Groups keep first-seen order and files keep import order, without
    duplicates.
    """
    groups: Dict[Tuple[str, str], FunnelSpec] = {}
    for asset in assets:
        src = clean_path(getattr(asset, "src"))
        dest = clean_path(getattr(asset, "dest"))
        spec = groups.get((src, dest))
        if spec is None:
            spec = groups[(src, dest)] = FunnelSpec(src_dir=src, dest_dir=dest)
        name = getattr(asset, "file")
        if name not in spec.include:
            spec.include.append(name)
    return list(groups.values())


__all__ = ["FunnelSpec", "reduce_funnels"]
