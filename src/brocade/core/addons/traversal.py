"""Depth-first traversal of the addon DAG.

Addons may nest their own addons, and the same addon object can be shared
by several parents. Every walk is declaration-ordered, depth-first and
visits each addon object once.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Set, Tuple

from brocade.core.diagnostics import Diagnostics

logger = logging.getLogger(__name__)

# Range prefixes (^, ~, v) are ignored, as is anything after the patch number.
_VERSION_RE = re.compile(r"[\^~v]?(\d+)(?:\.(\d+))?(?:\.(\d+))?")


def walk_addons(addons: Iterable[Any]) -> Iterator[Any]:
    """Yield addons and their nested addons, pre-order, each object once."""
    visited: Set[int] = set()
    stack: List[Any] = list(reversed(list(addons)))
    while stack:
        addon = stack.pop()
        if id(addon) in visited:
            continue
        visited.add(id(addon))
        yield addon
        children = list(getattr(addon, "addons", None) or [])
        stack.extend(reversed(children))


def find_addon_by_name(addons: Iterable[Any], name: str) -> Optional[Any]:
    for addon in walk_addons(addons):
        if getattr(addon, "name", None) == name:
            return addon
    return None


def parse_version(version: Any) -> Tuple[int, int, int]:
    """Leading ``major.minor.patch`` of an addon version; unparseable is ``(0, 0, 0)``."""
    match = _VERSION_RE.match(str(version).strip())
    if match is None:
        return (0, 0, 0)
    major, minor, patch = (int(part or 0) for part in match.groups())
    return major, minor, patch


def check_minimum_versions(
    addons: Iterable[Any],
    minimums: Mapping[str, str],
    diagnostics: Diagnostics,
) -> List[Any]:
    """Report addons older than their configured minimum version.

    Each outdated addon is reported once per install location, however many
    parents share it. Returns the outdated addons in traversal order.
    """
    if not minimums:
        return []

    reported: Dict[str, Any] = {}
    outdated: List[Any] = []
    for addon in walk_addons(addons):
        name = getattr(addon, "name", "")
        minimum = minimums.get(name)
        if minimum is None:
            continue
        version = str(getattr(addon, "version", "0.0.0"))
        if parse_version(version) >= parse_version(minimum):
            continue
        outdated.append(addon)
        location = str(getattr(addon, "root", None) or f"<{name}:{id(addon)}>")
        if location in reported:
            continue
        reported[location] = addon
        diagnostics.deprecate(
            f"{name} {version} has been deprecated. Please upgrade to at least "
            f"{name} {minimum}. Version {version} located: {location}",
            logger=logger,
            addon=name,
            version=version,
            minimum=minimum,
        )
    return outdated


__all__ = ["walk_addons", "find_addon_by_name", "parse_version", "check_minimum_versions"]
