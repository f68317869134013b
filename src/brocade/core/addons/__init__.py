"""Addons: the model, the project that owns them and the hook runner."""
from __future__ import annotations

from .base import HOOKS, Addon, AddonCapabilities
from .hooks import AddonHookRunner, AddonTree
from .project import Project
from .traversal import check_minimum_versions, find_addon_by_name, parse_version, walk_addons

__all__ = [
    "HOOKS",
    "Addon",
    "AddonCapabilities",
    "AddonHookRunner",
    "AddonTree",
    "Project",
    "check_minimum_versions",
    "find_addon_by_name",
    "parse_version",
    "walk_addons",
]
