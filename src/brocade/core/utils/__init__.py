"""Shared helpers for option merging and glob matching."""
from __future__ import annotations

from .merge import layer_options, merge_options
from .patterns import is_glob, match_patterns, matches_any_pattern

__all__ = [
    "layer_options",
    "merge_options",
    "is_glob",
    "match_patterns",
    "matches_any_pattern",
]
