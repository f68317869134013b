"""Merging of build option layers.

Options arrive as plain mappings: the bundled defaults, the values detected
from the environment, then whatever the caller passes. A higher layer's
mapping values merge key by key into the lower one. Any other value
replaces the lower one outright.

A list whose first entry is the marker ``"+"`` extends the lower layer's
list instead of replacing it, e.g. ``{"vendorFiles": ["+", "x.js"]}``. A
leading ``"="`` is stripped and the rest replaces the lower list.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

APPEND = "+"
REPLACE = "="


def _layer_list(lower: Any, higher: List[Any]) -> List[Any]:
    marker = higher[0] if higher else None
    if marker == APPEND:
        return [*(lower if isinstance(lower, list) else []), *higher[1:]]
    if marker == REPLACE:
        return higher[1:]
    return list(higher)


def merge_options(lower: Mapping[str, Any], higher: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Return ``lower`` overlaid with ``higher``; neither input is modified."""
    merged = dict(lower)
    for key, value in (higher or {}).items():
        current = merged.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            merged[key] = merge_options(current, value)
        elif isinstance(value, list):
            merged[key] = _layer_list(current, value)
        else:
            merged[key] = value
    return merged


def layer_options(*layers: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Overlay ``layers`` from lowest to highest precedence."""
    merged: Dict[str, Any] = {}
    for layer in layers:
        merged = merge_options(merged, layer)
    return merged


__all__ = ["APPEND", "REPLACE", "merge_options", "layer_options"]
