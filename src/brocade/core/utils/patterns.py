"""Unified file pattern matching for tree funnels and concatenation.

Patterns are anchored, POSIX-style globs evaluated against tree-relative
paths:

- ``*`` matches within one path segment
- ``?`` matches one character within a segment
- ``**/`` matches zero or more leading directories
- ``{a,b}`` expands to alternatives

Example:
    from brocade.core.utils.patterns import matches_any_pattern

    matches_any_pattern("app/templates/index.hbs", ["app/**/*.hbs"])  # True
    matches_any_pattern("vendor/app/x.hbs", ["app/**/*.hbs"])         # False
"""
from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, List, Optional, Pattern

GLOB_CHARS = re.compile(r"[*?\[{]")


def is_glob(pattern: str) -> bool:
    return bool(GLOB_CHARS.search(pattern))


def match_patterns(files: Iterable[str], patterns: List[str]) -> List[str]:
    """Return the files matching at least one pattern, in input order."""
    if not patterns:
        return []
    return [f for f in files if matches_any_pattern(f, patterns)]


def matches_any_pattern(file_path: str, patterns: List[str]) -> bool:
    """Check if file matches any pattern."""
    return find_matching_pattern(file_path, patterns) is not None


def find_matching_pattern(file_path: str, patterns: List[str]) -> Optional[str]:
    """Find first matching pattern for a file."""
    path = _normalize(file_path)
    for pattern in patterns or []:
        if _compile(pattern).match(path):
            return pattern
    return None


def _normalize(path: str) -> str:
    return path.replace("\\", "/").lstrip("/")


@lru_cache(maxsize=512)
def _compile(pattern: str) -> Pattern[str]:
    alternatives = [_translate(_normalize(p)) for p in _expand_braces(pattern)]
    return re.compile(r"\A(?:" + "|".join(alternatives) + r")\Z")


def _translate(pattern: str) -> str:
    out: List[str] = []
    i = 0
    n = len(pattern)
    while i < n:
        ch = pattern[i]
        if pattern.startswith("**/", i):
            out.append(r"(?:[^/]+/)*")
            i += 3
        elif pattern.startswith("**", i):
            out.append(r".*")
            i += 2
        elif ch == "*":
            out.append(r"[^/]*")
            i += 1
        elif ch == "?":
            out.append(r"[^/]")
            i += 1
        else:
            out.append(re.escape(ch))
            i += 1
    return "".join(out)


def _expand_braces(pattern: str) -> List[str]:
    """Expand a single-level brace group like 'foo.{a,b}' into ['foo.a', 'foo.b'].

    Supports multiple brace groups via recursion.
    If no braces are present, returns [pattern].
    """
    start = pattern.find("{")
    if start == -1:
        return [pattern]
    end = pattern.find("}", start + 1)
    if end == -1:
        return [pattern]

    before = pattern[:start]
    inside = pattern[start + 1 : end]
    after = pattern[end + 1 :]

    parts = [p.strip() for p in inside.split(",") if p.strip()]
    if len(parts) <= 1:
        return [pattern]

    out: List[str] = []
    for part in parts:
        out.extend(_expand_braces(f"{before}{part}{after}"))
    return out


__all__ = [
    "is_glob",
    "match_patterns",
    "matches_any_pattern",
    "find_matching_pattern",
]
