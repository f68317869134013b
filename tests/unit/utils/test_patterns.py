"""Glob matching used by funnels and concatenation."""
from __future__ import annotations

import pytest

from brocade.core.utils.patterns import (
    find_matching_pattern,
    is_glob,
    match_patterns,
    matches_any_pattern,
)


class TestMatchesAnyPattern:
    @pytest.mark.parametrize(
        "path,pattern,expected",
        [
            ("app/templates/index.hbs", "app/**/*.hbs", True),
            ("app/index.hbs", "app/**/*.hbs", True),
            ("vendor/app/x.hbs", "app/**/*.hbs", False),
            ("a/b.js", "*.js", False),
            ("b.js", "*.js", True),
            ("addon-tree-output/x/y/z.css", "addon-tree-output/**/*.css", True),
            ("x/template.hbs", "**/*/template.hbs", True),
            ("template.hbs", "**/*/template.hbs", False),
            ("a.css", "?.css", True),
            ("ab.css", "?.css", False),
        ],
    )
    def test_anchored_glob(self, path: str, pattern: str, expected: bool) -> None:
        assert matches_any_pattern(path, [pattern]) is expected

    def test_brace_alternatives(self) -> None:
        assert matches_any_pattern("x.css", ["*.{js,css}"])
        assert matches_any_pattern("x.js", ["*.{js,css}"])
        assert not matches_any_pattern("x.hbs", ["*.{js,css}"])

    def test_literal_paths_match_exactly(self) -> None:
        assert matches_any_pattern("vendor/lib/foo.js", ["vendor/lib/foo.js"])
        assert not matches_any_pattern("vendor/lib/foo.jsx", ["vendor/lib/foo.js"])

    def test_empty_pattern_list_matches_nothing(self) -> None:
        assert not matches_any_pattern("a.js", [])


def test_find_matching_pattern_returns_first_match() -> None:
    assert find_matching_pattern("a/b.js", ["*.css", "**/*.js", "a/*"]) == "**/*.js"
    assert find_matching_pattern("a/b.js", ["*.css"]) is None


def test_match_patterns_keeps_input_order() -> None:
    files = ["z.js", "a.css", "m.js"]
    assert match_patterns(files, ["*.js"]) == ["z.js", "m.js"]


def test_is_glob() -> None:
    assert is_glob("**/*.js")
    assert is_glob("x.{a,b}")
    assert not is_glob("vendor/lib/foo.js")
