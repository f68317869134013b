"""Duplicate-import policies.

The accept/reject table is asymmetric between scripts and styles, so every
cell is pinned down explicitly.
"""
from __future__ import annotations

from typing import List, Tuple

import pytest

from brocade.core.composition.conflicts import (
    ImportDecision,
    ImportStrategy,
    add_output_file,
    allow_import,
    resolve_conflict,
)
from brocade.core.diagnostics import INFO, Diagnostics
from brocade.core.exceptions import ConfigurationError

FIRST = ImportStrategy.FIRST_ONE_WINS
LAST = ImportStrategy.LAST_ONE_WINS


class TestResolveConflict:
    @pytest.mark.parametrize(
        "strategy,prepend,expected",
        [
            (FIRST, False, ImportDecision(accept=False)),
            (FIRST, True, ImportDecision(accept=True, evict_index=1)),
            (LAST, False, ImportDecision(accept=True, evict_index=1)),
            (LAST, True, ImportDecision(accept=False)),
        ],
    )
    def test_present_asset(self, strategy: ImportStrategy, prepend: bool, expected: ImportDecision) -> None:
        files = ["a.js", "dup.js", "b.js"]

        assert resolve_conflict(strategy, files, "dup.js", prepend) == expected
        assert files == ["a.js", "dup.js", "b.js"]

    @pytest.mark.parametrize("strategy", [FIRST, LAST])
    @pytest.mark.parametrize("prepend", [False, True])
    def test_absent_asset_is_always_accepted(self, strategy: ImportStrategy, prepend: bool) -> None:
        assert resolve_conflict(strategy, ["a.js"], "new.js", prepend) == ImportDecision(accept=True)

    def test_strategy_accepts_plain_names(self) -> None:
        assert resolve_conflict("firstOneWins", ["x"], "x", False).accept is False
        assert resolve_conflict("lastOneWins", ["x"], "x", False).accept is True


def _replay(strategy: ImportStrategy, imports: List[Tuple[str, bool]]) -> List[str]:
    container = {}
    for path, prepend in imports:
        add_output_file(strategy, container, path, output_file="/out", prepend=prepend)
    return container["/out"]


class TestImportSequences:
    def test_scripts_plain_reimport_is_a_no_op(self) -> None:
        assert _replay(FIRST, [("a", False), ("b", False), ("a", False)]) == ["a", "b"]

    def test_scripts_prepend_moves_existing_to_front(self) -> None:
        assert _replay(FIRST, [("b", False), ("a", False), ("a", True)]) == ["a", "b"]

    def test_styles_plain_reimport_moves_to_back(self) -> None:
        assert _replay(LAST, [("a", False), ("b", False), ("a", False)]) == ["b", "a"]

    def test_styles_prepend_of_present_asset_is_a_no_op(self) -> None:
        assert _replay(LAST, [("a", False), ("b", False), ("b", True)]) == ["a", "b"]

    def test_prepend_of_new_asset_goes_first(self) -> None:
        assert _replay(FIRST, [("a", False), ("z", True)]) == ["z", "a"]
        assert _replay(LAST, [("a", False), ("z", True)]) == ["z", "a"]


class TestAllowImport:
    def test_each_duplicate_is_reported_once(self) -> None:
        diagnostics = Diagnostics()
        files = ["vendor/widget.js"]

        assert allow_import(FIRST, files, "vendor/widget.js", False, diagnostics) is False
        assert allow_import(FIRST, files, "vendor/other.js", False, diagnostics) is True

        [record] = diagnostics.by_level(INFO)
        assert "vendor/widget.js" in record.message
        assert "first" in record.message

    def test_eviction_mutates_the_list(self) -> None:
        files = ["a.css", "b.css"]

        assert allow_import(LAST, files, "a.css", False) is True
        assert files == ["b.css"]


def test_add_output_file_requires_an_output_file() -> None:
    with pytest.raises(ConfigurationError, match="outputFile is not specified"):
        add_output_file(FIRST, {}, "vendor/a.js", output_file=None)


def test_add_output_file_creates_the_bundle() -> None:
    container = {}

    assert add_output_file(LAST, container, "vendor/a.css", output_file="/assets/x.css") is True
    assert container == {"/assets/x.css": ["vendor/a.css"]}
