"""Duplicate-import policies for ordered bundles.

Scripts use FIRST_ONE_WINS: the earliest occurrence of a script defines
globals first, so later plain re-imports are no-ops and only a ``prepend``
moves the asset (to the front). Styles use LAST_ONE_WINS: the later rule
wins in the cascade, so a plain re-import moves the asset to the back and a
``prepend`` of an asset that is already present is a no-op.

Decision table for an asset that is already in the bundle:

======================  =======  =====================================
strategy                prepend  result
======================  =======  =====================================
FIRST_ONE_WINS          False    reject, existing entry kept
FIRST_ONE_WINS          True     evict existing entry, accept (front)
LAST_ONE_WINS           False    evict existing entry, accept (back)
LAST_ONE_WINS           True     reject, existing entry kept
======================  =======  =====================================

An absent asset is always accepted.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, List, MutableMapping, NamedTuple, Optional

from brocade.core.diagnostics import Diagnostics
from brocade.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class ImportStrategy(str, Enum):
    FIRST_ONE_WINS = "firstOneWins"
    LAST_ONE_WINS = "lastOneWins"


class ImportDecision(NamedTuple):
    """Outcome of checking one asset against a bundle."""

    accept: bool
    evict_index: Optional[int] = None

    @property
    def duplicate(self) -> bool:
        return self.evict_index is not None or not self.accept


def resolve_conflict(
    strategy: ImportStrategy,
    file_list: List[str],
    asset_path: str,
    prepend: bool,
) -> ImportDecision:
    """Decide whether ``asset_path`` may be inserted. Does not mutate."""
    try:
        index = file_list.index(asset_path)
    except ValueError:
        return ImportDecision(accept=True)

    strategy = ImportStrategy(strategy)
    if strategy is ImportStrategy.FIRST_ONE_WINS:
        if prepend:
            return ImportDecision(accept=True, evict_index=index)
        return ImportDecision(accept=False)

    if prepend:
        return ImportDecision(accept=False)
    return ImportDecision(accept=True, evict_index=index)


def allow_import(
    strategy: ImportStrategy,
    file_list: List[str],
    asset_path: str,
    prepend: bool,
    diagnostics: Optional[Diagnostics] = None,
) -> bool:
    """Apply the policy to ``file_list`` and return whether to insert the asset."""
    decision = resolve_conflict(strategy, file_list, asset_path, prepend)
    if not decision.duplicate:
        return True

    order = "first" if ImportStrategy(strategy) is ImportStrategy.FIRST_ONE_WINS else "last"
    message = f"Duplicate import({asset_path}). Only including the {order} by order."
    if diagnostics is not None:
        diagnostics.info(message, logger=logger, asset=asset_path, strategy=ImportStrategy(strategy).value)
    else:
        logger.info(message)

    if decision.evict_index is not None:
        del file_list[decision.evict_index]
    return decision.accept


def insert_asset(file_list: List[str], asset_path: str, prepend: bool) -> None:
    if prepend:
        file_list.insert(0, asset_path)
    else:
        file_list.append(asset_path)


def add_output_file(
    strategy: ImportStrategy,
    container: MutableMapping[str, List[str]],
    asset_path: str,
    *,
    output_file: Optional[str],
    prepend: bool = False,
    diagnostics: Optional[Diagnostics] = None,
) -> bool:
    """Insert ``asset_path`` into the bundle for ``output_file``.

    Creates the bundle on first use. Returns True when the asset was inserted.
    """
    if not output_file:
        raise ConfigurationError(
            "outputFile is not specified",
            context={"asset": asset_path},
        )

    file_list = container.setdefault(output_file, [])
    if not allow_import(strategy, file_list, asset_path, prepend, diagnostics):
        return False
    insert_asset(file_list, asset_path, prepend)
    return True


OutputFiles = Dict[str, List[str]]

__all__ = [
    "ImportStrategy",
    "ImportDecision",
    "OutputFiles",
    "resolve_conflict",
    "allow_import",
    "insert_asset",
    "add_output_file",
]
