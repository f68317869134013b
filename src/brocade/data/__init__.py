"""Files shipped inside the package.

``config/defaults.yaml`` is the lowest build option layer and
``schemas/build-options.schema.json`` validates the merged result. Both are
parsed once per process; callers must not mutate what they get back.
"""
from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Dict

import yaml

_PARSERS = {
    ".yaml": lambda text: yaml.safe_load(text) or {},
    ".yml": lambda text: yaml.safe_load(text) or {},
    ".json": json.loads,
}


def get_data_path(subpackage: str, filename: str = "") -> Path:
    """Path of ``brocade/data/<subpackage>[/<filename>]``."""
    directory = Path(str(resources.files(__name__) / subpackage))
    return directory / filename if filename else directory


@lru_cache(maxsize=None)
def _load(subpackage: str, filename: str) -> Dict[str, Any]:
    path = get_data_path(subpackage, filename)
    return _PARSERS[path.suffix](path.read_text(encoding="utf-8"))


def read_yaml(subpackage: str, filename: str) -> Dict[str, Any]:
    return _load(subpackage, filename)


def read_json(subpackage: str, filename: str) -> Dict[str, Any]:
    return _load(subpackage, filename)


def clear_caches() -> None:
    _load.cache_clear()


__all__ = ["get_data_path", "read_yaml", "read_json", "clear_caches"]
