"""Build option resolution (bundled defaults < detected < user)."""
from __future__ import annotations

from .env import DEFAULT_ENV, ENV_VAR, current_env, is_test_command
from .options import (
    AddonsOptions,
    BuildOptions,
    OutputPaths,
    resolve_build_options,
    validate_options,
)

__all__ = [
    "DEFAULT_ENV",
    "ENV_VAR",
    "current_env",
    "is_test_command",
    "AddonsOptions",
    "BuildOptions",
    "OutputPaths",
    "resolve_build_options",
    "validate_options",
]
