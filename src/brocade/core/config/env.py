from __future__ import annotations

import os
from typing import Mapping, Optional

ENV_VAR = "BROCADE_ENV"
TEST_COMMAND_VAR = "BROCADE_TEST_COMMAND"
DEFAULT_ENV = "development"


def current_env(environ: Optional[Mapping[str, str]] = None) -> str:
    """Return the build environment name (``BROCADE_ENV``, default development)."""
    env = (environ if environ is not None else os.environ).get(ENV_VAR, "")
    return env.strip() or DEFAULT_ENV


def is_test_command(environ: Optional[Mapping[str, str]] = None) -> bool:
    value = (environ if environ is not None else os.environ).get(TEST_COMMAND_VAR, "")
    return value.strip().lower() not in {"", "0", "false", "no"}


__all__ = ["ENV_VAR", "TEST_COMMAND_VAR", "DEFAULT_ENV", "current_env", "is_test_command"]
