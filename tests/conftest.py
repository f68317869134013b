import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'brocade'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))


from brocade.core.logging import reset_logging_for_tests
from brocade.data import clear_caches


@pytest.fixture(autouse=True)
def _clean_build_env(monkeypatch):
    """Every test starts in the development env, outside a test command."""
    monkeypatch.delenv("BROCADE_ENV", raising=False)
    monkeypatch.delenv("BROCADE_TEST_COMMAND", raising=False)
    yield


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    reset_logging_for_tests()


@pytest.fixture(autouse=True)
def _reset_data_caches():
    clear_caches()
    yield
    clear_caches()


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """An empty project directory."""
    root = tmp_path / "my-app"
    root.mkdir()
    return root


@pytest.fixture
def write_file():
    """Write ``text`` to ``root/rel`` creating parent directories."""

    def _write(root: Path, rel: str, text: str = "") -> Path:
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write
