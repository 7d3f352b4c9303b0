import sys
from pathlib import Path
from typing import Any, Callable, Optional

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'xmlpreprocess'
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))


from xmlpreprocess.core.context import ProcessingContext
from xmlpreprocess.core.stdlib_logging import reset_logging_for_tests


@pytest.fixture
def make_context() -> Callable[..., ProcessingContext]:
    """Factory for a ProcessingContext preloaded with properties.

    Usage:
        ctx = make_context({"A": "1"}, preserve_markup=False)
    """

    def _make(properties: Optional[dict] = None, **fields: Any) -> ProcessingContext:
        ctx = ProcessingContext(**fields)
        for key, value in (properties or {}).items():
            ctx.properties.add(key, value)
        return ctx

    return _make


@pytest.fixture(autouse=True)
def _isolate_config_env(monkeypatch: pytest.MonkeyPatch):
    """Drop XMLPP_* overrides from the real environment and reset logging."""
    import os

    for key in list(os.environ):
        if key.startswith("XMLPP_"):
            monkeypatch.delenv(key, raising=False)
    yield
    reset_logging_for_tests()
