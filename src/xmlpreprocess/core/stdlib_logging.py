from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

_CONFIGURED_LOG_PATH: Optional[str] = None
_FILE_HANDLER: Optional[logging.Handler] = None
_STDERR_HANDLER: Optional[logging.Handler] = None
_JSON_MODE_NULL_HANDLER_INSTALLED: bool = False

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _level_from_name(name: str) -> int:
    level = getattr(logging, str(name).upper(), None)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(
    *,
    level: str = "WARNING",
    log_file: Optional[Path] = None,
    verbose: bool = False,
) -> None:
    """Configure stdlib logging for the command line.

    ``verbose`` installs a stderr handler; ``log_file`` installs a file
    handler. Idempotent per-process: calling again replaces the handlers this
    module installed and leaves any others alone.
    """
    global _CONFIGURED_LOG_PATH, _FILE_HANDLER, _STDERR_HANDLER

    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else _level_from_name(level))

    if verbose and _STDERR_HANDLER is None:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        root.addHandler(handler)
        _STDERR_HANDLER = handler
    elif not verbose and _STDERR_HANDLER is not None:
        root.removeHandler(_STDERR_HANDLER)
        _STDERR_HANDLER = None

    resolved = str(Path(log_file).resolve()) if log_file else None
    if resolved == _CONFIGURED_LOG_PATH:
        return

    if _FILE_HANDLER is not None:
        root.removeHandler(_FILE_HANDLER)
        _FILE_HANDLER.close()
        _FILE_HANDLER = None
        _CONFIGURED_LOG_PATH = None

    if resolved:
        Path(resolved).parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(resolved, encoding="utf-8")
        fh.setLevel(_level_from_name(level))
        fh.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(fh)
        _FILE_HANDLER = fh
        _CONFIGURED_LOG_PATH = resolved


def reset_logging_for_tests() -> None:
    """Test-only: remove the handlers installed by :func:`configure_logging`."""
    global _CONFIGURED_LOG_PATH, _FILE_HANDLER, _STDERR_HANDLER
    root = logging.getLogger()
    for handler in (_FILE_HANDLER, _STDERR_HANDLER):
        if handler is not None:
            root.removeHandler(handler)
            handler.close()
    _CONFIGURED_LOG_PATH = None
    _FILE_HANDLER = None
    _STDERR_HANDLER = None


def suppress_lastresort_in_json_mode() -> None:
    """Keep logging's lastResort handler from writing warnings into --json output."""
    global _JSON_MODE_NULL_HANDLER_INSTALLED

    root = logging.getLogger()
    if root.handlers or _JSON_MODE_NULL_HANDLER_INSTALLED:
        return
    root.addHandler(logging.NullHandler())
    _JSON_MODE_NULL_HANDLER_INSTALLED = True


__all__ = ["configure_logging", "reset_logging_for_tests", "suppress_lastresort_in_json_mode"]
