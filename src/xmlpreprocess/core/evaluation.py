"""Expression evaluation and registry lookups used by the token resolver.

Both are collaborators injected into :class:`ProcessingContext`; the engine
only talks to them through the small contracts defined here.
"""
from __future__ import annotations

import logging
import sys
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Tuple

from .exceptions import ExpressionError, UndefinedSettingError

if TYPE_CHECKING:
    from .context import ProcessingContext

logger = logging.getLogger(__name__)


class ExpressionEvaluator(ABC):
    """Evaluates ``script=`` values and ``#if`` conditions."""

    @abstractmethod
    def evaluate_string(self, expression: str, context: "ProcessingContext") -> Optional[str]:
        """Evaluate ``expression`` and return its string form."""

    @abstractmethod
    def evaluate_bool(self, expression: str, context: "ProcessingContext") -> bool:
        """Evaluate ``expression`` as a condition."""


class PythonExpressionEvaluator(ExpressionEvaluator):
    """Evaluate Python expressions against the current property table.

    Expressions see a small namespace::

        GetProperty("KEY")  / get_property("KEY")   -> strictly resolved value
        defined("KEY")      / is_defined("KEY")     -> bool

    plus a handful of harmless builtins (``int``, ``len``, ``str`` ...).
    Referencing an undefined property through ``GetProperty`` raises
    :class:`UndefinedSettingError` unchanged; every other failure becomes an
    :class:`ExpressionError`.
    """

    SAFE_BUILTINS: Dict[str, Any] = {
        "abs": abs,
        "all": all,
        "any": any,
        "bool": bool,
        "float": float,
        "int": int,
        "len": len,
        "max": max,
        "min": min,
        "round": round,
        "str": str,
        "True": True,
        "False": False,
        "None": None,
    }

    def _namespace(self, context: "ProcessingContext") -> Dict[str, Any]:
        get_property: Callable[[str], str] = context.get_property
        is_defined: Callable[[str], bool] = context.is_defined
        return {
            "GetProperty": get_property,
            "getProperty": get_property,
            "get_property": get_property,
            "defined": is_defined,
            "isDefined": is_defined,
            "is_defined": is_defined,
        }

    def _evaluate(self, expression: str, context: "ProcessingContext") -> Any:
        try:
            code = compile(expression.strip(), "<expression>", "eval")
        except SyntaxError as e:
            raise ExpressionError(
                f"Invalid expression '{expression}': {e.msg}",
                context={"expression": expression},
            ) from e
        try:
            return eval(code, {"__builtins__": self.SAFE_BUILTINS}, self._namespace(context))
        except UndefinedSettingError:
            raise
        except Exception as e:
            raise ExpressionError(
                f"Error evaluating '{expression}': {e}",
                context={"expression": expression},
            ) from e

    def evaluate_string(self, expression: str, context: "ProcessingContext") -> Optional[str]:
        result = self._evaluate(expression, context)
        if result is None:
            return None
        if isinstance(result, bool):
            return "True" if result else "False"
        return str(result)

    def evaluate_bool(self, expression: str, context: "ProcessingContext") -> bool:
        return bool(self._evaluate(expression, context))


class RegistryLookup(ABC):
    """Resolves ``registry=`` keys."""

    @abstractmethod
    def lookup(self, path: str) -> Optional[str]:
        """Return the value named by ``HIVE\\subkey\\valueName[,default]``."""


def parse_registry_path(path: str) -> Tuple[str, str, str, Optional[str]]:
    """Split ``HIVE\\sub\\key\\valueName[,default]`` into its parts.

    Returns ``(hive, subkey, value_name, default)``.
    """
    default: Optional[str] = None
    if "," in path:
        path, default = path.split(",", 1)
        default = default.strip()
    parts = [p for p in path.strip().split("\\") if p]
    if len(parts) < 2:
        raise ExpressionError(f"Invalid registry path '{path}'", context={"path": path})
    hive = parts[0]
    value_name = parts[-1]
    subkey = "\\".join(parts[1:-1])
    return hive, subkey, value_name, default


class WindowsRegistry(RegistryLookup):
    """Registry lookup backed by :mod:`winreg`.

    On platforms without a registry every lookup yields the default part of
    the path (or ``None``).
    """

    HIVES = {
        "HKEY_CLASSES_ROOT": "HKEY_CLASSES_ROOT",
        "HKCR": "HKEY_CLASSES_ROOT",
        "HKEY_CURRENT_USER": "HKEY_CURRENT_USER",
        "HKCU": "HKEY_CURRENT_USER",
        "HKEY_LOCAL_MACHINE": "HKEY_LOCAL_MACHINE",
        "HKLM": "HKEY_LOCAL_MACHINE",
        "HKEY_USERS": "HKEY_USERS",
        "HKU": "HKEY_USERS",
        "HKEY_CURRENT_CONFIG": "HKEY_CURRENT_CONFIG",
        "HKCC": "HKEY_CURRENT_CONFIG",
    }

    def lookup(self, path: str) -> Optional[str]:
        hive, subkey, value_name, default = parse_registry_path(path)
        if sys.platform != "win32":
            logger.debug("Registry not available on %s, using default for %s", sys.platform, path)
            return default

        import winreg

        hive_name = self.HIVES.get(hive.upper())
        if hive_name is None:
            raise ExpressionError(f"Unknown registry hive '{hive}'", context={"path": path})
        try:
            with winreg.OpenKey(getattr(winreg, hive_name), subkey) as key:
                value, _ = winreg.QueryValueEx(key, value_name)
        except OSError:
            return default
        return default if value is None else str(value)


__all__ = [
    "ExpressionEvaluator",
    "PythonExpressionEvaluator",
    "RegistryLookup",
    "WindowsRegistry",
    "parse_registry_path",
]
