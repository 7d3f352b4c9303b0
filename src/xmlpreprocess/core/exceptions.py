from __future__ import annotations

from typing import Any, Dict, Mapping


class XmlPreprocessError(Exception):
    """Base exception for the preprocessor."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class UndefinedSettingError(XmlPreprocessError, KeyError):
    """Raised by strict resolution when a referenced property is not defined."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        XmlPreprocessError.__init__(self, message, context=context)

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message.
        return str(self.args[0]) if self.args else ""


class MalformedDirectiveError(XmlPreprocessError, ValueError):
    """Raised when ifdef/else/endif comment blocks are not properly paired."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        XmlPreprocessError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class IncludeNotFoundError(XmlPreprocessError, FileNotFoundError):
    """Raised when an input or included file cannot be found."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        XmlPreprocessError.__init__(self, message, context=context)
        FileNotFoundError.__init__(self, message)


class BindingExpressionError(XmlPreprocessError, ValueError):
    """Raised when a dynamic binding key cannot be parsed or applied."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        XmlPreprocessError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class ExpressionError(XmlPreprocessError):
    """Raised when a script or #if expression fails to evaluate."""


class SettingsSourceError(XmlPreprocessError):
    """Raised when a settings source cannot be read or lacks the environment."""


class ConfigurationError(XmlPreprocessError):
    """Raised when configuration files or overrides are invalid."""


__all__ = [
    "XmlPreprocessError",
    "UndefinedSettingError",
    "MalformedDirectiveError",
    "IncludeNotFoundError",
    "BindingExpressionError",
    "ExpressionError",
    "SettingsSourceError",
    "ConfigurationError",
]
