"""Token delimiters and macro scanning.

A macro is ``start + key + end`` (``${KEY}`` by default). Scanning runs
right-to-left when the delimiters differ so that nested macros such as
``${OUTER_${INNER}}`` resolve innermost first. Identical delimiters are
scanned left-to-right and cannot nest.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Tuple

from .exceptions import UndefinedSettingError

if TYPE_CHECKING:
    from .properties import PropertyStore

DEFAULT_TOKEN_START = "${"
DEFAULT_TOKEN_END = "}"


def _double(text: str) -> str:
    return "".join(ch * 2 for ch in text)


@dataclass(frozen=True)
class TokenDelimiters:
    """Start/end delimiter pair plus their escaped (doubled) forms."""

    start: str = DEFAULT_TOKEN_START
    end: str = DEFAULT_TOKEN_END

    def __post_init__(self) -> None:
        if not self.start or not self.end:
            raise ValueError("Token delimiters must not be empty")

    @classmethod
    def from_options(cls, start: Optional[str] = None, end: Optional[str] = None) -> "TokenDelimiters":
        """Build delimiters from optional user input.

        A start token without an end token uses the start token for both.
        """
        if not start:
            return cls(end=end or DEFAULT_TOKEN_END)
        return cls(start=start, end=end or start)

    @property
    def start_escaped(self) -> str:
        return _double(self.start)

    @property
    def end_escaped(self) -> str:
        return _double(self.end)

    @property
    def identical(self) -> bool:
        return self.start.lower() == self.end.lower()

    def wrap(self, key: str) -> str:
        return f"{self.start}{key}{self.end}"

    def remove(self, text: str) -> str:
        """Drop every delimiter occurrence from ``text`` and trim it."""
        return text.replace(self.start, "").replace(self.end, "").strip()

    def find_macro(self, content: str) -> Optional[Tuple[str, str]]:
        """Locate the next macro to resolve.

        Returns ``(macro, key)`` where ``macro`` is the full matched text and
        ``key`` the trimmed text between the delimiters, or ``None`` when no
        terminated macro remains.
        """
        if self.identical:
            pos = content.find(self.start)
            if pos < 0:
                return None
            end = content.find(self.end, pos + len(self.start))
            if end < 0:
                return None
            return self._slice(content, pos, end)

        limit = len(content)
        while True:
            pos = content.rfind(self.start, 0, limit)
            if pos < 0:
                return None
            end = content.find(self.end, pos + len(self.start))
            if end >= 0:
                return self._slice(content, pos, end)
            # Unterminated; keep looking further left.
            limit = pos

    def _slice(self, content: str, pos: int, end: int) -> Tuple[str, str]:
        macro = content[pos:end + len(self.end)]
        key = content[pos + len(self.start):end].strip()
        return macro, key


def resolve_strict(content: str, properties: "PropertyStore", delimiters: TokenDelimiters) -> str:
    """Resolve every macro in ``content`` by exact property lookup.

    Unlike the token resolver used for templates this performs no fallback
    chains, scripts or registry lookups and fails on the first undefined key.

    Raises:
        UndefinedSettingError: When a referenced property is not defined.
    """
    if not content:
        return content

    found = delimiters.find_macro(content)
    while found is not None:
        macro, key = found
        prop = properties.get(key)
        if prop is None:
            raise UndefinedSettingError(f"{key} was not defined", context={"key": key})
        content = content.replace(macro, prop.value or "")
        found = delimiters.find_macro(content)
    return content


__all__ = [
    "DEFAULT_TOKEN_START",
    "DEFAULT_TOKEN_END",
    "TokenDelimiters",
    "resolve_strict",
]
