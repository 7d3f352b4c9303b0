"""Ordered, case-insensitive property table."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .tokens import TokenDelimiters

UNDEFINE_TOKEN = "#UNDEF"
LEGACY_UNDEFINE_TOKEN = "FALSE"


@dataclass
class Property:
    """A named property value with its usage counter."""

    key: str
    value: str
    use_count: int = 0


def _remove_quotes(value: str) -> str:
    if len(value) > 1 and value[0] == value[-1] and value[0] in ("\"", "'"):
        return value[1:-1]
    return value


class PropertyStore:
    """Ordered set of properties keyed case-insensitively.

    Adding a key that already exists removes the old entry and appends the new
    one, so iteration order reflects the most recent definition. Adding the
    undefine sentinel (``#UNDEF``, or ``False`` in legacy mode) retracts a key.
    """

    def __init__(self, legacy_false_undefines: bool = False) -> None:
        self.legacy_false_undefines = legacy_false_undefines
        self._items: Dict[str, Property] = {}

    # ------------------------------------------------------------------
    # Mapping-like API
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Property]:
        return iter(list(self._items.values()))

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._items

    def get(self, key: str) -> Optional[Property]:
        """Return the property for ``key`` or ``None`` when it is not defined."""
        if not key:
            return None
        return self._items.get(key.lower())

    def keys(self) -> List[str]:
        return [prop.key for prop in self._items.values()]

    def remove(self, key: str) -> bool:
        return self._items.pop(key.lower(), None) is not None

    def is_undefine(self, value: Optional[str]) -> bool:
        if value is None:
            return True
        lowered = value.lower()
        if lowered == UNDEFINE_TOKEN.lower():
            return True
        return self.legacy_false_undefines and lowered == LEGACY_UNDEFINE_TOKEN.lower()

    def add(self, key: Optional[str], value: Optional[str]) -> None:
        """Define ``key``, replacing any earlier value.

        Empty keys are ignored. A ``None`` value or an undefine sentinel only
        removes the existing entry. One layer of matching quotes is stripped.
        """
        if not key:
            return
        self._items.pop(key.lower(), None)
        if value is None or self.is_undefine(value):
            return
        self._items[key.lower()] = Property(key, _remove_quotes(value))

    # ------------------------------------------------------------------
    # Bulk loading
    # ------------------------------------------------------------------
    def load(self, pairs: Iterable[Tuple[str, Optional[str]]]) -> int:
        """Add ``(key, value)`` pairs in order, returning how many were applied."""
        count = 0
        for key, value in pairs:
            self.add(key, value)
            count += 1
        return count

    def add_definitions(self, definitions: Iterable[str], delimiters: TokenDelimiters) -> None:
        """Add ``name=value`` definitions as given on the command line.

        Dynamic binding keys (``${XPath=/a/b}=value``) contain ``=`` themselves,
        so they are split on the last ``=`` instead of the first.
        """
        for definition in definitions:
            if not definition:
                continue
            if definition.startswith(delimiters.start):
                pos = definition.rfind("=")
            else:
                pos = definition.find("=")
            if pos < 0:
                self.add(definition.strip(), "")
            else:
                self.add(definition[:pos].strip(), definition[pos + 1:])

    def usage_report(self) -> List[Tuple[str, int]]:
        """Usage counts for user properties (built-ins starting with ``_`` excluded)."""
        return [(p.key, p.use_count) for p in self._items.values() if not p.key.startswith("_")]


__all__ = ["Property", "PropertyStore", "UNDEFINE_TOKEN", "LEGACY_UNDEFINE_TOKEN"]
