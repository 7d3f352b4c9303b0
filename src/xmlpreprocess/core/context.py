"""Processing session state shared by every transformer.

One :class:`ProcessingContext` lives for a whole invocation. When several
input files are processed, properties defined by ``#define`` in one file stay
visible to the files after it, and diagnostics accumulate across files.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from .evaluation import ExpressionEvaluator, PythonExpressionEvaluator, RegistryLookup, WindowsRegistry
from .properties import PropertyStore
from .tokens import TokenDelimiters, resolve_strict


class DiagnosticKind(Enum):
    """Diagnostic categories and their report codes."""

    EXCEPTION = 100
    FILE_NOT_FOUND = 101
    MISSING_TOKEN = 102
    NOT_WELL_FORMED = 103

    @property
    def code(self) -> str:
        return f"XMLPP{self.value}"


@dataclass(frozen=True)
class Diagnostic:
    """A reported problem, immutable once recorded."""

    kind: DiagnosticKind
    message: str
    input_file: Optional[str] = None

    def __str__(self) -> str:
        if self.input_file:
            return f"Error {self.kind.code}: {self.message} Input File: {self.input_file}"
        return f"Error {self.kind.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.kind.code,
            "kind": self.kind.name,
            "message": self.message,
            "inputFile": self.input_file,
        }


@dataclass
class ProcessingContext:
    """Session state: properties, delimiters, mode flags and diagnostics."""

    properties: PropertyStore = field(default_factory=PropertyStore)
    delimiters: TokenDelimiters = field(default_factory=TokenDelimiters)

    # Mode flags
    preserve_markup: bool = True
    no_directives: bool = False
    validate_settings_exist: bool = False
    validate_xml_well_formed: bool = False
    count_usage: bool = False
    keep_going: bool = False

    environment_name: Optional[str] = None
    source_file: Optional[Path] = None
    destination_file: Optional[Path] = None

    # Collaborators
    evaluator: ExpressionEvaluator = field(default_factory=PythonExpressionEvaluator)
    registry: RegistryLookup = field(default_factory=WindowsRegistry)

    diagnostics: List[Diagnostic] = field(default_factory=list)

    # Tracking for reports
    files_processed: List[str] = field(default_factory=list)
    includes_resolved: List[str] = field(default_factory=list)
    defines_extracted: int = 0
    blocks_evaluated: int = 0
    bindings_applied: int = 0

    def add_diagnostic(self, kind: DiagnosticKind, message: str, input_file: Optional[str] = None) -> Diagnostic:
        """Record a diagnostic against ``input_file`` (defaults to the current source)."""
        if input_file is None and self.source_file is not None:
            input_file = str(self.source_file)
        diagnostic = Diagnostic(kind, message, input_file)
        self.diagnostics.append(diagnostic)
        return diagnostic

    def is_dynamic_property(self, key: str) -> bool:
        """Dynamic binding keys are themselves token expressions."""
        return key.startswith(self.delimiters.start)

    def is_defined(self, key: str) -> bool:
        return key in self.properties

    def resolve_content(self, content: str) -> str:
        """Strictly resolve ``content``; undefined keys raise ``UndefinedSettingError``."""
        return resolve_strict(content, self.properties, self.delimiters)

    def get_property(self, key: str) -> str:
        """Strictly resolved value of ``key`` as seen by expressions."""
        return self.resolve_content(self.delimiters.wrap(key))

    def record_include(self, path: str) -> None:
        """Record that an include was spliced."""
        self.includes_resolved.append(path)

    def record_block(self) -> None:
        """Record that a directive block was evaluated."""
        self.blocks_evaluated += 1

    def summary(self) -> Dict[str, Any]:
        """Counters and diagnostics for the JSON run report."""
        return {
            "filesProcessed": list(self.files_processed),
            "includesResolved": list(self.includes_resolved),
            "definesExtracted": self.defines_extracted,
            "blocksEvaluated": self.blocks_evaluated,
            "bindingsApplied": self.bindings_applied,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }


__all__ = ["DiagnosticKind", "Diagnostic", "ProcessingContext"]
