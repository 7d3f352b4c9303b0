"""Tests for ProcessingContext and diagnostics."""
from __future__ import annotations

from pathlib import Path

import pytest

from xmlpreprocess.core.context import Diagnostic, DiagnosticKind, ProcessingContext
from xmlpreprocess.core.exceptions import UndefinedSettingError


class TestDiagnostic:
    """Diagnostic codes and report format."""

    def test_codes(self):
        assert DiagnosticKind.EXCEPTION.code == "XMLPP100"
        assert DiagnosticKind.FILE_NOT_FOUND.code == "XMLPP101"
        assert DiagnosticKind.MISSING_TOKEN.code == "XMLPP102"
        assert DiagnosticKind.NOT_WELL_FORMED.code == "XMLPP103"

    def test_str_with_input_file(self):
        diag = Diagnostic(DiagnosticKind.MISSING_TOKEN, "The setting named 'X' was not defined.", "web.config")
        assert str(diag) == "Error XMLPP102: The setting named 'X' was not defined. Input File: web.config"

    def test_str_without_input_file(self):
        assert str(Diagnostic(DiagnosticKind.EXCEPTION, "boom")) == "Error XMLPP100: boom"

    def test_to_dict(self):
        data = Diagnostic(DiagnosticKind.FILE_NOT_FOUND, "gone", "a.xml").to_dict()
        assert data == {"code": "XMLPP101", "kind": "FILE_NOT_FOUND", "message": "gone", "inputFile": "a.xml"}


class TestProcessingContext:
    """Session helpers."""

    def test_add_diagnostic_defaults_to_source_file(self):
        ctx = ProcessingContext(source_file=Path("in.xml"))
        diag = ctx.add_diagnostic(DiagnosticKind.EXCEPTION, "bad")
        assert diag.input_file == "in.xml"
        assert ctx.diagnostics == [diag]

    def test_dynamic_property_detection(self, make_context):
        ctx = make_context()
        assert ctx.is_dynamic_property("${XPath=/a}")
        assert not ctx.is_dynamic_property("PLAIN")

    def test_get_property_resolves_nested_values(self, make_context):
        ctx = make_context({"HOST": "db", "CONN": "Server=${HOST}"})
        assert ctx.get_property("CONN") == "Server=db"

    def test_get_property_undefined_raises(self, make_context):
        with pytest.raises(UndefinedSettingError):
            make_context().get_property("NOPE")

    def test_summary_counts(self, make_context):
        ctx = make_context()
        ctx.record_block()
        ctx.record_include("part.xml")
        summary = ctx.summary()
        assert summary["blocksEvaluated"] == 1
        assert summary["includesResolved"] == ["part.xml"]
        assert summary["diagnostics"] == []
