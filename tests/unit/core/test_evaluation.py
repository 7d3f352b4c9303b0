"""Tests for expression evaluation and registry path parsing."""
from __future__ import annotations

import sys

import pytest

from xmlpreprocess.core.evaluation import PythonExpressionEvaluator, WindowsRegistry, parse_registry_path
from xmlpreprocess.core.exceptions import ExpressionError, UndefinedSettingError


class TestPythonExpressionEvaluator:
    """Expression namespace and error mapping."""

    def test_arithmetic(self, make_context):
        assert PythonExpressionEvaluator().evaluate_string("1 + 2", make_context()) == "3"

    def test_get_property(self, make_context):
        ctx = make_context({"ENV": "prod"})
        evaluator = PythonExpressionEvaluator()
        assert evaluator.evaluate_bool('GetProperty("ENV") == "prod"', ctx)
        assert evaluator.evaluate_string('get_property("env").upper()', ctx) == "PROD"

    def test_defined(self, make_context):
        ctx = make_context({"A": "1"})
        evaluator = PythonExpressionEvaluator()
        assert evaluator.evaluate_bool('defined("A")', ctx)
        assert not evaluator.evaluate_bool('isDefined("B")', ctx)

    def test_bool_and_none_results(self, make_context):
        evaluator = PythonExpressionEvaluator()
        assert evaluator.evaluate_string("1 == 1", make_context()) == "True"
        assert evaluator.evaluate_string("None", make_context()) is None

    def test_syntax_error_becomes_expression_error(self, make_context):
        with pytest.raises(ExpressionError):
            PythonExpressionEvaluator().evaluate_string("1 +", make_context())

    def test_runtime_error_becomes_expression_error(self, make_context):
        with pytest.raises(ExpressionError):
            PythonExpressionEvaluator().evaluate_string("1 / 0", make_context())

    def test_no_access_to_unsafe_builtins(self, make_context):
        with pytest.raises(ExpressionError):
            PythonExpressionEvaluator().evaluate_string("open('x')", make_context())

    def test_undefined_property_propagates(self, make_context):
        with pytest.raises(UndefinedSettingError):
            PythonExpressionEvaluator().evaluate_string('GetProperty("MISSING")', make_context())


class TestRegistry:
    """Registry path parsing and the non-Windows fallback."""

    def test_parse_with_default(self):
        assert parse_registry_path(r"HKLM\Software\App\Version,1.0") == ("HKLM", r"Software\App", "Version", "1.0")

    def test_parse_without_default(self):
        assert parse_registry_path(r"HKCU\Name") == ("HKCU", "", "Name", None)

    def test_parse_rejects_single_part(self):
        with pytest.raises(ExpressionError):
            parse_registry_path("HKLM")

    def test_lookup_off_windows_returns_default(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(sys, "platform", "linux")
        assert WindowsRegistry().lookup(r"HKLM\Software\App\Version,fallback") == "fallback"
