"""Tests for #include splicing."""
from __future__ import annotations

from pathlib import Path

import pytest

from xmlpreprocess.core.exceptions import IncludeNotFoundError, MalformedDirectiveError
from xmlpreprocess.core.preprocess.transformers import IncludeSplicer, TokenResolver


@pytest.fixture
def splicer() -> IncludeSplicer:
    return IncludeSplicer(TokenResolver())


def _main_file(tmp_path: Path) -> Path:
    main = tmp_path / "main.xml"
    main.write_text("<root/>", encoding="utf-8")
    return main


class TestIncludeSplicer:
    """File resolution and splicing."""

    def test_whole_file(self, splicer, make_context, tmp_path: Path):
        (tmp_path / "part.xml").write_text("<a/>", encoding="utf-8")
        ctx = make_context(source_file=_main_file(tmp_path))
        assert splicer.transform('<root><!-- #include "part.xml" --></root>', ctx) == "<root><a/></root>"
        assert ctx.includes_resolved == [str(tmp_path / "part.xml")]

    def test_single_quotes(self, splicer, make_context, tmp_path: Path):
        (tmp_path / "part.xml").write_text("<a/>", encoding="utf-8")
        ctx = make_context(source_file=_main_file(tmp_path))
        assert splicer.transform("<!-- #include 'part.xml' -->", ctx) == "<a/>"

    def test_file_name_macro(self, splicer, make_context, tmp_path: Path):
        (tmp_path / "prod.xml").write_text("<prod/>", encoding="utf-8")
        ctx = make_context({"PART": "prod.xml"}, source_file=_main_file(tmp_path))
        assert splicer.transform('<!-- #include "${PART}" -->', ctx) == "<prod/>"

    def test_nested_include(self, splicer, make_context, tmp_path: Path):
        (tmp_path / "outer.xml").write_text('<o><!-- #include "inner.xml" --></o>', encoding="utf-8")
        (tmp_path / "inner.xml").write_text("<i/>", encoding="utf-8")
        ctx = make_context(source_file=_main_file(tmp_path))
        assert splicer.transform('<!-- #include "outer.xml" -->', ctx) == "<o><i/></o>"

    def test_xpath_selects_inner_xml(self, splicer, make_context, tmp_path: Path):
        (tmp_path / "part.xml").write_text(
            "<cfg><section><b>1</b><c/></section></cfg>", encoding="utf-8"
        )
        ctx = make_context(source_file=_main_file(tmp_path))
        result = splicer.transform('<!-- #include "part.xml" xpath="/cfg/section" -->', ctx)
        assert result == "<b>1</b><c/>"

    def test_xpath_in_default_namespace(self, splicer, make_context, tmp_path: Path):
        (tmp_path / "part.xml").write_text(
            '<cfg xmlns="urn:x"><section><b>1</b></section></cfg>', encoding="utf-8"
        )
        ctx = make_context(source_file=_main_file(tmp_path))
        result = splicer.transform('<!-- #include "part.xml" xpath="/cfg/section" -->', ctx)
        assert ">1</b>" in result

    def test_xpath_without_match_splices_nothing(self, splicer, make_context, tmp_path: Path):
        (tmp_path / "part.xml").write_text("<cfg/>", encoding="utf-8")
        ctx = make_context(source_file=_main_file(tmp_path))
        assert splicer.transform('<r><!-- #include "part.xml" xpath="/cfg/none" --></r>', ctx) == "<r></r>"


class TestIncludeErrors:
    """Missing files and malformed markers."""

    def test_missing_file(self, splicer, make_context, tmp_path: Path):
        ctx = make_context(source_file=_main_file(tmp_path))
        with pytest.raises(IncludeNotFoundError) as exc_info:
            splicer.transform('<!-- #include "nope.xml" -->', ctx)
        assert isinstance(exc_info.value, FileNotFoundError)
        assert "nope.xml" in str(exc_info.value)

    def test_empty_file_name(self, splicer, make_context, tmp_path: Path):
        ctx = make_context(source_file=_main_file(tmp_path))
        with pytest.raises(MalformedDirectiveError):
            splicer.transform('<!-- #include "" -->', ctx)

    def test_undefined_macro_stops_splicing(self, splicer, make_context, tmp_path: Path):
        ctx = make_context(source_file=_main_file(tmp_path), validate_settings_exist=True)
        content = '<!-- #include "${MISSING}" -->'
        assert splicer.transform(content, ctx) == content
        assert len(ctx.diagnostics) == 1
