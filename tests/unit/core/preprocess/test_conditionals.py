"""Tests for ifdef/if/else/endif comment blocks."""
from __future__ import annotations

import pytest

from xmlpreprocess.core.exceptions import MalformedDirectiveError
from xmlpreprocess.core.preprocess.transformers import DirectiveProcessor, TokenResolver, remove_comment

BLOCK = (
    '<!-- #ifdef PRODUCTION -->'
    '<!-- <entry foo="${PROPERTY}"/> -->'
    '<!-- #else -->'
    '<entry foo="abc"/>'
    '<!-- #endif -->'
)


@pytest.fixture
def processor() -> DirectiveProcessor:
    return DirectiveProcessor(TokenResolver())


class TestPreservingMode:
    """Markup is kept so the output can be processed again."""

    def test_defined_branch(self, processor, make_context):
        ctx = make_context({"PRODUCTION": "", "PROPERTY": "newvalue"})
        assert processor.transform(BLOCK, ctx) == (
            '<!-- #ifdef PRODUCTION -->'
            '<!-- <entry foo="${PROPERTY}"/> -->'
            '<!-- #else -->'
            '<entry foo="newvalue"/>'
            '<!-- #endif -->'
        )

    def test_undefined_keeps_else_branch(self, processor, make_context):
        ctx = make_context({"PROPERTY": "newvalue"})
        assert processor.transform(BLOCK, ctx) == BLOCK

    def test_reprocessing_is_stable(self, processor, make_context):
        ctx = make_context({"PRODUCTION": "", "PROPERTY": "newvalue"})
        once = processor.transform(BLOCK, ctx)
        assert processor.transform(once, ctx) == once

    def test_missing_else_is_added(self, processor, make_context):
        ctx = make_context({"A": "1"})
        content = '<!-- #ifdef A --><!-- <x v="${A}"/> --><!-- #endif -->'
        assert processor.transform(content, ctx) == (
            '<!-- #ifdef A --><!-- <x v="${A}"/> --><!-- #else --><x v="1"/><!-- #endif -->'
        )

    def test_multiline_block_keeps_indentation(self, processor, make_context):
        ctx = make_context({"A": "", "V": "1"})
        content = (
            "<root>\n"
            "   <!-- #ifdef A -->\n"
            '   <!-- <x v="${V}"/> -->\n'
            "   <!-- #endif -->\n"
            "</root>"
        )
        assert processor.transform(content, ctx) == (
            "<root>\n"
            "   <!-- #ifdef A -->\n"
            '   <!-- <x v="${V}"/> -->\n'
            "   <!-- #else -->\n"
            '   <x v="1"/>\n'
            "   <!-- #endif -->\n"
            "</root>"
        )

    def test_text_outside_blocks_untouched(self, processor, make_context):
        ctx = make_context({"A": "1"})
        assert processor.transform("<r a='${A}'/>", ctx) == "<r a='${A}'/>"


class TestCleanMode:
    """Only the chosen branch survives."""

    def test_defined_branch(self, processor, make_context):
        ctx = make_context({"PRODUCTION": "", "PROPERTY": "newvalue"}, preserve_markup=False)
        assert processor.transform(BLOCK, ctx) == '<entry foo="newvalue"/>'

    def test_else_branch(self, processor, make_context):
        ctx = make_context(preserve_markup=False)
        assert processor.transform(BLOCK, ctx) == '<entry foo="abc"/>'

    def test_surrounding_text(self, processor, make_context):
        ctx = make_context({"A": "1"}, preserve_markup=False)
        content = '<r><!-- #ifdef A --><!-- <v x="${A}"/> --><!-- #endif --></r>'
        assert processor.transform(content, ctx) == '<r><v x="1"/></r>'

    def test_hash_is_optional(self, processor, make_context):
        ctx = make_context({"A": "1"}, preserve_markup=False)
        content = "<!-- ifdef A --><!-- <a/> --><!-- else --><b/><!-- endif -->"
        assert processor.transform(content, ctx) == "<a/>"

    def test_nested_comment_markers_restored(self, processor, make_context):
        ctx = make_context({"A": "1"}, preserve_markup=False)
        content = "<!-- #ifdef A --><!-- < ! - - note - - ><a/> --><!-- #endif -->"
        assert processor.transform(content, ctx) == "<!-- note --><a/>"


class TestIfExpressions:
    """#if conditions go through the expression evaluator."""

    def test_expression_true(self, processor, make_context):
        ctx = make_context({"ENV": "prod"}, preserve_markup=False)
        content = '<!-- #if GetProperty("ENV") == "prod" --><!-- <p/> --><!-- #else --><d/><!-- #endif -->'
        assert processor.transform(content, ctx) == "<p/>"

    def test_expression_false(self, processor, make_context):
        ctx = make_context({"ENV": "dev"}, preserve_markup=False)
        content = '<!-- #if GetProperty("ENV") == "prod" --><!-- <p/> --><!-- #else --><d/><!-- #endif -->'
        assert processor.transform(content, ctx) == "<d/>"

    def test_blocks_counted(self, processor, make_context):
        ctx = make_context({"A": "1"})
        processor.transform(BLOCK + BLOCK, ctx)
        assert ctx.blocks_evaluated == 2


class TestMalformedBlocks:
    """Blocks do not nest and must be closed."""

    def test_missing_endif(self, processor, make_context):
        with pytest.raises(MalformedDirectiveError) as exc_info:
            processor.transform("<!-- #ifdef A --><x/>", make_context())
        assert str(exc_info.value) == "Comments are malformed, no endif found."

    def test_nested_ifdef(self, processor, make_context):
        content = "<!-- #ifdef A --><!-- #ifdef B --><!-- #endif -->"
        with pytest.raises(MalformedDirectiveError) as exc_info:
            processor.transform(content, make_context())
        assert str(exc_info.value) == "Comments are malformed, endif missing."


class TestNoDirectivesMode:
    """The whole buffer is token-resolved and markers are ignored."""

    def test_whole_buffer_resolved(self, processor, make_context):
        ctx = make_context({"A": "1"}, no_directives=True)
        assert processor.transform("<r a='${A}'/>", ctx) == "<r a='1'/>"


class TestRemoveComment:
    """Comment wrapper stripping."""

    def test_strips_wrapper(self):
        assert remove_comment("<!-- <a/> -->", False) == "<a/>"

    def test_none(self):
        assert remove_comment(None, True) is None
