"""Conditional comment blocks.

Handles flat (non-nesting) blocks written as XML comments:

    <!-- #ifdef PRODUCTION -->
    <!-- <entry foo="${PROPERTY}"/> -->
    <!-- #else -->
    <entry foo="abc"/>
    <!-- #endif -->

``ifdef`` tests that a property is defined, ``if`` hands its condition to the
Expression Evaluator. The leading ``#`` is optional on every marker.

In markup-preserving mode the output keeps the markers plus a commented copy
of the if-branch, so the result can be preprocessed again with different
settings. Clean mode emits only the chosen branch.
"""
from __future__ import annotations

import logging
import re
from typing import List, Optional

from ...context import ProcessingContext
from ...exceptions import MalformedDirectiveError
from .base import ContentTransformer
from .variables import TokenResolver

logger = logging.getLogger(__name__)

# Horizontal whitespace before a marker on its own line.
_INDENT = r"(?:\r\n|\n)?[^\S\r\n]*"


def remove_comment(content: Optional[str], replace_nested: bool) -> Optional[str]:
    """Strip ``<!--``/``-->`` wrappers (and the whitespace hugging them).

    With ``replace_nested`` the spaced-out nested markers ``< ! - -`` and
    ``- - >`` become real comment markers.
    """
    if content is None:
        return None
    result = re.sub(r"<!--\s*", "", content)
    result = re.sub(r"\s*-->", "", result)
    if replace_nested:
        result = result.replace("< ! - -", "<!--").replace("- - >", "-->")
    return result


def _leading_whitespace(text: str) -> str:
    for index, ch in enumerate(text):
        if not ch.isspace():
            return text[:index]
    return ""


class DirectiveProcessor(ContentTransformer):
    """Evaluate ifdef/if ... else ... endif comment blocks.

    Text outside blocks is copied verbatim; only the chosen if-branch is
    token-resolved. A chosen else-branch is appended as-is.
    """

    IFDEF_PATTERN = re.compile(
        _INDENT + r"<!--\s*(?P<keyword>#*\s*if|#*\s*ifdef)\s+(?P<condition>.*?)-->",
        re.IGNORECASE,
    )
    ELSE_PATTERN = re.compile(_INDENT + r"<!--\s*#*\s*else\s*-->", re.IGNORECASE)
    ENDIF_PATTERN = re.compile(_INDENT + r"<!--\s*#*\s*endif\s*-->", re.IGNORECASE)

    def __init__(self, resolver: TokenResolver) -> None:
        self.resolver = resolver

    def transform(self, content: str, context: ProcessingContext) -> str:
        """Process every directive block in ``content``.

        In NoDirectives mode the whole buffer is token-resolved instead.

        Raises:
            MalformedDirectiveError: On a missing endif or an ifdef inside a block
        """
        if context.no_directives:
            return self.resolver.resolve(content, context) or ""

        result: List[str] = []
        offset = 0
        match = self.IFDEF_PATTERN.search(content)
        while match:
            if context.preserve_markup:
                result.append(content[offset:match.end()])
            else:
                result.append(content[offset:match.start()])
            offset = match.end()

            endif = self.ENDIF_PATTERN.search(content, offset)
            if endif is None:
                raise MalformedDirectiveError(
                    "Comments are malformed, no endif found.",
                    context={"line": content.count("\n", 0, match.start()) + 1},
                )

            condition = context.delimiters.remove(match.group("condition"))
            keyword = context.delimiters.remove(match.group("keyword"))
            body = content[offset:endif.start()]

            if self.IFDEF_PATTERN.search(body):
                raise MalformedDirectiveError(
                    "Comments are malformed, endif missing.",
                    context={"line": content.count("\n", 0, match.start()) + 1},
                )

            offset = endif.end()
            result.append(self._process_body(context, keyword, condition, body))
            if context.preserve_markup:
                result.append(endif.group(0))
            context.record_block()

            match = self.IFDEF_PATTERN.search(content, offset)

        result.append(content[offset:])
        return "".join(result)

    def _evaluate(self, context: ProcessingContext, keyword: str, condition: str) -> bool:
        if keyword.lower().endswith("ifdef"):
            return bool(condition) and context.is_defined(condition)
        return context.evaluator.evaluate_bool(condition, context)

    def _process_body(self, context: ProcessingContext, keyword: str, condition: str, body: str) -> str:
        else_match = self.ELSE_PATTERN.search(body)
        if else_match:
            if_body = body[:else_match.start()]
            else_body = body[else_match.end():]
        else:
            if_body = body
            else_body = ""

        condition_true = self._evaluate(context, keyword, condition)
        logger.debug("%s %s -> %s", keyword, condition, condition_true)

        parts: List[str] = []
        if context.preserve_markup:
            prefix = _leading_whitespace(if_body)
            commented = (remove_comment(if_body, False) or "").strip()
            if commented:
                if "\n" in commented:
                    parts.append(f"{prefix}<!--{prefix}{commented}{prefix}-->")
                else:
                    parts.append(f"{prefix}<!-- {commented} -->")

            if else_match is None:
                marker = "#else" if keyword.startswith("#") else "else"
                parts.append(f"{prefix}<!-- {marker} -->")
            else:
                parts.append(else_match.group(0))

        if condition_true:
            parts.append(self.resolver.resolve(remove_comment(if_body, True), context) or "")
            if context.preserve_markup and else_match is not None and not if_body.strip():
                parts.append(f"<!-- {remove_comment(else_body, False)} -->")
        elif else_match is not None:
            parts.append(else_body)

        return "".join(parts)


__all__ = ["DirectiveProcessor", "remove_comment"]
