"""Token resolution for ${...} macros.

Handles:
- ${KEY}                     - property value
- ${A;B;C}                   - fallback chain, first defined wins
- ${OUTER_${INNER}}          - nested macros, innermost first
- ${script= expression }     - Expression Evaluator (string mode)
- ${registry= HKLM\\path\\name,default}
- $${{KEY}}                  - escaped form, emitted as a literal ${KEY}
- #foreach(A,B) template     - see loops.ForeachExpander

Undefined keys are replaced by ``<!-- KEY not defined -->`` and, when
``validate_settings_exist`` is set, reported as MissingToken diagnostics.
Resolution loops until no macro remains; there is no cycle detection.
"""
from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional

from ...context import DiagnosticKind, ProcessingContext
from ...exceptions import ExpressionError, UndefinedSettingError
from ...properties import Property
from .base import ContentTransformer
from .loops import ForeachExpander

logger = logging.getLogger(__name__)

# Stand-ins for escaped delimiters while the scan is running.
ESCAPED_START_PLACEHOLDER = "\x00xmlpp-escaped-start\x00"
ESCAPED_END_PLACEHOLDER = "\x00xmlpp-escaped-end\x00"

SCRIPT_PREFIX = "script"
REGISTRY_PREFIX = "registry"


def _prefixed_argument(key: str, prefix: str) -> Optional[str]:
    """Return the text after ``prefix =`` in ``key``, or None if not that form."""
    if len(key) <= len(prefix) or not key.lower().startswith(prefix):
        return None
    rest = key[len(prefix):].lstrip()
    if not rest.startswith("="):
        return None
    return rest[1:].strip()


class TokenResolver(ContentTransformer):
    """Replace macros in a buffer with property values.

    Example:
        Properties: {"B": "foo", "A_foo": "bar"}
        Template: value=${A_${B}}
        Output:   value=bar
    """

    def __init__(self) -> None:
        self.foreach = ForeachExpander(self)

    def transform(self, content: str, context: ProcessingContext) -> str:
        return self.resolve(content, context)

    def resolve(
        self,
        content: Optional[str],
        context: ProcessingContext,
        overrides: Optional[Mapping[str, str]] = None,
    ) -> Optional[str]:
        """Resolve all macros in ``content``.

        A leading ``#foreach(...)`` marker expands the rest of the buffer once
        per list element instead.

        Args:
            content: Buffer to resolve (None passes through)
            context: Processing session
            overrides: Per-iteration values that shadow the property store

        Returns:
            Resolved buffer
        """
        if not content:
            return content
        expanded = self.foreach.expand(content, context)
        if expanded is not None:
            return expanded
        return self.substitute(content, context, overrides)

    def substitute(
        self,
        content: Optional[str],
        context: ProcessingContext,
        overrides: Optional[Mapping[str, str]] = None,
    ) -> Optional[str]:
        """Resolve macros without foreach handling."""
        if not content:
            return content

        delimiters = context.delimiters
        lowered_overrides: Optional[Dict[str, str]] = None
        if overrides is not None:
            lowered_overrides = {k.lower(): v for k, v in overrides.items()}

        escaped = False
        found = delimiters.find_macro(content)
        while found is not None:
            macro, key = found
            value = self._lookup(key, macro, content, context, lowered_overrides)

            if value:
                start_at = value.find(delimiters.start_escaped)
                if start_at > -1 and value.find(delimiters.end_escaped, start_at + len(delimiters.start_escaped)) > -1:
                    value = value.replace(delimiters.start_escaped, ESCAPED_START_PLACEHOLDER)
                    value = value.replace(delimiters.end_escaped, ESCAPED_END_PLACEHOLDER)
                    escaped = True

            content = content.replace(macro, value or "")
            found = delimiters.find_macro(content)

        if escaped:
            content = content.replace(ESCAPED_START_PLACEHOLDER, delimiters.start)
            content = content.replace(ESCAPED_END_PLACEHOLDER, delimiters.end)
        return content

    def _lookup(
        self,
        key: str,
        macro: str,
        content: str,
        context: ProcessingContext,
        overrides: Optional[Dict[str, str]],
    ) -> Optional[str]:
        expression = _prefixed_argument(key, SCRIPT_PREFIX)
        if expression is not None:
            return self._evaluate_script(expression, context)

        registry_path = _prefixed_argument(key, REGISTRY_PREFIX)
        if registry_path is not None:
            return context.registry.lookup(registry_path) if registry_path else None

        if overrides is not None and key.lower() in overrides:
            return overrides[key.lower()]

        prop = self._lookup_chain(key, context)
        if prop is not None:
            if context.count_usage:
                prop.use_count += content.count(macro)
            return prop.value

        if context.validate_settings_exist:
            context.add_diagnostic(
                DiagnosticKind.MISSING_TOKEN,
                f"The setting named '{key}' was not defined.",
            )
        logger.debug("Property %s not defined", key)
        return f"<!-- {key} not defined -->"

    def _lookup_chain(self, key: str, context: ProcessingContext) -> Optional[Property]:
        for candidate in key.split(";"):
            candidate = candidate.strip()
            if not candidate:
                continue
            prop = context.properties.get(candidate)
            if prop is not None:
                return prop
        return None

    def _evaluate_script(self, expression: str, context: ProcessingContext) -> Optional[str]:
        if not expression:
            return None
        try:
            return context.evaluator.evaluate_string(expression, context)
        except (ExpressionError, UndefinedSettingError) as e:
            context.add_diagnostic(
                DiagnosticKind.EXCEPTION,
                f"The expression '{expression}' was not properly formed. {e}",
            )
            logger.warning("Script expression failed: %s", e)
            return f"<!-- {expression} not properly formed -->"


__all__ = ["TokenResolver", "ESCAPED_START_PLACEHOLDER", "ESCAPED_END_PLACEHOLDER"]
