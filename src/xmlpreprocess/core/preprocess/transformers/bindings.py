"""Dynamic bindings: properties whose key is a structural edit.

Handles property keys of the form:
- ${XPath=/configuration/appSettings/add[@key='x']/@value}
- ${Regex=pattern}
- either one followed by ``IncludedFiles=*.config;web*.xml``

The property value is token-resolved, then applied to the fully processed
buffer. XPath bindings delete matches for ``#remove``, replace inner XML for
values that look like markup and set the scalar value otherwise.
"""
from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Union

from lxml import etree as ET

from ...context import ProcessingContext
from ...exceptions import BindingExpressionError
from ...tokens import TokenDelimiters
from ...utils import xmldoc
from .base import ContentTransformer
from .variables import TokenResolver

logger = logging.getLogger(__name__)

REMOVE_VALUE = "#remove"

_INCLUDED_FILES = re.compile(r"\sIncludedFiles\s*=\s*(?P<value>.*)$", re.DOTALL)

# .NET-style replacement references: $1, ${name}, $$
_REPLACEMENT_REFERENCE = re.compile(r"\$(?:(?P<number>\d+)|\{(?P<name>\w+)\}|(?P<dollar>\$))")


@dataclass
class DynamicBinding(ABC):
    """A parsed binding expression."""

    path: str
    files: Optional[str] = None

    def should_process(self, file_name: Optional[Union[str, Path]]) -> bool:
        """True when ``file_name`` matches the IncludedFiles globs (or there are none)."""
        if not self.files:
            return True
        name = Path(file_name).name if file_name else ""
        for pattern in self.files.split(";"):
            regex = "^" + re.escape(pattern).replace(r"\*", ".*").replace(r"\?", ".") + "$"
            if re.match(regex, name, re.IGNORECASE):
                return True
        return False

    @abstractmethod
    def replace(self, buffer: str, value: str) -> str:
        """Apply the binding to ``buffer``."""


class XPathBinding(DynamicBinding):
    """Edit every node an XPath expression selects."""

    def replace(self, buffer: str, value: str) -> str:
        try:
            declaration, root = xmldoc.parse_document(buffer)
        except ET.XMLSyntaxError as e:
            raise BindingExpressionError(
                f"Cannot apply XPath binding {self.path}, output is not well-formed: {e}",
                context={"xpath": self.path},
            ) from e

        try:
            nodes = xmldoc.select(root, self.path)
        except ET.XPathError as e:
            logger.warning("The XPath expression %s could not be evaluated. %s", self.path, e)
            return buffer

        if not nodes:
            logger.warning("The XPath expression %s did not return any nodes.", self.path)
            return buffer

        for node in nodes:
            if value.lower() == REMOVE_VALUE:
                xmldoc.remove_result(node)
            elif value.startswith("<") and value.endswith(">") and isinstance(node, ET._Element):
                xmldoc.replace_inner_xml(node, value)
            else:
                xmldoc.set_value(node, value)
        logger.debug("XPath %s edited %d node(s)", self.path, len(nodes))
        return xmldoc.serialize(declaration, root, indent=True)


class RegexBinding(DynamicBinding):
    """Replace every match of a regular expression in the raw text."""

    def replace(self, buffer: str, value: str) -> str:
        try:
            pattern = re.compile(self.path)
        except re.error as e:
            raise BindingExpressionError(
                f"Regex binding '{self.path}' is not a valid pattern: {e}",
                context={"pattern": self.path},
            ) from e
        return pattern.sub(_replacement(value), buffer)


def _replacement(value: str) -> Callable[["re.Match[str]"], str]:
    """Build a substitution function honouring ``$1``/``${name}`` references."""

    def substitute(match: "re.Match[str]") -> str:
        def reference(ref: "re.Match[str]") -> str:
            if ref.group("dollar"):
                return "$"
            group = ref.group("number")
            key: Union[int, str] = int(group) if group is not None else ref.group("name")
            try:
                return match.group(key) or ""
            except IndexError:
                # Unknown group: keep the reference text literally.
                return ref.group(0)

        return _REPLACEMENT_REFERENCE.sub(reference, value)

    return substitute


def parse_binding(key: str, delimiters: TokenDelimiters) -> DynamicBinding:
    """Parse a dynamic binding key such as ``${XPath=/a/b IncludedFiles=*.xml}``.

    Raises:
        BindingExpressionError: If the key is not an XPath or Regex binding
    """
    text = key.strip()
    valid = text.startswith(delimiters.start) and text.endswith(delimiters.end)
    binding_type = ""
    if valid:
        text = text[len(delimiters.start):len(text) - len(delimiters.end)].strip()
        equal = text.find("=")
        if equal < 0:
            valid = False
        else:
            binding_type = text[:equal].strip().lower()
    if not valid or binding_type not in ("xpath", "regex"):
        raise BindingExpressionError(
            f"Binding value '{key}' was not properly formed, must be "
            f"{delimiters.wrap('XPath=XpathExpression [IncludedFiles=*.config;*.xml]')} or "
            f"{delimiters.wrap('Regex=regexPattern [IncludedFiles=*.config;*.xml]')}",
            context={"key": key},
        )

    equal = text.find("=")
    files: Optional[str] = None
    files_match = _INCLUDED_FILES.search(text.rstrip())
    if files_match:
        files = files_match.group("value")
        path = text[equal + 1:files_match.start() + 1].strip()
    else:
        path = text[equal + 1:].strip()

    if binding_type == "xpath":
        return XPathBinding(path, files)
    return RegexBinding(path, files)


class DynamicBindingApplier(ContentTransformer):
    """Apply every dynamic binding property to the processed buffer."""

    def __init__(self, resolver: TokenResolver) -> None:
        self.resolver = resolver

    def bindings(self, context: ProcessingContext) -> List[tuple]:
        return [
            (parse_binding(prop.key, context.delimiters), prop)
            for prop in context.properties
            if context.is_dynamic_property(prop.key)
        ]

    def transform(self, content: str, context: ProcessingContext) -> str:
        for binding, prop in self.bindings(context):
            if not binding.should_process(context.source_file):
                continue
            value = self.resolver.resolve(prop.value, context) or ""
            content = binding.replace(content, value)
            context.bindings_applied += 1
        return content


__all__ = [
    "DynamicBinding",
    "XPathBinding",
    "RegexBinding",
    "DynamicBindingApplier",
    "parse_binding",
]
