"""lxml helpers shared by XPath includes and XPath bindings."""
from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
from xml.sax.saxutils import escape

from lxml import etree as ET

XML_DECLARATION = re.compile(r"<\?\s*xml.*?\?>\s*", re.DOTALL)

# Prefix bound to a document's default namespace inside XPath expressions.
DEFAULT_NAMESPACE_PREFIX = "_xmlpp"

# Unprefixed name steps: at the start or after '/', not already "prefix:".
_UNPREFIXED_STEP = re.compile(r"(?:(?<=/)|^)(?=\w)(?!\w+:)")


def _parser() -> ET.XMLParser:
    return ET.XMLParser(remove_blank_text=False, resolve_entities=False)


def parse_document(text: str) -> Tuple[str, ET._Element]:
    """Parse ``text`` keeping whitespace.

    Returns ``(declaration, root)`` where ``declaration`` is the original XML
    declaration (plus the whitespace after it) or an empty string.

    Raises:
        lxml.etree.XMLSyntaxError: If ``text`` is not well-formed
    """
    declaration = ""
    text = text.lstrip("\ufeff")
    match = XML_DECLARATION.match(text)
    if match:
        declaration = match.group(0)
        text = text[match.end():]
    return declaration, ET.fromstring(text, _parser())


def parse_file(path: Path) -> ET._Element:
    """Parse an XML file keeping whitespace."""
    return ET.parse(str(path), _parser()).getroot()


def check_well_formed(text: str) -> None:
    """Raise ``XMLSyntaxError`` if ``text`` is not a well-formed document."""
    parse_document(text)


def qualify_xpath(root: ET._Element, xpath: str) -> Tuple[str, Dict[str, str]]:
    """Bind unprefixed steps of ``xpath`` to the root's default namespace.

    Returns the rewritten expression and its namespace map. Documents without
    a default namespace get the expression back unchanged.
    """
    uri = root.nsmap.get(None) if root.prefix is None else None
    if not uri:
        return xpath, {}
    qualified = _UNPREFIXED_STEP.sub(DEFAULT_NAMESPACE_PREFIX + ":", xpath)
    return qualified, {DEFAULT_NAMESPACE_PREFIX: uri}


def select(root: ET._Element, xpath: str) -> list:
    """Evaluate ``xpath`` against ``root`` and always return a list.

    Raises:
        lxml.etree.XPathError: If the expression is invalid
    """
    expression, namespaces = qualify_xpath(root, xpath)
    result: Any = root.xpath(expression, namespaces=namespaces)
    if isinstance(result, list):
        return result
    # Scalar results (count(), string()) have no node to edit.
    return []


def inner_xml(node: Any) -> str:
    """Markup inside ``node`` (text and child elements), or the string value."""
    if isinstance(node, ET._Element) and not isinstance(node, (ET._Comment, ET._ProcessingInstruction)):
        parts = [escape(node.text or "")]
        for child in node:
            parts.append(ET.tostring(child, encoding="unicode", with_tail=True))
        return "".join(parts)
    if isinstance(node, ET._Element):
        return node.text or ""
    return str(node)


def _strip_blank_text(root: ET._Element) -> None:
    for node in root.iter():
        if isinstance(node.tag, str) and node.text is not None and not node.text.strip():
            node.text = None
        if node.tail is not None and not node.tail.strip():
            node.tail = None


def serialize(declaration: str, root: ET._Element, indent: bool = False) -> str:
    """Serialize the whole document, restoring the original declaration.

    With ``indent`` the whitespace between elements is rebuilt with two-space
    indentation. Elements holding text keep their content on one line.
    """
    if not indent:
        return declaration + ET.tostring(root.getroottree(), encoding="unicode")
    _strip_blank_text(root)
    text = ET.tostring(root.getroottree(), encoding="unicode", pretty_print=True)
    return declaration + text.rstrip("\n")


def replace_inner_xml(element: ET._Element, markup: str) -> None:
    """Replace the children and text of ``element`` with parsed ``markup``.

    The fragment inherits the element's in-scope namespaces.
    """
    declarations = "".join(
        f' xmlns="{escape(uri)}"' if prefix is None else f' xmlns:{prefix}="{escape(uri)}"'
        for prefix, uri in element.nsmap.items()
    )
    wrapper = ET.fromstring(f"<_xmlpp_fragment{declarations}>{markup}</_xmlpp_fragment>", _parser())
    for child in list(element):
        element.remove(child)
    element.text = wrapper.text
    for child in list(wrapper):
        element.append(child)


def remove_node(node: ET._Element) -> None:
    """Detach ``node`` from its parent, keeping the text that followed it."""
    parent = node.getparent()
    if parent is None:
        return
    tail = node.tail
    previous = node.getprevious()
    if tail:
        if previous is not None:
            previous.tail = (previous.tail or "") + tail
        else:
            parent.text = (parent.text or "") + tail
    parent.remove(node)


def set_value(node: Any, value: str) -> Optional[str]:
    """Set the scalar value of an element, attribute or text node.

    Returns a short description of what was changed, or None when the node
    kind cannot be edited.
    """
    if isinstance(node, ET._Element):
        for child in list(node):
            node.remove(child)
        node.text = value
        return "element"
    if isinstance(node, ET._ElementUnicodeResult):
        parent = node.getparent()
        if parent is None:
            return None
        if node.is_attribute:
            parent.set(node.attrname, value)
            return "attribute"
        if node.is_tail:
            parent.tail = value
        else:
            parent.text = value
        return "text"
    return None


def remove_result(node: Any) -> bool:
    """Delete an element, attribute or text node returned by XPath."""
    if isinstance(node, ET._Element):
        remove_node(node)
        return True
    if isinstance(node, ET._ElementUnicodeResult):
        parent = node.getparent()
        if parent is None:
            return False
        if node.is_attribute:
            parent.attrib.pop(node.attrname, None)
        elif node.is_tail:
            parent.tail = None
        else:
            parent.text = None
        return True
    return False


__all__ = [
    "XML_DECLARATION",
    "DEFAULT_NAMESPACE_PREFIX",
    "parse_document",
    "parse_file",
    "check_well_formed",
    "qualify_xpath",
    "select",
    "inner_xml",
    "serialize",
    "replace_inner_xml",
    "remove_node",
    "set_value",
    "remove_result",
]
