"""Include splicing.

Handles:
- <!-- #include "file.xml" -->                      - raw file text
- <!-- #include "file.xml" xpath="/root/section" --> - inner XML of the first match

File names and xpaths may contain macros. Relative paths resolve against the
directory of the file being processed. Included text may itself contain
include markers; there is no cycle guard.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Optional

from lxml import etree as ET

from ...context import ProcessingContext
from ...exceptions import BindingExpressionError, IncludeNotFoundError, MalformedDirectiveError
from ...utils import xmldoc
from ...utils.io import read_text
from .base import ContentTransformer
from .variables import TokenResolver

logger = logging.getLogger(__name__)


class IncludeSplicer(ContentTransformer):
    """Replace include markers with external file content."""

    INCLUDE_PATTERN = re.compile(
        r"<!--\s*#\s*include\s+[\"|'](?P<file>[^\"|']*)[\"|']\s*"
        r"(?:xpath\s*=\s*[\"|'](?P<xpath>.*)[\"|']\s*)?-->",
        re.IGNORECASE,
    )

    def __init__(self, resolver: TokenResolver) -> None:
        self.resolver = resolver

    def transform(self, content: str, context: ProcessingContext) -> str:
        """Splice includes until no marker remains.

        If resolving a file name or xpath records a diagnostic, splicing stops
        and the content is returned as it stands.

        Raises:
            IncludeNotFoundError: If an included file does not exist
        """
        while True:
            match = self.INCLUDE_PATTERN.search(content)
            if not match:
                break

            raw_file = match.group("file").strip()
            if not raw_file:
                raise MalformedDirectiveError(
                    "Include marker has no file name.",
                    context={"marker": match.group(0)},
                )

            before = len(context.diagnostics)
            resolved_file = self.resolver.substitute(raw_file, context) or ""
            if len(context.diagnostics) > before:
                return content

            path = self.resolve_path(resolved_file, context.source_file)
            if not path.exists():
                raise IncludeNotFoundError(
                    f"Could not find file {path}",
                    context={"file": str(path)},
                )

            raw_xpath = (match.group("xpath") or "").strip()
            if raw_xpath:
                before = len(context.diagnostics)
                xpath = self.resolver.substitute(raw_xpath, context) or ""
                if len(context.diagnostics) > before:
                    return content
                source = self.select_content(path, xpath)
            else:
                source = read_text(path)

            logger.debug("Included %s%s", path, f" ({raw_xpath})" if raw_xpath else "")
            context.record_include(str(path))
            content = content[:match.start()] + source + content[match.end():]

        return content

    @staticmethod
    def resolve_path(file_name: str, source_file: Optional[Path]) -> Path:
        path = Path(file_name)
        if path.is_absolute():
            return path
        base = Path(source_file).parent if source_file is not None else Path.cwd()
        return base / path

    @staticmethod
    def select_content(path: Path, xpath: str) -> str:
        """Inner XML of the first node ``xpath`` selects in ``path`` ("" if none)."""
        try:
            root = xmldoc.parse_file(path)
            nodes = xmldoc.select(root, xpath)
        except ET.XPathError as e:
            raise BindingExpressionError(
                f"Invalid xpath '{xpath}' for include {path}: {e}",
                context={"file": str(path), "xpath": xpath},
            ) from e
        if not nodes:
            logger.warning("Include xpath %s matched nothing in %s", xpath, path)
            return ""
        return xmldoc.inner_xml(nodes[0])


__all__ = ["IncludeSplicer"]
