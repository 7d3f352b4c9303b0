"""Inline property definitions.

Handles ``<!-- #define NAME = value -->`` anywhere in a file. Values may
span lines and are stored raw; macros inside them resolve at each use.
"""
from __future__ import annotations

import logging
import re

from ...context import ProcessingContext
from .base import ContentTransformer

logger = logging.getLogger(__name__)


class DefineExtractor(ContentTransformer):
    """Harvest ``#define`` markers into the property store.

    The content is returned unchanged; the markers stay in the output.
    """

    # The name runs to the last '=' on the marker's first line.
    DEFINE_PATTERN = re.compile(
        r"<!--\s*#\s*define\s+(?P<name>[^\r\n]+)\s*=\s*(?P<value>.*?)-->",
        re.IGNORECASE | re.DOTALL,
    )

    def transform(self, content: str, context: ProcessingContext) -> str:
        for match in self.DEFINE_PATTERN.finditer(content):
            name = match.group("name").strip()
            value = match.group("value").strip()
            if name and value:
                context.properties.add(name, value)
                context.defines_extracted += 1
                logger.debug("#define %s", name)
        return content


__all__ = ["DefineExtractor"]
