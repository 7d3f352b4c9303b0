"""Content transformers for the Preprocessor.

- base: Abstract base class and pipeline infrastructure
- variables: ${...} token resolution
- loops: #foreach expansion
- conditionals: ifdef/if/else/endif comment blocks
- includes: #include splicing
- defines: #define extraction
- bindings: XPath/Regex dynamic bindings
"""
from __future__ import annotations

from .base import ContentTransformer, TransformerPipeline
from .bindings import DynamicBindingApplier, RegexBinding, XPathBinding, parse_binding
from .conditionals import DirectiveProcessor, remove_comment
from .defines import DefineExtractor
from .includes import IncludeSplicer
from .loops import ForeachExpander
from .variables import TokenResolver

__all__ = [
    # Base classes
    "ContentTransformer",
    "TransformerPipeline",
    # Tokens
    "TokenResolver",
    "ForeachExpander",
    # Directives
    "DirectiveProcessor",
    "remove_comment",
    # Pre-passes
    "DefineExtractor",
    "IncludeSplicer",
    # Post-pass
    "DynamicBindingApplier",
    "XPathBinding",
    "RegexBinding",
    "parse_binding",
]
