"""Base class for content transformers in the Preprocessor.

The Preprocessor runs a pipeline of transformers over each input file.
Each transformer handles one category of processing.

Transformation Order (5 steps):
1. DEFINES     - <!-- #define NAME = value -->
2. INCLUDES    - <!-- #include "file" xpath="..." -->
3. DEFINES     - second pass over spliced content
4. DIRECTIVES  - <!-- #ifdef ... --> ... <!-- #else --> ... <!-- #endif -->
5. BINDINGS    - ${XPath=...} / ${Regex=...} properties
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from ...context import ProcessingContext


class ContentTransformer(ABC):
    """Abstract base class for content transformers.

    Transformers are stateless and receive the session through transform().

    Example:
        class DefineExtractor(ContentTransformer):
            def transform(self, content: str, context: ProcessingContext) -> str:
                # Harvest <!-- #define --> markers
                return content
    """

    @abstractmethod
    def transform(self, content: str, context: ProcessingContext) -> str:
        """Transform content using this transformer's rules.

        Args:
            content: Input content to transform
            context: ProcessingContext with properties, flags and diagnostics

        Returns:
            Transformed content
        """
        ...

    def get_name(self) -> str:
        """Get transformer name for logging/debugging."""
        return self.__class__.__name__


class TransformerPipeline:
    """Execute a sequence of transformers on content.

    Example:
        pipeline = TransformerPipeline([
            DefineExtractor(),
            IncludeSplicer(resolver),
            DirectiveProcessor(resolver),
        ])
        result = pipeline.execute(content, context)
    """

    def __init__(self, transformers: List[ContentTransformer]) -> None:
        """Initialize with ordered list of transformers.

        Args:
            transformers: List of transformers to execute in order
        """
        self.transformers = transformers

    def execute(self, content: str, context: ProcessingContext) -> str:
        """Execute all transformers in sequence.

        Args:
            content: Input content
            context: ProcessingContext for the pipeline

        Returns:
            Fully transformed content
        """
        result = content
        for transformer in self.transformers:
            result = transformer.transform(result, context)
        return result
