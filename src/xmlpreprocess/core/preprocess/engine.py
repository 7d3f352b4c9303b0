"""Preprocessor: runs the transformation pipeline over input files.

Transformation Pipeline (5 steps):
1. DEFINES     - harvest <!-- #define --> markers
2. INCLUDES    - splice <!-- #include --> markers
3. DEFINES     - again, for defines brought in by includes
4. DIRECTIVES  - ifdef/if/else/endif blocks (or whole-buffer tokens in NoDirectives mode)
5. BINDINGS    - ${XPath=...}/${Regex=...} properties

Exit codes:
- 0: output written (or unchanged)
- 1: fatal error (missing file, malformed directives, output not well-formed)
- 2: validation failure, nothing written (missing settings)
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence

from lxml import etree as ET

from ..builtins import add_builtin_properties
from ..context import DiagnosticKind, ProcessingContext
from ..exceptions import UndefinedSettingError
from ..utils import xmldoc
from ..utils.io import read_text, write_text
from .transformers.base import TransformerPipeline
from .transformers.bindings import DynamicBindingApplier
from .transformers.conditionals import DirectiveProcessor
from .transformers.defines import DefineExtractor
from .transformers.includes import IncludeSplicer
from .transformers.variables import TokenResolver

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_VALIDATION = 2


class Preprocessor:
    """Preprocess files against a shared :class:`ProcessingContext`.

    Usage:
        preprocessor = Preprocessor()
        exit_code = preprocessor.run(["web.config"], [], context)
    """

    def __init__(self, resolver: Optional[TokenResolver] = None) -> None:
        self.resolver = resolver or TokenResolver()
        self.pipeline = self._build_pipeline()

    def _build_pipeline(self) -> TransformerPipeline:
        return TransformerPipeline([
            DefineExtractor(),
            IncludeSplicer(self.resolver),
            DefineExtractor(),
            DirectiveProcessor(self.resolver),
            DynamicBindingApplier(self.resolver),
        ])

    def process(self, content: str, context: ProcessingContext) -> str:
        """Run the pipeline over ``content`` without any file I/O."""
        return self.pipeline.execute(content, context)

    def preprocess(self, context: ProcessingContext) -> int:
        """Preprocess ``context.source_file`` into ``context.destination_file``.

        Failures are recorded as diagnostics on the context and mapped to an
        exit code; nothing is raised for per-file problems.

        Returns:
            0, 1 or 2 (see module docstring)
        """
        if context.source_file is None:
            raise ValueError("ProcessingContext.source_file is required")
        source_file = Path(context.source_file)
        destination = Path(context.destination_file or source_file)

        diagnostics_before = len(context.diagnostics)
        try:
            source = read_text(source_file)
            add_builtin_properties(context)
            output = self.process(source, context)
        except UndefinedSettingError as e:
            context.add_diagnostic(DiagnosticKind.MISSING_TOKEN, str(e))
            return EXIT_VALIDATION
        except FileNotFoundError as e:
            context.add_diagnostic(DiagnosticKind.FILE_NOT_FOUND, str(e))
            return EXIT_FATAL
        except Exception as e:
            logger.debug("Preprocessing %s failed", source_file, exc_info=True)
            context.add_diagnostic(DiagnosticKind.EXCEPTION, str(e))
            return EXIT_FATAL

        context.files_processed.append(str(source_file))

        if context.validate_settings_exist and len(context.diagnostics) > diagnostics_before:
            logger.info("Not writing %s, settings are missing", destination)
            return EXIT_VALIDATION

        if context.validate_xml_well_formed:
            try:
                xmldoc.check_well_formed(output)
            except ET.XMLSyntaxError as e:
                error_file = Path(f"{destination}.error")
                write_text(error_file, output)
                context.add_diagnostic(
                    DiagnosticKind.NOT_WELL_FORMED,
                    f"Output was not well-formed: {e}, "
                    f"A copy of the file that was not well-formed was saved to {error_file}.",
                )
                return EXIT_FATAL

        if destination != source_file or output != source:
            write_text(destination, output)
            logger.info("Wrote %s", destination)
        else:
            logger.info("%s unchanged", destination)
        return EXIT_SUCCESS

    def run(
        self,
        inputs: Sequence[str],
        outputs: Sequence[str],
        context: ProcessingContext,
    ) -> int:
        """Preprocess every input in order, sharing one context.

        Output ``i`` pairs with input ``i``; inputs without an output are
        rewritten in place. Processing stops at the first failing file unless
        ``context.keep_going`` is set; either way the first non-zero exit code
        is returned.
        """
        exit_code = EXIT_SUCCESS
        for index, raw_input in enumerate(inputs):
            source = raw_input.strip() if raw_input else ""
            if not source:
                continue

            destination: Optional[str] = outputs[index] if index < len(outputs) else None
            context.source_file = Path(source)
            context.destination_file = Path(destination) if destination else Path(source)

            if not context.source_file.exists():
                context.add_diagnostic(
                    DiagnosticKind.FILE_NOT_FOUND,
                    f'Input file was not found: "{source}"',
                )
                result = EXIT_FATAL
            else:
                if destination:
                    logger.info('Preprocessing "%s" to "%s"...', source, destination)
                else:
                    logger.info('Preprocessing "%s"...', source)
                result = self.preprocess(context)

            if result != EXIT_SUCCESS:
                if exit_code == EXIT_SUCCESS:
                    exit_code = result
                if not context.keep_going:
                    break
        return exit_code


def preprocess_files(
    inputs: List[str],
    context: ProcessingContext,
    outputs: Optional[List[str]] = None,
) -> int:
    """Convenience wrapper around :meth:`Preprocessor.run`."""
    return Preprocessor().run(inputs, outputs or [], context)


__all__ = ["Preprocessor", "preprocess_files", "EXIT_SUCCESS", "EXIT_FATAL", "EXIT_VALIDATION"]
