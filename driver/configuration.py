from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from toolchain import CompilationConfiguration, Diagnostic, ScriptDefinition

logger = logging.getLogger("plugin_compiler")


class ErrorDiagnosticSink:
    """Logs error diagnostics and drops everything else."""

    def report(self, diagnostic: Diagnostic) -> None:
        if not diagnostic.is_error:
            return
        logger.error(
            "%s:%s-%s: %s\n>>> %s",
            diagnostic.source_path,
            diagnostic.line,
            diagnostic.column,
            diagnostic.message,
            diagnostic.line_content,
        )


def create_compiler_configuration(
    input_path: Path,
    classpath: Sequence[Path],
    script_template: ScriptDefinition,
) -> CompilationConfiguration:
    return CompilationConfiguration(
        classpath_entries=tuple(classpath),
        script_template=script_template,
        module_name=str(input_path),
        diagnostic_sink=ErrorDiagnosticSink(),
        source_roots=(Path(input_path).absolute(),),
        retain_output_in_memory=True,
    )
