from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .diagnostics import DiagnosticSink
from .template import ScriptDefinition


@dataclass(frozen=True, slots=True)
class CompilationConfiguration:
    classpath_entries: tuple[Path, ...]
    script_template: ScriptDefinition
    module_name: str
    diagnostic_sink: DiagnosticSink
    source_roots: tuple[Path, ...] = ()
    retain_output_in_memory: bool = False
