from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .errors import CompilationFailed


@dataclass(frozen=True, slots=True)
class CompilationResult:
    entry_qualified_name: str
    entry_output_path: Path


@dataclass(frozen=True, slots=True)
class Compiled:
    result: CompilationResult


@dataclass(frozen=True, slots=True)
class Failed:
    error: CompilationFailed


CompilationOutcome = Compiled | Failed
