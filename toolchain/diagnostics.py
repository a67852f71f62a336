from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol


class Severity(Enum):
    ERROR = "error"
    STRONG_WARNING = "strong warning"
    WARNING = "warning"
    INFO = "info"
    LOGGING = "logging"

    @property
    def is_error(self) -> bool:
        return self is Severity.ERROR


@dataclass(frozen=True, slots=True)
class Diagnostic:
    severity: Severity
    source_path: Path
    line: int
    column: int
    message: str
    line_content: str = ""

    @property
    def is_error(self) -> bool:
        return self.severity.is_error


class DiagnosticSink(Protocol):
    def report(self, diagnostic: Diagnostic) -> None: ...


def line_at(text: str, line: int) -> str:
    """Return the 1-based ``line`` of ``text`` without its newline, or '' if out of range."""
    lines = text.splitlines()
    if 1 <= line <= len(lines):
        return lines[line - 1]
    return ""
