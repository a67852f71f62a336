from __future__ import annotations

from pathlib import Path


class PluginCompilerError(Exception):
    """Base class for failures that abort a compilation run."""


class ClasspathResolutionError(PluginCompilerError):
    pass


class CompilationFailed(PluginCompilerError):
    def __init__(self, message: str, source_path: Path | None = None) -> None:
        self.message = message
        self.source_path = source_path
        if source_path is not None:
            message = f"{source_path}: {message}"
        super().__init__(message)
