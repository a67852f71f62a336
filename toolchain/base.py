from __future__ import annotations

import ast
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from .environment import CompilationEnvironment
    from .output import GenerationState


class ToolchainError(RuntimeError):
    """Raised when the toolchain itself fails while processing a source."""


class AnalysisContextProtocol(Protocol):
    tree: ast.Module

    def error(self, node: Any, message: str) -> None: ...


class CheckHandler(Protocol):
    def __call__(self, ctx: AnalysisContextProtocol) -> None: ...


class Toolchain(Protocol):
    def analyze_and_generate(self, environment: "CompilationEnvironment") -> "GenerationState | None": ...
