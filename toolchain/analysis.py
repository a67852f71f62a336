from __future__ import annotations

import ast
import logging
from dataclasses import dataclass
from typing import Any

from .diagnostics import Diagnostic, Severity, line_at
from .environment import CompilationEnvironment, SourceUnit, SymbolIndex
from .registry import registry, run_check
from .template import ScriptDefinition

logger = logging.getLogger("plugin_compiler")


@dataclass(slots=True)
class AnalysisContext:
    environment: CompilationEnvironment
    unit: SourceUnit
    tree: ast.Module
    error_count: int = 0

    @property
    def symbols(self) -> SymbolIndex:
        return self.environment.symbols

    @property
    def definition(self) -> ScriptDefinition:
        return self.environment.configuration.script_template

    def report(self, severity: Severity, line: int, column: int, message: str) -> None:
        diagnostic = Diagnostic(
            severity=severity,
            source_path=self.unit.path,
            line=line,
            column=column,
            message=message,
            line_content=line_at(self.unit.text, line),
        )
        if diagnostic.is_error:
            self.error_count += 1
        self.environment.configuration.diagnostic_sink.report(diagnostic)

    def error(self, node: Any, message: str) -> None:
        line = getattr(node, "lineno", 1) or 1
        column = (getattr(node, "col_offset", 0) or 0) + 1
        self.report(Severity.ERROR, line, column, message)

    def report_first_line(self, message: str) -> None:
        self.report(Severity.ERROR, 1, 1, message)


def report_syntax_error(environment: CompilationEnvironment, unit: SourceUnit, error: SyntaxError) -> None:
    line = error.lineno or 1
    text = (error.text or line_at(unit.text, line)).rstrip("\r\n")
    environment.configuration.diagnostic_sink.report(
        Diagnostic(
            severity=Severity.ERROR,
            source_path=unit.path,
            line=line,
            column=error.offset or 1,
            message=error.msg,
            line_content=text,
        )
    )


def analyze(environment: CompilationEnvironment, unit: SourceUnit) -> AnalysisContext | None:
    """Run every registered check over ``unit``; ``None`` means it did not parse."""
    if unit.tree is None:
        if unit.syntax_error is not None:
            report_syntax_error(environment, unit, unit.syntax_error)
        return None

    ctx = AnalysisContext(environment=environment, unit=unit, tree=unit.tree)
    for name in registry.names():
        logger.debug("module=%s check=%s", environment.configuration.module_name, name)
        run_check(name, ctx)
    return ctx


_SCOPES = (ast.FunctionDef, ast.AsyncFunctionDef, ast.Lambda, ast.ClassDef)


def _scope_header(node: ast.AST) -> list[ast.AST]:
    """Parts of a def, lambda or class statement evaluated in the enclosing scope."""
    header: list[ast.AST] = list(getattr(node, "decorator_list", []))
    if isinstance(node, ast.ClassDef):
        header.extend(node.bases)
        header.extend(keyword.value for keyword in node.keywords)
    else:
        header.extend(node.args.defaults)
        header.extend(default for default in node.args.kw_defaults if default is not None)
    return header


def iter_script_level(tree: ast.Module):
    """Yield nodes executed directly by the script body, skipping nested scopes."""
    pending: list[ast.AST] = list(tree.body)
    while pending:
        node = pending.pop(0)
        if isinstance(node, _SCOPES):
            pending.extend(_scope_header(node))
            continue
        yield node
        pending.extend(ast.iter_child_nodes(node))
