from __future__ import annotations

import ast

from .registry import register_check


@register_check("imports")
def check_imports(ctx) -> None:
    for node in ast.walk(ctx.tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                if not ctx.symbols.resolves(alias.name):
                    ctx.error(node, f"unresolved module: {alias.name}")
        elif isinstance(node, ast.ImportFrom):
            if any(alias.name == "*" for alias in node.names):
                ctx.error(node, "wildcard imports are not supported in plugin scripts")
            # relative imports resolve against the generated package, not the classpath
            if node.level or node.module in (None, "__future__"):
                continue
            if not ctx.symbols.resolves(node.module):
                ctx.error(node, f"unresolved module: {node.module}")


@register_check("template")
def check_template(ctx) -> None:
    definition = ctx.definition
    if not ctx.symbols.resolves(definition.base_module):
        ctx.report_first_line(
            f"cannot access script base class {definition.qualified_base}: "
            f"module {definition.base_module} is not on the classpath"
        )
