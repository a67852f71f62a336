from __future__ import annotations

import ast

from .analysis import iter_script_level
from .registry import register_check


def _is_package_target(target: ast.expr) -> bool:
    return isinstance(target, ast.Name) and target.id == "__package__"


def _valid_package(value: str) -> bool:
    return all(part.isidentifier() for part in value.split("."))


@register_check("declarations")
def check_declarations(ctx) -> None:
    declared = False
    for node in ctx.tree.body:
        if isinstance(node, ast.Assign) and any(_is_package_target(t) for t in node.targets):
            if len(node.targets) != 1:
                ctx.error(node, "__package__ must be assigned on its own")
            elif not (isinstance(node.value, ast.Constant) and isinstance(node.value.value, str)):
                ctx.error(node, "__package__ must be a string literal")
            elif not _valid_package(node.value.value):
                ctx.error(node, f"invalid package name: {node.value.value!r}")
            elif declared:
                ctx.error(node, "__package__ is declared more than once")
            declared = True
        elif isinstance(node, (ast.AugAssign, ast.AnnAssign)) and _is_package_target(node.target):
            ctx.error(node, "__package__ must be a string literal")


def _leading_future_imports(tree: ast.Module) -> set[int]:
    body = tree.body
    start = 0
    if body and isinstance(body[0], ast.Expr) and isinstance(body[0].value, ast.Constant):
        if isinstance(body[0].value.value, str):
            start = 1
    leading: set[int] = set()
    for node in body[start:]:
        if not (isinstance(node, ast.ImportFrom) and node.module == "__future__"):
            break
        leading.add(id(node))
    return leading


@register_check("script-body")
def check_script_body(ctx) -> None:
    leading_future = _leading_future_imports(ctx.tree)
    for node in iter_script_level(ctx.tree):
        if isinstance(node, ast.ImportFrom) and node.module == "__future__" and id(node) not in leading_future:
            ctx.error(node, "from __future__ imports must occur at the beginning of the script")
        elif isinstance(node, ast.Return):
            ctx.error(node, "'return' is not allowed in the script body")
        elif isinstance(node, (ast.Yield, ast.YieldFrom)):
            ctx.error(node, "'yield' is not allowed in the script body")
        elif isinstance(node, ast.Await):
            ctx.error(node, "'await' is not allowed in the script body")
        elif isinstance(node, (ast.Global, ast.Nonlocal)):
            keyword = "global" if isinstance(node, ast.Global) else "nonlocal"
            ctx.error(node, f"'{keyword}' is not allowed in the script body")
