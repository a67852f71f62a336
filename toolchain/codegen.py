"""Bytecode generation for analysed plugin scripts.

Each script becomes a module holding a single class derived from the script
template. The script's statements form the body of that class's ``__init__``,
with the instance bound to the template's receiver name. Outputs are
hash-based ``.pyc`` files, so identical sources always produce identical
bytes.
"""

from __future__ import annotations

import ast
import importlib.util
import marshal
import re
import warnings

from .analysis import AnalysisContext
from .base import ToolchainError
from .diagnostics import Severity
from .environment import BytecodeTarget, ScriptDescriptor
from .output import OutputFactory
from .template import ScriptDefinition

_PYC_HASH_BASED = 0b01
_NON_IDENTIFIER = re.compile(r"\W")

_SKELETON = """\
import {module} as __script_template__


class {name}(__script_template__.{base}):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        {receiver} = self
"""


def pyc_bytes(code, source_bytes: bytes, target: BytecodeTarget) -> bytes:
    data = bytearray(target.magic)
    data.extend(_PYC_HASH_BASED.to_bytes(4, "little"))
    data.extend(importlib.util.source_hash(source_bytes))
    data.extend(marshal.dumps(code))
    return bytes(data)


def relative_output_path(fq_name: str, target: BytecodeTarget) -> str:
    return fq_name.replace(".", "/") + target.suffix


def _is_package_declaration(node: ast.stmt) -> bool:
    return (
        isinstance(node, ast.Assign)
        and len(node.targets) == 1
        and isinstance(node.targets[0], ast.Name)
        and node.targets[0].id == "__package__"
    )


def build_script_module(tree: ast.Module, script: ScriptDescriptor, definition: ScriptDefinition) -> ast.Module:
    skeleton = ast.parse(
        _SKELETON.format(
            module=definition.base_module,
            name=script.class_name,
            base=definition.base_name,
            receiver=definition.receiver,
        )
    )
    class_def = skeleton.body[1]
    init_def = class_def.body[0]

    future: list[ast.stmt] = []
    for node in tree.body:
        if isinstance(node, ast.ImportFrom) and node.module == "__future__":
            future.append(node)
        elif not _is_package_declaration(node):
            init_def.body.append(node)

    skeleton.body[:0] = future
    return ast.fix_missing_locations(skeleton)


def _compile(ctx: AnalysisContext, module: ast.Module | str, filename: str, target: BytecodeTarget):
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", SyntaxWarning)
        try:
            code = compile(module, filename, "exec", dont_inherit=True, optimize=target.optimize)
        except (SyntaxError, ValueError, TypeError, MemoryError, RecursionError) as e:
            raise ToolchainError(f"Code generation failed for {filename}: {e}") from e

    for warning in caught:
        if issubclass(warning.category, SyntaxWarning):
            ctx.report(Severity.WARNING, warning.lineno or 1, 1, str(warning.message))
    return code


def _emit_packages(ctx: AnalysisContext, package: str, target: BytecodeTarget, factory: OutputFactory) -> None:
    if not package:
        return
    parts = package.split(".")
    for depth in range(1, len(parts) + 1):
        package_dir = "/".join(parts[:depth])
        relative_path = f"{package_dir}/__init__{target.suffix}"
        if factory.get(relative_path) is not None:
            continue
        code = _compile(ctx, "", f"{package_dir}/__init__.py", target)
        factory.add(relative_path, pyc_bytes(code, b"", target))


def generate(ctx: AnalysisContext, target: BytecodeTarget, factory: OutputFactory) -> None:
    unit = ctx.unit
    script = unit.script
    if script is None:
        # plain modules compile unchanged under their own (sanitised) name
        name = _NON_IDENTIFIER.sub("_", unit.path.name.split(".", 1)[0]) or "_"
        code = _compile(ctx, ctx.tree, str(unit.path), target)
        factory.add(relative_output_path(name, target), pyc_bytes(code, unit.source_bytes, target))
        return

    try:
        module = build_script_module(ctx.tree, script, ctx.definition)
    except (MemoryError, RecursionError) as e:
        raise ToolchainError(f"Code generation failed for {unit.path}: {e!r}") from e
    code = _compile(ctx, module, str(unit.path), target)
    _emit_packages(ctx, script.package, target, factory)
    factory.add(relative_output_path(script.fq_name, target), pyc_bytes(code, unit.source_bytes, target))
