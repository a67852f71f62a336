from contextlib import ExitStack
from pathlib import Path
from typing import List

import pytest

from toolchain import (
    CompilationConfiguration,
    CompilationEnvironment,
    Diagnostic,
    EnvironmentConfigFiles,
    PluginScript,
    ScriptDefinition,
    ScriptToolchain,
    Severity,
    ToolchainError,
    registry,
    script_template,
)
from toolchain.environment import script_class_name
from toolchain.registry import CheckRegistry


class CollectingSink:
    def __init__(self) -> None:
        self.diagnostics: List[Diagnostic] = []

    def report(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]


def _compile(source: Path, classpath, template, *, retain=True):
    sink = CollectingSink()
    configuration = CompilationConfiguration(
        classpath_entries=tuple(classpath),
        script_template=template,
        module_name=str(source),
        diagnostic_sink=sink,
        source_roots=(source,),
        retain_output_in_memory=retain,
    )
    with ExitStack() as scope:
        environment = CompilationEnvironment.create(scope, configuration, EnvironmentConfigFiles.BYTECODE_CONFIG_FILES)
        state = ScriptToolchain().analyze_and_generate(environment)
    return state, sink


def test_builtin_checks_run_in_registration_order():
    ScriptToolchain()
    assert registry.names() == ["declarations", "script-body", "imports", "template"]


def test_registry_keeps_registration_order_and_rejects_duplicates():
    checks = CheckRegistry()
    checks.register("zeta", lambda ctx: None)
    checks.register("alpha", lambda ctx: None)
    assert checks.names() == ["zeta", "alpha"]
    with pytest.raises(ValueError):
        checks.register("zeta", lambda ctx: None)
    with pytest.raises(KeyError):
        checks.get("missing")


@pytest.mark.parametrize(
    "text, message",
    [
        ("from os.path import *\n", "wildcard imports are not supported in plugin scripts"),
        ("import no_such_module_here\n", "unresolved module: no_such_module_here"),
        ("counter = 0\nglobal counter\n", "'global' is not allowed in the script body"),
        ("x = yield 1\n", "'yield' is not allowed in the script body"),
        ("value = 1\nreturn 5\n", "'return' is not allowed in the script body"),
        (
            "value = 1\nfrom __future__ import annotations\n",
            "from __future__ imports must occur at the beginning of the script",
        ),
        ("if True:\n    from __future__ import annotations\n", "from __future__ imports must occur at the beginning of the script"),
        ("@plugin.on(await ready())\ndef f():\n    pass\n", "'await' is not allowed in the script body"),
        ("name = 'a'\n__package__ = name\n", "__package__ must be a string literal"),
        ("__package__ = 'plugins.1bad'\n", "invalid package name: 'plugins.1bad'"),
        ("__package__ = 'a'\n__package__ = 'b'\n", "__package__ is declared more than once"),
    ],
)
def test_analysis_errors(write_script, classpath, template, text, message):
    source = write_script("a.plugin.py", text)
    state, sink = _compile(source, classpath, template)
    assert state is None
    assert message in [d.message for d in sink.errors]


def test_error_diagnostic_carries_location(write_script, classpath, template):
    source = write_script("a.plugin.py", "value = 1\n\nif True:\n    import also_missing_xyz\n")
    state, sink = _compile(source, classpath, template)
    (error,) = sink.errors
    assert state is None
    assert error.severity is Severity.ERROR
    assert error.source_path == source
    assert (error.line, error.column) == (4, 5)
    assert error.line_content == "    import also_missing_xyz"


def test_nested_functions_may_use_yield_and_global(write_script, classpath, template):
    text = "def numbers():\n    yield 1\n\ndef reset():\n    global STATE\n    STATE = 0\n"
    source = write_script("a.plugin.py", text)
    state, sink = _compile(source, classpath, template)
    assert sink.errors == []
    assert state is not None


def test_syntax_warnings_are_reported_as_warnings(write_script, classpath, template):
    source = write_script("a.plugin.py", "x = 1\nflag = x is 1\n")
    state, sink = _compile(source, classpath, template)
    assert state is not None
    assert sink.errors == []
    assert any(d.severity is Severity.WARNING and d.line == 2 for d in sink.diagnostics)


def test_future_imports_are_hoisted(write_script, classpath, template):
    source = write_script("a.plugin.py", '"""Docs."""\nfrom __future__ import annotations\n\ndef f(x: Undefined) -> None:\n    pass\n')
    state, sink = _compile(source, classpath, template)
    assert sink.errors == []
    assert state.factory.get("A_plugin.pyc") is not None


def test_output_must_be_retained_in_memory(write_script, classpath, template):
    source = write_script("a.plugin.py", "value = 1\n")
    with pytest.raises(ToolchainError):
        _compile(source, classpath, template, retain=False)


def test_outputs_are_hash_based_pycs(write_script, classpath, template):
    import importlib.util

    source = write_script("a.plugin.py", "__package__ = 'p.q'\nvalue = 1\n")
    state, _ = _compile(source, classpath, template)
    paths = [output.relative_path for output in state.factory.as_list()]
    assert paths == ["p/__init__.pyc", "p/q/__init__.pyc", "p/q/A_plugin.pyc"]

    data = state.factory.get("p/q/A_plugin.pyc").as_bytes()
    assert data[:4] == importlib.util.MAGIC_NUMBER
    assert int.from_bytes(data[4:8], "little") == 0b01
    assert data[8:16] == importlib.util.source_hash(source.read_bytes())


def test_environment_rejects_use_after_dispose(write_script, classpath, template):
    source = write_script("a.plugin.py", "value = 1\n")
    configuration = CompilationConfiguration(
        classpath_entries=tuple(classpath),
        script_template=template,
        module_name="a",
        diagnostic_sink=CollectingSink(),
        source_roots=(source,),
        retain_output_in_memory=True,
    )
    with ExitStack() as scope:
        environment = CompilationEnvironment.create(scope, configuration, EnvironmentConfigFiles.BYTECODE_CONFIG_FILES)
        assert environment.source_files[0].script.fq_name == "A_plugin"
    assert environment.disposed
    with pytest.raises(ToolchainError):
        environment.source_files


@pytest.mark.parametrize(
    "file_name, expected",
    [
        ("greeter.plugin.py", "Greeter_plugin"),
        ("Shop-Keeper.plugin.py", "Shop_Keeper_plugin"),
        ("9lives.plugin.py", "_9lives_plugin"),
    ],
)
def test_script_class_name(file_name, expected):
    assert script_class_name(Path(file_name)) == expected


def test_script_definition_from_template():
    definition = ScriptDefinition.from_annotated_template(PluginScript)
    assert definition.qualified_base == "toolchain.template.PluginScript"
    assert definition.file_extension == ".plugin.py"
    assert definition.receiver == "plugin"
    assert ScriptDefinition.load("toolchain.template:PluginScript") == definition


def test_unannotated_template_is_rejected():
    class Plain:
        pass

    @script_template(file_extension=".quest.py", receiver="quest")
    class Annotated:
        pass

    class Derived(Annotated):
        pass

    with pytest.raises(ValueError):
        ScriptDefinition.from_annotated_template(Plain)
    with pytest.raises(ValueError):
        ScriptDefinition.from_annotated_template(Derived)
    assert ScriptDefinition.from_annotated_template(Annotated).receiver == "quest"


@pytest.mark.parametrize("reference", ["toolchain.template", ":PluginScript", "toolchain.template:Missing"])
def test_bad_template_references(reference):
    with pytest.raises(ValueError):
        ScriptDefinition.load(reference)


def test_template_decorator_validates_arguments():
    with pytest.raises(ValueError):
        script_template(file_extension="plugin.py")
    with pytest.raises(ValueError):
        script_template(file_extension=".plugin.py", receiver="not valid")


def test_plugin_script_handlers():
    script = PluginScript()

    @script.on("tick")
    def first(n):
        return n + 1

    script.on("tick")(lambda n: n * 2)
    assert script.dispatch("tick", 5) == [6, 10]
