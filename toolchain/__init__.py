from .base import Toolchain, ToolchainError
from .configuration import CompilationConfiguration
from .diagnostics import Diagnostic, DiagnosticSink, Severity
from .environment import CompilationEnvironment, EnvironmentConfigFiles, ScriptDescriptor, SourceUnit
from .output import GenerationState, OutputFactory, OutputFile
from .registry import registry
from .service import ScriptToolchain
from .template import PluginScript, ScriptDefinition, script_template


def load_builtin_checks() -> None:
    # import side-effects for registration
    from . import declarations  # noqa: F401
    from . import imports  # noqa: F401


__all__ = [
    "CompilationConfiguration",
    "CompilationEnvironment",
    "Diagnostic",
    "DiagnosticSink",
    "EnvironmentConfigFiles",
    "GenerationState",
    "OutputFactory",
    "OutputFile",
    "PluginScript",
    "ScriptDefinition",
    "ScriptDescriptor",
    "ScriptToolchain",
    "Severity",
    "SourceUnit",
    "Toolchain",
    "ToolchainError",
    "load_builtin_checks",
    "registry",
    "script_template",
]
