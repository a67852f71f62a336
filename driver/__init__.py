from .batch import BatchDriver, BatchReport, write_manifest
from .classpath import CurrentExecutionContext, ExecutionContext, assemble_classpath, split_classpath
from .compiler import PluginCompiler
from .discovery import find_plugin_sources
from .errors import ClasspathResolutionError, CompilationFailed, PluginCompilerError
from .runtime import Compiled, CompilationOutcome, CompilationResult, Failed

__all__ = [
    "BatchDriver",
    "BatchReport",
    "ClasspathResolutionError",
    "CompilationFailed",
    "CompilationOutcome",
    "CompilationResult",
    "Compiled",
    "CurrentExecutionContext",
    "ExecutionContext",
    "Failed",
    "PluginCompiler",
    "PluginCompilerError",
    "assemble_classpath",
    "find_plugin_sources",
    "split_classpath",
    "write_manifest",
]
