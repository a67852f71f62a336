from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Sequence

from toolchain import ScriptDefinition, Toolchain

from .classpath import CurrentExecutionContext, ExecutionContext, assemble_classpath
from .compiler import PluginCompiler
from .discovery import DEFAULT_SCRIPT_SUFFIX, MAX_SEARCH_DEPTH, find_plugin_sources
from .runtime import Compiled, CompilationResult, Failed

logger = logging.getLogger("plugin_compiler")


def write_manifest(manifest_path: Path, names: Iterable[str]) -> None:
    """Write one entry-point name per line, replacing any previous manifest."""
    content = "".join(f"{name}\n" for name in names)
    Path(manifest_path).write_text(content, encoding="utf-8", newline="\n")


@dataclass(slots=True)
class BatchReport:
    results: list[CompilationResult] = field(default_factory=list)

    @property
    def manifest(self) -> list[str]:
        return [result.entry_qualified_name for result in self.results]


class BatchDriver:
    def __init__(
        self,
        *,
        script_template: ScriptDefinition,
        context: ExecutionContext | None = None,
        toolchain: Toolchain | None = None,
        script_suffix: str = DEFAULT_SCRIPT_SUFFIX,
        max_search_depth: int = MAX_SEARCH_DEPTH,
    ) -> None:
        self.script_template = script_template
        self.context = context if context is not None else CurrentExecutionContext()
        self.toolchain = toolchain
        self.script_suffix = script_suffix
        self.max_search_depth = max_search_depth

    def run(
        self,
        input_dir: Path,
        output_dir: Path,
        manifest_path: Path,
        extra_classpath: Sequence[Path] = (),
    ) -> BatchReport:
        """Compile every plugin script under ``input_dir`` and write the manifest.

        The first failure aborts the run with ``CompilationFailed`` and leaves
        the manifest untouched.
        """
        classpath = assemble_classpath(self.context, extra_classpath)
        logger.debug("classpath: %s", [str(entry) for entry in classpath])

        output_dir = Path(output_dir)
        output_dir.mkdir(exist_ok=True)

        compiler = PluginCompiler(classpath, self.script_template, toolchain=self.toolchain)
        sources = find_plugin_sources(Path(input_dir), suffix=self.script_suffix, max_depth=self.max_search_depth)

        report = BatchReport()
        for source in sources:
            match compiler.try_compile(source, output_dir):
                case Compiled(result=result):
                    logger.info("compiled %s -> %s", source, result.entry_qualified_name)
                    report.results.append(result)
                case Failed(error=error):
                    raise error

        write_manifest(manifest_path, report.manifest)
        logger.info("manifest: %s (%d plugin(s))", manifest_path, len(report.results))
        return report
