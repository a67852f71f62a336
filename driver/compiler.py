from __future__ import annotations

import logging
from contextlib import ExitStack
from pathlib import Path
from typing import Sequence

from toolchain import (
    CompilationEnvironment,
    EnvironmentConfigFiles,
    ScriptDefinition,
    ScriptToolchain,
    Toolchain,
    ToolchainError,
)

from .configuration import create_compiler_configuration
from .errors import CompilationFailed
from .runtime import Compiled, CompilationOutcome, CompilationResult, Failed

logger = logging.getLogger("plugin_compiler")


class PluginCompiler:
    def __init__(
        self,
        classpath: Sequence[Path],
        script_template: ScriptDefinition,
        toolchain: Toolchain | None = None,
    ) -> None:
        self.classpath = list(classpath)
        self.script_template = script_template
        self.toolchain = toolchain if toolchain is not None else ScriptToolchain()

    def compile(self, input_path: Path, output_path: Path) -> CompilationResult:
        """Compile one plugin script and write every generated file under ``output_path``.

        Raises ``CompilationFailed`` when the script cannot be compiled. The
        compilation environment is disposed on every exit path.
        """
        input_path = Path(input_path)
        output_path = Path(output_path)
        logger.info("compile: %s", input_path)

        with ExitStack() as scope:
            try:
                configuration = create_compiler_configuration(input_path, self.classpath, self.script_template)
                environment = CompilationEnvironment.create(
                    scope, configuration, EnvironmentConfigFiles.BYTECODE_CONFIG_FILES
                )

                generation_state = self.toolchain.analyze_and_generate(environment)
                if generation_state is None:
                    raise CompilationFailed("bytecode generation failed", input_path)

                source_files = environment.source_files
                script = source_files[0].script if source_files else None
                if script is None:
                    raise CompilationFailed("entry unit is not a script", input_path)
            except ToolchainError as e:
                raise CompilationFailed(f"compilation failed: {e}", input_path) from e

            script_path = script.fq_name.replace(".", "/") + environment.target.suffix
            script_output = generation_state.factory.get(script_path)
            if script_output is None:
                raise CompilationFailed(f"entry artifact not found: {script_path}", input_path)

            for output in generation_state.factory.as_list():
                destination = output_path / output.relative_path
                destination.parent.mkdir(parents=True, exist_ok=True)
                destination.write_bytes(output.as_bytes())
                logger.debug("wrote %s", destination)

            return CompilationResult(script.fq_name, output_path / script_output.relative_path)

    def try_compile(self, input_path: Path, output_path: Path) -> CompilationOutcome:
        try:
            return Compiled(self.compile(input_path, output_path))
        except CompilationFailed as e:
            return Failed(e)
