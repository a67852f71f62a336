from __future__ import annotations

import logging

from .analysis import analyze
from .base import ToolchainError
from .codegen import generate
from .environment import CompilationEnvironment
from .output import GenerationState

logger = logging.getLogger("plugin_compiler")


class ScriptToolchain:
    """Analyses and generates bytecode for every source file of an environment."""

    def __init__(self) -> None:
        from . import load_builtin_checks

        load_builtin_checks()

    def analyze_and_generate(self, environment: CompilationEnvironment) -> GenerationState | None:
        configuration = environment.configuration
        if not configuration.retain_output_in_memory:
            raise ToolchainError("Generated output must be retained in memory")

        analysed = []
        failed = False
        for unit in environment.source_files:
            ctx = analyze(environment, unit)
            if ctx is None or ctx.error_count:
                failed = True
                continue
            analysed.append(ctx)

        if failed:
            logger.debug("module=%s analysis failed", configuration.module_name)
            return None

        state = GenerationState()
        for ctx in analysed:
            generate(ctx, environment.target, state.factory)
        logger.debug("module=%s generated %d output(s)", configuration.module_name, len(state.factory.as_list()))
        return state
