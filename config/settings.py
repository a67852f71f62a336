from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from driver.discovery import DEFAULT_SCRIPT_SUFFIX, MAX_SEARCH_DEPTH

from .parser import load_json_or_jsonc

DEFAULT_SCRIPT_TEMPLATE = "toolchain.template:PluginScript"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True, slots=True)
class CompilerSettings:
    script_suffix: str = DEFAULT_SCRIPT_SUFFIX
    max_search_depth: int = MAX_SEARCH_DEPTH
    script_template: str = DEFAULT_SCRIPT_TEMPLATE
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not isinstance(self.script_suffix, str) or not self.script_suffix:
            raise ValueError("settings.script_suffix must be a non-empty string")
        if isinstance(self.max_search_depth, bool) or not isinstance(self.max_search_depth, int):
            raise ValueError("settings.max_search_depth must be an integer")
        if self.max_search_depth < 0:
            raise ValueError("settings.max_search_depth cannot be negative")
        if not isinstance(self.script_template, str) or ":" not in self.script_template:
            raise ValueError("settings.script_template must look like 'module:Class'")
        if not isinstance(self.log_level, str) or self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(f"settings.log_level must be one of {sorted(_LOG_LEVELS)}")

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level.upper())

    def override(self, **changes: Any) -> "CompilerSettings":
        """Return a copy with every non-``None`` value of ``changes`` applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def settings_from_mapping(data: dict[str, Any]) -> CompilerSettings:
    known = {f.name for f in fields(CompilerSettings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown settings: {', '.join(unknown)}")
    return CompilerSettings(**data)


def load_settings(config_path: Path | None = None) -> CompilerSettings:
    if config_path is None:
        return CompilerSettings()
    return settings_from_mapping(load_json_or_jsonc(config_path))
