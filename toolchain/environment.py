from __future__ import annotations

import ast
import importlib.machinery
import importlib.util
import logging
import re
import sys
import zipfile
from contextlib import ExitStack
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .base import ToolchainError
from .configuration import CompilationConfiguration

logger = logging.getLogger("plugin_compiler")

_NON_IDENTIFIER = re.compile(r"\W")


@dataclass(frozen=True, slots=True)
class BytecodeTarget:
    magic: bytes
    suffix: str
    optimize: int


class EnvironmentConfigFiles(Enum):
    BYTECODE_CONFIG_FILES = BytecodeTarget(
        magic=importlib.util.MAGIC_NUMBER,
        suffix=importlib.machinery.BYTECODE_SUFFIXES[0],
        optimize=0,
    )


@dataclass(frozen=True, slots=True)
class ScriptDescriptor:
    class_name: str
    package: str = ""

    @property
    def fq_name(self) -> str:
        if self.package:
            return f"{self.package}.{self.class_name}"
        return self.class_name


@dataclass(slots=True)
class SourceUnit:
    path: Path
    text: str
    source_bytes: bytes
    tree: ast.Module | None = None
    syntax_error: SyntaxError | None = None
    script: ScriptDescriptor | None = None


def script_class_name(path: Path) -> str:
    name = _NON_IDENTIFIER.sub("_", path.stem)
    if not name:
        return "_"
    if name[0].isdigit():
        return "_" + name
    return name[0].upper() + name[1:]


def declared_package(tree: ast.Module) -> str | None:
    """Return the literal ``__package__`` declared at module level, if any."""
    for node in tree.body:
        if not isinstance(node, ast.Assign) or len(node.targets) != 1:
            continue
        target = node.targets[0]
        if isinstance(target, ast.Name) and target.id == "__package__":
            if isinstance(node.value, ast.Constant) and isinstance(node.value.value, str):
                return node.value.value
            return None
    return None


class SymbolIndex:
    """Resolves top-level module names against an ordered classpath."""

    def __init__(self, entries: tuple[Path, ...], scope: ExitStack) -> None:
        self.entries = entries
        self._scope = scope
        self._archives: dict[Path, zipfile.ZipFile] = {}
        self._archive_names: dict[Path, set[str]] = {}
        self._suffixes = importlib.machinery.all_suffixes()

    def locate(self, module: str) -> Path | None:
        top = module.split(".", 1)[0]
        for entry in self.entries:
            if entry.is_dir():
                if self._dir_provides(entry, top):
                    return entry
            elif entry in self._archive_names or (entry.is_file() and zipfile.is_zipfile(entry)):
                if top in self._archive_top_names(entry):
                    return entry
        return None

    def resolves(self, module: str) -> bool:
        top = module.split(".", 1)[0]
        if top in sys.builtin_module_names:
            return True
        return self.locate(top) is not None

    def _dir_provides(self, entry: Path, name: str) -> bool:
        if (entry / name).is_dir():
            return True
        return any((entry / f"{name}{suffix}").is_file() for suffix in self._suffixes)

    def _archive_top_names(self, entry: Path) -> set[str]:
        names = self._archive_names.get(entry)
        if names is not None:
            return names

        archive = self._archives.get(entry)
        if archive is None:
            try:
                archive = zipfile.ZipFile(entry)
            except (OSError, zipfile.BadZipFile) as e:
                raise ToolchainError(f"Cannot open classpath archive {entry}: {e}") from e
            self._scope.callback(archive.close)
            self._archives[entry] = archive

        names = set()
        for member in archive.namelist():
            head, sep, _ = member.partition("/")
            if sep:
                names.add(head)
                continue
            for suffix in self._suffixes:
                if member.endswith(suffix):
                    names.add(member[: -len(suffix)])
                    break
        self._archive_names[entry] = names
        return names


class CompilationEnvironment:
    def __init__(
        self,
        configuration: CompilationConfiguration,
        target: BytecodeTarget,
        source_files: list[SourceUnit],
        symbols: SymbolIndex,
    ) -> None:
        self.configuration = configuration
        self.target = target
        self.symbols = symbols
        self._source_files = source_files
        self._disposed = False

    @classmethod
    def create(
        cls,
        scope: ExitStack,
        configuration: CompilationConfiguration,
        config_files: EnvironmentConfigFiles,
    ) -> "CompilationEnvironment":
        definition = configuration.script_template
        units = [cls._load_unit(path, definition.is_script(path.name)) for path in configuration.source_roots]
        symbols = SymbolIndex(configuration.classpath_entries, scope)
        environment = cls(configuration, config_files.value, units, symbols)
        scope.callback(environment._dispose)
        logger.debug("environment created for %s (%d classpath entries)", configuration.module_name, len(symbols.entries))
        return environment

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def source_files(self) -> list[SourceUnit]:
        if self._disposed:
            raise ToolchainError("Compilation environment has already been disposed")
        return list(self._source_files)

    def _dispose(self) -> None:
        self._disposed = True
        logger.debug("environment disposed for %s", self.configuration.module_name)

    @staticmethod
    def _load_unit(path: Path, is_script: bool) -> SourceUnit:
        try:
            source_bytes = path.read_bytes()
        except OSError as e:
            raise ToolchainError(f"Cannot read source {path}: {e}") from e

        try:
            text = importlib.util.decode_source(source_bytes)
        except (SyntaxError, UnicodeDecodeError, LookupError) as e:
            raise ToolchainError(f"Cannot decode source {path}: {e}") from e

        unit = SourceUnit(path=path, text=text, source_bytes=source_bytes)
        try:
            unit.tree = ast.parse(source_bytes, filename=str(path))
        except SyntaxError as e:
            unit.syntax_error = e
        except (ValueError, MemoryError, RecursionError) as e:
            raise ToolchainError(f"Cannot parse source {path}: {e}") from e

        if is_script:
            package = declared_package(unit.tree) if unit.tree is not None else None
            unit.script = ScriptDescriptor(class_name=script_class_name(path), package=package or "")
        return unit
