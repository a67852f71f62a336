from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class OutputFile:
    relative_path: str
    data: bytes

    def as_bytes(self) -> bytes:
        return self.data


@dataclass(slots=True)
class OutputFactory:
    _files: dict[str, OutputFile] = field(default_factory=dict)

    def add(self, relative_path: str, data: bytes) -> OutputFile:
        output = OutputFile(relative_path=relative_path, data=data)
        self._files[relative_path] = output
        return output

    def get(self, relative_path: str) -> OutputFile | None:
        return self._files.get(relative_path)

    def as_list(self) -> list[OutputFile]:
        return list(self._files.values())


@dataclass(slots=True)
class GenerationState:
    factory: OutputFactory = field(default_factory=OutputFactory)
