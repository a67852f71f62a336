import importlib.machinery
import importlib.util
import logging
from pathlib import Path
from typing import Any, List, Optional

import pytest

from driver import CurrentExecutionContext
from toolchain import PluginScript, ScriptDefinition

REPO_ROOT = Path(__file__).resolve().parents[1]


class FakeExecutionContext:
    def __init__(self, boot: Optional[List[str]], loaded: Optional[List[Any]]) -> None:
        self.boot = boot
        self.loaded = loaded

    def boot_locations(self) -> Optional[List[str]]:
        return self.boot

    def loaded_binary_locations(self) -> Optional[List[Any]]:
        return self.loaded


def load_compiled_module(path: Path, name: str):
    """Execute a generated .pyc without touching sys.modules."""
    loader = importlib.machinery.SourcelessFileLoader(name, str(path))
    spec = importlib.util.spec_from_loader(name, loader)
    module = importlib.util.module_from_spec(spec)
    loader.exec_module(module)
    return module


@pytest.fixture
def stdlib_locations() -> List[str]:
    return CurrentExecutionContext().boot_locations() or []


@pytest.fixture
def classpath(stdlib_locations: List[str]) -> List[Path]:
    """Standard library plus the repository root, enough to resolve the default template."""
    return [Path(p) for p in stdlib_locations] + [REPO_ROOT]


@pytest.fixture
def fake_context(stdlib_locations: List[str]) -> FakeExecutionContext:
    return FakeExecutionContext(boot=list(stdlib_locations), loaded=[str(REPO_ROOT)])


@pytest.fixture
def template() -> ScriptDefinition:
    return ScriptDefinition.from_annotated_template(PluginScript)


@pytest.fixture
def write_script(tmp_path: Path):
    def _write(relative: str, text: str) -> Path:
        path = tmp_path / "scripts" / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture(autouse=True)
def _capture_compiler_logs(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="plugin_compiler")
